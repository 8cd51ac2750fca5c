"""SQLAlchemy ORM models used by the API layer."""

from .admin import AdminSessionModel, AdminUserModel
from .media import MediaAssetModel
from .page_seo import PageSeoModel
from .project import MediaKind, ProjectMediaModel, ProjectModel, ProjectSchemeModel
from .settings import GlobalBlockModel, SiteSettingModel
from .team import TeamMemberModel

__all__ = [
    "AdminSessionModel",
    "AdminUserModel",
    "GlobalBlockModel",
    "MediaAssetModel",
    "MediaKind",
    "PageSeoModel",
    "ProjectMediaModel",
    "ProjectModel",
    "ProjectSchemeModel",
    "SiteSettingModel",
    "TeamMemberModel",
]
