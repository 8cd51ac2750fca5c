from __future__ import annotations

from datetime import datetime

import structlog
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_settings
from ..db import get_session
from ..domain.auth import AdminSession
from ..repositories.admin import AdminRepository, SqlAlchemyAdminRepository
from ..repositories.media_library import MediaLibraryRepository, SqlAlchemyMediaLibraryRepository
from ..repositories.page_seo import PageSeoRepository, SqlAlchemyPageSeoRepository
from ..repositories.projects import ProjectsRepository, SqlAlchemyProjectsRepository
from ..repositories.site_settings import (
    GlobalBlocksRepository,
    SiteSettingsRepository,
    SqlAlchemyGlobalBlocksRepository,
    SqlAlchemySiteSettingsRepository,
)
from ..repositories.team import SqlAlchemyTeamRepository, TeamRepository
from ..services.catalogs import ProjectCatalog, PublicCaches, TeamRoster
from ..services.global_blocks import GlobalBlocksService
from ..services.revalidation import RevalidationService
from ..services.site_settings import SiteSettingsService

logger = structlog.get_logger(__name__)


async def get_projects_repository(
    session: AsyncSession = Depends(get_session),
) -> ProjectsRepository:
    return SqlAlchemyProjectsRepository(session)


async def get_media_library_repository(
    session: AsyncSession = Depends(get_session),
) -> MediaLibraryRepository:
    return SqlAlchemyMediaLibraryRepository(session)


async def get_team_repository(
    session: AsyncSession = Depends(get_session),
) -> TeamRepository:
    return SqlAlchemyTeamRepository(session)


async def get_page_seo_repository(
    session: AsyncSession = Depends(get_session),
) -> PageSeoRepository:
    return SqlAlchemyPageSeoRepository(session)


async def get_site_settings_repository(
    session: AsyncSession = Depends(get_session),
) -> SiteSettingsRepository:
    return SqlAlchemySiteSettingsRepository(session)


async def get_global_blocks_repository(
    session: AsyncSession = Depends(get_session),
) -> GlobalBlocksRepository:
    return SqlAlchemyGlobalBlocksRepository(session)


async def get_admin_repository(
    session: AsyncSession = Depends(get_session),
) -> AdminRepository:
    return SqlAlchemyAdminRepository(session)


def get_public_caches(request: Request) -> PublicCaches:
    caches = getattr(request.app.state, "caches", None)
    if caches is None:
        caches = PublicCaches.create(get_settings().cache_ttl_seconds)
        request.app.state.caches = caches
    return caches


def get_revalidation_service(request: Request) -> RevalidationService:
    service = getattr(request.app.state, "revalidation", None)
    if service is None:
        service = RevalidationService.from_settings()
        request.app.state.revalidation = service
    return service


async def get_project_catalog(
    repository: ProjectsRepository = Depends(get_projects_repository),
    caches: PublicCaches = Depends(get_public_caches),
) -> ProjectCatalog:
    return ProjectCatalog(repository, caches)


async def get_team_roster(
    repository: TeamRepository = Depends(get_team_repository),
    caches: PublicCaches = Depends(get_public_caches),
) -> TeamRoster:
    return TeamRoster(repository, caches)


async def get_site_settings_service(
    repository: SiteSettingsRepository = Depends(get_site_settings_repository),
    caches: PublicCaches = Depends(get_public_caches),
) -> SiteSettingsService:
    return SiteSettingsService(repository, caches.site_settings)


async def get_global_blocks_service(
    repository: GlobalBlocksRepository = Depends(get_global_blocks_repository),
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> GlobalBlocksService:
    return GlobalBlocksService(repository, settings_service)


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


async def assert_admin(
    request: Request,
    admin_repo: AdminRepository = Depends(get_admin_repository),
) -> AdminSession:
    """Resolve the admin session cookie or reject the request with 401."""

    token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        raise _unauthorized()

    now = datetime.utcnow()
    await admin_repo.delete_expired_sessions(now)
    session = await admin_repo.find_session(token)
    if session is None:
        raise _unauthorized()
    if session.expires_at <= now:
        await admin_repo.delete_session(token)
        logger.info("auth.session_expired", login=session.user.login)
        raise _unauthorized()
    return session
