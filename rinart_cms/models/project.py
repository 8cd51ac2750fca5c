"""SQLAlchemy models for projects and their media rows."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.session import Base


class MediaKind(str, Enum):
    FEATURE = "FEATURE"
    GALLERY = "GALLERY"
    SCHEME = "SCHEME"


class ProjectModel(Base):
    """Portfolio project shown on the home page and its own detail page."""

    __tablename__ = "Project"
    __table_args__ = (Index("Project_order_idx", "order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(191), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    tagline: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    year: Mapped[str | None] = mapped_column(Text, nullable=True)
    area: Mapped[str | None] = mapped_column(Text, nullable=True)
    scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    intro: Mapped[str | None] = mapped_column(Text, nullable=True)
    hero_image_url: Mapped[str | None] = mapped_column("heroImageUrl", Text, nullable=True)
    order: Mapped[int] = mapped_column("order", Integer, default=0, nullable=False)
    categories: Mapped[object | None] = mapped_column(JSON, nullable=True)
    content: Mapped[object | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=False), default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt",
        DateTime(timezone=False),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


class ProjectMediaModel(Base):
    __tablename__ = "ProjectMedia"
    __table_args__ = (Index("ProjectMedia_project_order_idx", "projectId", "order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        "projectId",
        Integer,
        ForeignKey("Project.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    kind: Mapped[str] = mapped_column(
        SAEnum("FEATURE", "GALLERY", "SCHEME", name="project_media_kind"),
        default=MediaKind.GALLERY.value,
        nullable=False,
    )
    order: Mapped[int] = mapped_column("order", Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=False), default=datetime.utcnow, nullable=False
    )


class ProjectSchemeModel(Base):
    __tablename__ = "ProjectScheme"
    __table_args__ = (Index("ProjectScheme_project_order_idx", "projectId", "order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        "projectId",
        Integer,
        ForeignKey("Project.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=False), default=datetime.utcnow, nullable=False
    )
