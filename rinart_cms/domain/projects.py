from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from .common import CamelModel, FactList, NullableText, StringList
from .media import MediaAsset


class ProjectMedia(CamelModel):
    id: int
    project_id: int
    url: str
    caption: Optional[str] = None
    kind: str
    order: int
    created_at: datetime


class ProjectScheme(CamelModel):
    id: int
    project_id: int
    title: str
    url: str
    order: int
    created_at: datetime


class Project(CamelModel):
    """Project row with its media and schemes, as edited in the admin panel."""

    id: int
    slug: str
    title: str
    tagline: Optional[str] = None
    location: Optional[str] = None
    year: Optional[str] = None
    area: Optional[str] = None
    scope: Optional[str] = None
    intro: Optional[str] = None
    hero_image_url: Optional[str] = None
    order: int = 0
    categories: list[str] = Field(default_factory=list)
    content: Optional[dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
    media: list[ProjectMedia] = Field(default_factory=list)
    schemes: list[ProjectScheme] = Field(default_factory=list)


class ProjectFields(CamelModel):
    """Editable project fields shared by the create and update bodies."""

    tagline: NullableText = None
    location: NullableText = None
    year: NullableText = None
    area: NullableText = None
    scope: NullableText = None
    intro: NullableText = None
    hero_image_url: NullableText = None
    categories: StringList = Field(default_factory=list)
    description_body: StringList = Field(default_factory=list)
    description_html: Optional[str] = None
    facts: FactList = Field(default_factory=list)
    seo_title: NullableText = None
    seo_description: NullableText = None
    seo_keywords: StringList = Field(default_factory=list)
    seo_og_image: NullableText = None

    @field_validator("description_html", mode="before")
    @classmethod
    def _html_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class ProjectCreate(ProjectFields):
    slug: NullableText = None
    title: NullableText = None
    order: Optional[int] = None

    @field_validator("order", mode="before")
    @classmethod
    def _order_number(cls, value: Any) -> Optional[int]:
        return _coerce_order(value)


class ProjectUpdate(ProjectFields):
    slug: Optional[str] = None
    title: Optional[str] = None
    order: Optional[int] = None

    @field_validator("slug", "title", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("order", mode="before")
    @classmethod
    def _order_number(cls, value: Any) -> int:
        return _coerce_order(value) or 0


class GalleryItemInput(CamelModel):
    url: str
    caption: Optional[str] = None

    @field_validator("caption", mode="before")
    @classmethod
    def _caption_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class SchemeItemInput(CamelModel):
    url: str
    title: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _title_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class ProjectMediaReplace(CamelModel):
    """Body of the media replace call; ``featureImageUrl`` is applied only when sent."""

    feature_image_url: NullableText = None
    gallery: list[GalleryItemInput] = Field(default_factory=list)
    schemes: list[SchemeItemInput] = Field(default_factory=list)

    @field_validator("gallery", "schemes", mode="before")
    @classmethod
    def _items_with_url(cls, value: Any) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict) and isinstance(item.get("url"), str)]


class ProjectReorderRequest(CamelModel):
    order: list[str] = Field(default_factory=list)

    @field_validator("order", mode="before")
    @classmethod
    def _slugs(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]


class ProjectResponse(CamelModel):
    project: Project


class ProjectListResponse(CamelModel):
    projects: list[Project]
    media_library: list[MediaAsset]


class ProjectSummary(CamelModel):
    id: int
    slug: str
    title: str
    tagline: Optional[str] = None
    hero_image_url: Optional[str] = None
    order: int
    categories: list[str] = Field(default_factory=list)
    created_at: datetime


class GalleryImage(CamelModel):
    id: int
    url: str
    caption: Optional[str] = None
    order: int


class SchemeImage(CamelModel):
    id: int
    title: str
    url: str
    order: int


class ProjectDetail(CamelModel):
    """Public view of a project with derived hero image and description."""

    id: int
    slug: str
    title: str
    tagline: Optional[str] = None
    location: Optional[str] = None
    year: Optional[str] = None
    area: Optional[str] = None
    scope: Optional[str] = None
    intro: Optional[str] = None
    hero_image_url: Optional[str] = None
    description_body: list[str] = Field(default_factory=list)
    description_html: Optional[str] = None
    facts: list[dict[str, str]] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    gallery: list[GalleryImage] = Field(default_factory=list)
    schemes: list[SchemeImage] = Field(default_factory=list)
    seo: Optional[dict[str, Any]] = None


class ProjectSummaryListResponse(CamelModel):
    projects: list[ProjectSummary]


class ProjectDetailResponse(CamelModel):
    project: ProjectDetail


def _coerce_order(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)
