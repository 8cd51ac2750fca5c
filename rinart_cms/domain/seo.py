from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from .common import CamelModel, StringList


class PageSeo(CamelModel):
    slug: str
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    og_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PageSeoUpdate(CamelModel):
    slug: str = ""
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: StringList = Field(default_factory=list)
    og_image_url: Optional[str] = None

    @field_validator("slug", mode="before")
    @classmethod
    def _slug_text(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("title", "description", mode="before")
    @classmethod
    def _trimmed(cls, value: Any) -> Optional[str]:
        return value.strip() if isinstance(value, str) else None

    @field_validator("og_image_url", mode="before")
    @classmethod
    def _image(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()


class SeoDefaults(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    og_image_url: Optional[str] = None


class StaticSeoPage(CamelModel):
    slug: str
    label: str
    path: str
    defaults: SeoDefaults


class SeoOverride(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    og_image_url: Optional[str] = None


class PageSeoEntry(StaticSeoPage):
    seo: SeoOverride


class PageSeoListResponse(CamelModel):
    pages: list[PageSeoEntry]


class PageSeoEntryResponse(CamelModel):
    page: PageSeoEntry


class ResolvedPageSeo(CamelModel):
    """Override merged over the static defaults, as rendered in page metadata."""

    slug: str
    path: str
    label: str
    title: str
    description: str
    keywords: list[str] = Field(default_factory=list)
    og_image_url: Optional[str] = None
    canonical_url: str
