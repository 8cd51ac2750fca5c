from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from .common import CamelModel


class MediaAsset(CamelModel):
    id: int
    url: str
    title: Optional[str] = None
    created_at: datetime


class MediaAssetCreate(CamelModel):
    url: str = ""
    title: Optional[str] = None

    @field_validator("url", mode="before")
    @classmethod
    def _url_text(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("title", mode="before")
    @classmethod
    def _title_text(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()


class MediaAssetDelete(CamelModel):
    id: Optional[int] = None
    url: Optional[str] = None

    @field_validator("url", mode="before")
    @classmethod
    def _url_text(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()


class MediaLibraryResponse(CamelModel):
    assets: list[MediaAsset]


class MediaAssetResponse(CamelModel):
    asset: MediaAsset


class UploadResponse(CamelModel):
    url: str
    original_name: Optional[str] = None
    size: int
    mime_type: str
