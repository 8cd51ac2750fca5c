from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from .common import CamelModel


class TeamMember(CamelModel):
    id: int
    name: str
    role: Optional[str] = None
    label: Optional[str] = None
    image_url: Optional[str] = None
    mobile_image_url: Optional[str] = None
    is_featured: bool = False
    order: int = 0
    created_at: datetime
    updated_at: datetime


class TeamMemberCreate(CamelModel):
    name: str = ""
    role: Optional[str] = None
    label: Optional[str] = None
    image_url: Optional[str] = None
    mobile_image_url: Optional[str] = None
    is_featured: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _name_text(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("role", "label", "image_url", "mobile_image_url", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("is_featured", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


class TeamMemberUpdate(CamelModel):
    """Partial update; an explicit null clears the optional text fields."""

    name: Optional[str] = None
    role: Optional[str] = None
    label: Optional[str] = None
    image_url: Optional[str] = None
    mobile_image_url: Optional[str] = None
    is_featured: Optional[bool] = None
    order: Optional[int] = None


class TeamReorderRequest(CamelModel):
    order: list[Any] = []

    def member_ids(self) -> list[int]:
        ids: list[int] = []
        for item in self.order:
            if isinstance(item, bool):
                continue
            try:
                number = float(item)
            except (TypeError, ValueError):
                continue
            if number.is_integer() and number > 0:
                ids.append(int(number))
        return ids


class TeamListResponse(CamelModel):
    members: list[TeamMember]


class TeamMemberResponse(CamelModel):
    member: TeamMember
