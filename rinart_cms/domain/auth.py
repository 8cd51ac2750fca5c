from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from .common import CamelModel


class LoginRequest(CamelModel):
    login: str = ""
    password: str = ""
    recaptcha_token: Optional[str] = None

    @field_validator("login", "password", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


@dataclass
class AdminUser:
    id: int
    login: str
    password_hash: str


@dataclass
class AdminSession:
    """A live admin session resolved from the session cookie."""

    token: str
    user: AdminUser
    expires_at: datetime


class SessionInfo(CamelModel):
    login: str
    expires_at: datetime
