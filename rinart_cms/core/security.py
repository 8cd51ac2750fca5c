"""Security utilities for password hashing and admin session tokens."""

from __future__ import annotations

import asyncio
import random
import secrets
from datetime import datetime, timedelta

from passlib.context import CryptContext

from .config import get_settings

SESSION_TOKEN_BYTES = 32

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a stored hash."""

    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in the table; treat as a mismatch.
        return False


def generate_session_token() -> str:
    """Return a random 64 character hex token."""

    return secrets.token_hex(SESSION_TOKEN_BYTES)


def session_expiry(now: datetime | None = None) -> datetime:
    settings = get_settings()
    return (now or datetime.utcnow()) + timedelta(seconds=settings.session_max_age_seconds)


async def failed_login_delay() -> None:
    """Sleep a random interval so failed logins take a similar amount of time."""

    settings = get_settings()
    low = settings.login_failure_delay_min_ms
    high = max(low, settings.login_failure_delay_max_ms)
    await asyncio.sleep(random.randint(low, high) / 1000)
