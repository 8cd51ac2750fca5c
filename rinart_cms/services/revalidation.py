"""Notifies the page renderer that public paths changed."""

from __future__ import annotations

from typing import Iterable

import httpx
import structlog

from ..core.config import get_settings
from ..telemetry import REVALIDATIONS

logger = structlog.get_logger(__name__)

REVALIDATE_TIMEOUT_SECONDS = 5.0


class RevalidationService:
    """Posts changed paths to the renderer webhook, or just logs them when none is set."""

    def __init__(
        self,
        *,
        webhook_url: str | None,
        secret: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._secret = secret
        self._client = client

    @classmethod
    def from_settings(cls) -> "RevalidationService":
        settings = get_settings()
        return cls(webhook_url=settings.revalidate_webhook_url, secret=settings.revalidate_secret)

    async def revalidate(self, paths: Iterable[str]) -> None:
        unique = list(dict.fromkeys(path for path in paths if path))
        if not unique:
            return
        logger.info("revalidate.paths", paths=unique)
        if not self._webhook_url:
            REVALIDATIONS.labels(outcome="logged").inc()
            return

        headers = {"X-Revalidate-Secret": self._secret} if self._secret else {}
        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(timeout=REVALIDATE_TIMEOUT_SECONDS)
        try:
            response = await client.post(self._webhook_url, json={"paths": unique}, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            REVALIDATIONS.labels(outcome="failed").inc()
            logger.warning("revalidate.request_failed", paths=unique, error=str(exc))
        else:
            REVALIDATIONS.labels(outcome="sent").inc()
        finally:
            if owns_client:
                await client.aclose()
