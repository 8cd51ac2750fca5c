"""Local storage for uploaded images under the configured uploads directory."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse
from uuid import uuid4

import httpx
import structlog
from anyio import to_thread

from ..core.config import get_settings
from .image_optimization import get_mime_extension, optimize_image

logger = structlog.get_logger(__name__)

UPLOADS_URL_PREFIX = "/uploads/"

CONTENT_TYPES = {
    ".webp": "image/webp",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".avif": "image/avif",
}

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]+")


class UploadError(ValueError):
    """Raised for files that cannot be accepted; ``status_code`` is the HTTP answer."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class StoredUpload:
    url: str
    original_name: str | None
    size: int
    mime_type: str
    path: Path


def sanitise_base_name(filename: str | None) -> str:
    stem = PurePosixPath(filename or "").stem.lower()
    return _UNSAFE_CHARS.sub("-", stem).strip("-") or "image"


def validate_image_payload(data: bytes, mime_type: str | None) -> str:
    if not mime_type or not mime_type.startswith("image/"):
        raise UploadError("Only image uploads are supported")
    if not data:
        raise UploadError("Empty file")
    if len(data) > get_settings().max_upload_size_bytes:
        raise UploadError("File is too large", status_code=413)
    return mime_type


async def store_image(data: bytes, mime_type: str | None, filename: str | None) -> StoredUpload:
    """Validate, optimise and write an image, returning its public ``/uploads`` URL."""

    mime_type = validate_image_payload(data, mime_type)
    original_extension = PurePosixPath(filename or "").suffix.lower() or get_mime_extension(mime_type)
    optimized = await to_thread.run_sync(optimize_image, data, mime_type, original_extension)

    uploads_dir = get_settings().uploads_path
    uploads_dir.mkdir(parents=True, exist_ok=True)
    stored_name = f"{sanitise_base_name(filename)}-{uuid4()}{optimized.extension}"
    target = uploads_dir / stored_name
    await to_thread.run_sync(target.write_bytes, optimized.data)

    logger.info(
        "media.upload_stored",
        file=stored_name,
        original_size=len(data),
        stored_size=len(optimized.data),
        mime_type=optimized.mime_type,
    )
    return StoredUpload(
        url=f"{UPLOADS_URL_PREFIX}{stored_name}",
        original_name=filename,
        size=len(optimized.data),
        mime_type=optimized.mime_type,
        path=target,
    )


async def fetch_remote_image(url: str, client: httpx.AsyncClient | None = None) -> StoredUpload:
    """Download an image over HTTP(S) and store it like a regular upload."""

    settings = get_settings()
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=settings.remote_fetch_timeout_seconds, follow_redirects=True)
    try:
        response = await http.get(url)
    except httpx.HTTPError as exc:
        raise UploadError(f"Failed to download image: {exc}") from exc
    finally:
        if owns_client:
            await http.aclose()

    if response.status_code >= 400:
        raise UploadError(f"Failed to download image: HTTP {response.status_code}")
    mime_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    filename = PurePosixPath(urlparse(url).path).name or None
    return await store_image(response.content, mime_type, filename)


def is_local_upload(url: str | None) -> bool:
    return bool(url) and url.startswith(UPLOADS_URL_PREFIX)


def resolve_upload_path(relative: str) -> Path | None:
    """Absolute path of a file inside the uploads directory, or None for unsafe paths."""

    if not relative or ".." in relative or relative.startswith("/") or "\\" in relative:
        return None
    root = get_settings().uploads_path
    candidate = (root / relative).resolve()
    if root != candidate and root not in candidate.parents:
        return None
    return candidate


def content_type_for(path: Path) -> str:
    return CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream")


def remove_local_upload(url: str | None) -> bool:
    """Delete the file behind an ``/uploads/...`` URL; failures are logged and ignored."""

    if not url or not is_local_upload(url):
        return False
    path = resolve_upload_path(url[len(UPLOADS_URL_PREFIX):])
    if path is None:
        return False
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.warning("media.unlink_failed", url=url, error=str(exc))
        return False
    return True
