"""
Re-encoding of uploaded images.

Uploaded and downloaded images are converted to AVIF when an encoder is
available, with WebP as the fallback. Animated or vector formats (GIF, SVG)
are stored as they are, and the original bytes are kept when every encoder
fails.
"""

from __future__ import annotations

import io
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

import structlog
from PIL import Image, ImageOps, UnidentifiedImageError, features

from ..core.config import get_settings
from ..telemetry import IMAGE_CONVERSIONS

logger = structlog.get_logger(__name__)

MIME_EXTENSION_MAP = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/avif": ".avif",
    "image/heic": ".heic",
    "image/heif": ".heif",
    "image/gif": ".gif",
    "image/svg+xml": ".svg",
    "image/tiff": ".tiff",
}

NON_CONVERTIBLE_MIME = {"image/gif", "image/svg+xml"}

AVIFENC_TIMEOUT_SECONDS = 120


@dataclass
class OptimizedImage:
    data: bytes
    extension: str
    mime_type: str


def get_mime_extension(mime_type: str | None) -> str | None:
    if not mime_type:
        return None
    return MIME_EXTENSION_MAP.get(mime_type.lower())


def optimize_image(data: bytes, mime_type: str, original_extension: str | None = None) -> OptimizedImage:
    """Return AVIF, then WebP, then the untouched input, whichever succeeds first."""

    default_extension = original_extension or MIME_EXTENSION_MAP.get(mime_type, ".bin")
    original = OptimizedImage(data=data, extension=default_extension, mime_type=mime_type)
    if not data or mime_type in NON_CONVERTIBLE_MIME:
        IMAGE_CONVERSIONS.labels(encoder="skipped").inc()
        return original

    try:
        image = _load(data)
    except (UnidentifiedImageError, OSError) as exc:
        logger.warning("media.optimize.decode_failed", mime_type=mime_type, error=str(exc))
        IMAGE_CONVERSIONS.labels(encoder="skipped").inc()
        return original

    for label, encoder in (("avif", encode_avif), ("avifenc", encode_avif_external), ("webp", encode_webp)):
        try:
            encoded = encoder(image)
        except (OSError, ValueError, RuntimeError, subprocess.SubprocessError) as exc:
            logger.warning(f"media.optimize.{label}_failed", error=str(exc))
            continue
        if encoded is not None and encoded.data:
            IMAGE_CONVERSIONS.labels(encoder=label).inc()
            return encoded

    logger.warning("media.optimize.all_failed", mime_type=mime_type)
    IMAGE_CONVERSIONS.labels(encoder="original").inc()
    return original


def _load(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    image = ImageOps.exif_transpose(image)
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
    return image


def encode_avif(image: Image.Image) -> OptimizedImage | None:
    if not features.check("avif"):
        return None
    buffer = io.BytesIO()
    image.save(buffer, format="AVIF", quality=get_settings().avif_quality)
    return OptimizedImage(data=buffer.getvalue(), extension=".avif", mime_type="image/avif")


def encode_avif_external(image: Image.Image) -> OptimizedImage | None:
    """Run the ``avifenc`` binary against a PNG copy of the image."""

    settings = get_settings()
    binary = shutil.which(settings.avifenc_bin)
    if binary is None:
        return None
    with tempfile.TemporaryDirectory(prefix="rinart-avif-") as workdir:
        source = Path(workdir) / "source.png"
        target = Path(workdir) / "output.avif"
        image.save(source, format="PNG")
        subprocess.run(
            [binary, "-q", str(settings.avif_quality), str(source), str(target)],
            check=True,
            capture_output=True,
            timeout=AVIFENC_TIMEOUT_SECONDS,
        )
        return OptimizedImage(data=target.read_bytes(), extension=".avif", mime_type="image/avif")


def encode_webp(image: Image.Image) -> OptimizedImage:
    buffer = io.BytesIO()
    image.save(buffer, format="WEBP", quality=get_settings().webp_quality, method=4)
    return OptimizedImage(data=buffer.getvalue(), extension=".webp", mime_type="image/webp")
