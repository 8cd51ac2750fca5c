#!/usr/bin/env python3
"""
Re-encode images already stored in the uploads directory.

Every local upload referenced from the database is passed through the same
optimiser as new uploads. When the result has a different extension the new
file is written next to the old one, references are rewritten and the old
file is removed.

Usage:
    python scripts/optimize_existing_media.py            # convert and rewrite
    python scripts/optimize_existing_media.py --dry-run  # only report
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from anyio import to_thread
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rinart_cms.core.config import get_settings
from rinart_cms.core.logging import configure_logging
from rinart_cms.db import dispose_engine, get_sessionmaker, init_db, transaction
from rinart_cms.models import (
    GlobalBlockModel,
    MediaAssetModel,
    PageSeoModel,
    ProjectMediaModel,
    ProjectModel,
    ProjectSchemeModel,
    TeamMemberModel,
)
from rinart_cms.services.image_optimization import optimize_image
from rinart_cms.services.uploads import (
    UPLOADS_URL_PREFIX,
    content_type_for,
    resolve_upload_path,
    sanitise_base_name,
)

logger = structlog.get_logger("rinart_cms.scripts.optimize_existing_media")

SKIPPED_EXTENSIONS = {".svg", ".gif", ".webp", ".avif"}

# (model, attribute) pairs holding a single image URL.
URL_COLUMNS = (
    (MediaAssetModel, "url"),
    (ProjectModel, "hero_image_url"),
    (ProjectMediaModel, "url"),
    (ProjectSchemeModel, "url"),
    (PageSeoModel, "og_image_url"),
    (TeamMemberModel, "image_url"),
    (TeamMemberModel, "mobile_image_url"),
)


@dataclass
class Conversion:
    """A re-encoded upload whose source file is removed once references are committed."""

    url: str
    source: Path
    target: Path


def _unique_target(directory: Path, base_name: str, extension: str) -> Path:
    candidate = directory / f"{base_name}{extension}"
    counter = 1
    while candidate.exists():
        candidate = directory / f"{base_name}-{counter}{extension}"
        counter += 1
    return candidate


def optimise_file(url: str, *, dry_run: bool) -> Conversion | None:
    """Write the re-encoded copy of ``url``; None when the file is left alone."""

    if not url.startswith(UPLOADS_URL_PREFIX):
        return None
    path = resolve_upload_path(url[len(UPLOADS_URL_PREFIX):])
    if path is None or not path.is_file():
        logger.warning("media.optimize_existing.missing", url=url)
        return None
    extension = path.suffix.lower()
    if extension in SKIPPED_EXTENSIONS:
        return None

    data = path.read_bytes()
    if not data:
        return None
    optimised = optimize_image(data, content_type_for(path), extension)
    if optimised.extension == extension:
        return None

    target = _unique_target(path.parent, sanitise_base_name(path.name), optimised.extension)
    new_url = f"{UPLOADS_URL_PREFIX}{target.relative_to(get_settings().uploads_path).as_posix()}"
    if not dry_run:
        target.write_bytes(optimised.data)
    return Conversion(url=new_url, source=path, target=target)


class MediaOptimiser:
    def __init__(self, session: AsyncSession, *, dry_run: bool) -> None:
        self._session = session
        self._dry_run = dry_run
        self._converted: dict[str, Conversion | None] = {}

    async def _convert(self, url: Any) -> str | None:
        if not isinstance(url, str) or not url:
            return None
        if url not in self._converted:
            self._converted[url] = await to_thread.run_sync(
                lambda: optimise_file(url, dry_run=self._dry_run)
            )
        conversion = self._converted[url]
        return conversion.url if conversion else None

    def _conversions(self) -> list[Conversion]:
        return [conversion for conversion in self._converted.values() if conversion is not None]

    async def process_column(self, model: type, attribute: str) -> int:
        updated = 0
        result = await self._session.execute(select(model))
        for row in result.scalars().all():
            current = getattr(row, attribute)
            new_url = await self._convert(current)
            if not new_url or new_url == current:
                continue
            logger.info("media.optimize_existing.updated", table=model.__tablename__, id=row.id, url=new_url)
            if not self._dry_run:
                setattr(row, attribute, new_url)
            updated += 1
        return updated

    async def process_global_blocks(self) -> int:
        updated = 0
        result = await self._session.execute(select(GlobalBlockModel))
        for block in result.scalars().all():
            data = block.data if isinstance(block.data, dict) else None
            if data is None:
                continue
            new_url = await self._convert(data.get("imageUrl"))
            if not new_url:
                continue
            logger.info("media.optimize_existing.updated", table="GlobalBlock", slug=block.slug, url=new_url)
            if not self._dry_run:
                block.data = {**data, "imageUrl": new_url}
            updated += 1
        return updated

    async def run(self) -> int:
        """Rewrite every reference, then drop the files they no longer point at.

        Old files are removed only after the commit; when the rewrite fails the
        new copies are removed instead and the database keeps the old URLs.
        """

        try:
            async with transaction(self._session):
                total = 0
                for model, attribute in URL_COLUMNS:
                    total += await self.process_column(model, attribute)
                total += await self.process_global_blocks()
        except Exception:
            if not self._dry_run:
                for conversion in self._conversions():
                    conversion.target.unlink(missing_ok=True)
            raise
        if not self._dry_run:
            for conversion in self._conversions():
                conversion.source.unlink(missing_ok=True)
        return total


async def run(dry_run: bool) -> int:
    await init_db()
    try:
        async with get_sessionmaker()() as session:
            total = await MediaOptimiser(session, dry_run=dry_run).run()
    finally:
        await dispose_engine()
    logger.info("media.optimize_existing.completed", references=total, dry_run=dry_run)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Re-encode existing uploads and rewrite references")
    parser.add_argument("--dry-run", action="store_true", help="Report conversions without writing")
    args = parser.parse_args(argv)
    configure_logging()
    return asyncio.run(run(args.dry_run))


if __name__ == "__main__":
    sys.exit(main())
