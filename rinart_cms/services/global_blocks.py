from __future__ import annotations

from typing import Any

import structlog

from ..domain.settings import GlobalBlocks, ImageBlock
from ..repositories.site_settings import GlobalBlocksRepository
from .site_settings import SiteSettingsService

logger = structlog.get_logger(__name__)

HOME_HERO = "home-hero"
PAGE_TRANSITION = "page-transition"
BLOCK_SLUGS = (HOME_HERO, PAGE_TRANSITION)

BLOCK_TITLES = {
    HOME_HERO: "Главная фотография",
    PAGE_TRANSITION: "Логотип загрузки/перехода",
}

# Legacy appearance fields that seed each block.
APPEARANCE_SOURCES = {
    HOME_HERO: "home_hero_image_url",
    PAGE_TRANSITION: "transition_image_url",
}


def pick_image_url(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    value = data.get("imageUrl")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class GlobalBlocksService:
    """Image slots shared by every page, seeded from the appearance settings."""

    def __init__(self, repository: GlobalBlocksRepository, settings: SiteSettingsService) -> None:
        self._repository = repository
        self._settings = settings

    async def get_blocks(self) -> GlobalBlocks:
        stored = await self._repository.list_all()
        images = {slug: pick_image_url(stored.get(slug)) for slug in BLOCK_SLUGS}

        if not all(images.values()):
            appearance = await self._settings.get_appearance()
            for slug, field_name in APPEARANCE_SOURCES.items():
                fallback = getattr(appearance, field_name)
                if images[slug] or not fallback:
                    continue
                images[slug] = fallback
                await self._repository.upsert(slug, {"imageUrl": fallback})
                logger.info("blocks.seeded", slug=slug)

        return GlobalBlocks.model_validate(
            {slug: ImageBlock(image_url=url) for slug, url in images.items()}
        )

    async def get_block(self, slug: str) -> ImageBlock:
        return ImageBlock(image_url=pick_image_url(await self._repository.get(slug)))

    async def save_block(self, slug: str, image_url: Any) -> ImageBlock:
        if slug not in BLOCK_SLUGS:
            raise ValueError(f"Unknown content slug: {slug}")
        cleaned = image_url.strip() if isinstance(image_url, str) and image_url.strip() else None
        saved = await self._repository.upsert(slug, {"imageUrl": cleaned})
        return ImageBlock(image_url=pick_image_url(saved))
