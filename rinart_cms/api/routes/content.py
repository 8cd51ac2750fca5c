from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from ...domain.settings import ContentItem, ContentItemResponse, ContentItemUpdate, ContentListResponse
from ...services.global_blocks import BLOCK_SLUGS, BLOCK_TITLES, GlobalBlocksService
from ...services.revalidation import RevalidationService
from ..dependencies import assert_admin, get_global_blocks_service, get_revalidation_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/content", tags=["content"], dependencies=[Depends(assert_admin)])


@router.get("", response_model=ContentListResponse)
async def list_content(
    blocks_service: GlobalBlocksService = Depends(get_global_blocks_service),
) -> ContentListResponse:
    blocks = (await blocks_service.get_blocks()).model_dump(by_alias=True)
    items = [
        ContentItem(slug=slug, title=BLOCK_TITLES[slug], image_url=blocks[slug]["imageUrl"])
        for slug in BLOCK_SLUGS
    ]
    return ContentListResponse(items=items)


@router.patch("/{slug}", response_model=ContentItemResponse)
async def update_content(
    slug: str,
    payload: ContentItemUpdate,
    blocks_service: GlobalBlocksService = Depends(get_global_blocks_service),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> ContentItemResponse:
    slug = slug.strip()
    if slug not in BLOCK_SLUGS:
        logger.warning("content.unknown_slug", slug=slug)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown content slug")
    saved = await blocks_service.save_block(slug, payload.image_url)
    await revalidation.revalidate(["/"])
    return ContentItemResponse(
        item=ContentItem(slug=slug, title=BLOCK_TITLES[slug], image_url=saved.image_url)
    )
