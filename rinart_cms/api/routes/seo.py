from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from ...domain.seo import PageSeoEntryResponse, PageSeoListResponse, PageSeoUpdate
from ...repositories.page_seo import PageSeoRepository
from ...services.page_seo import STATIC_SEO_PAGES, get_static_page, serialise_page
from ...services.revalidation import RevalidationService
from ..dependencies import assert_admin, get_page_seo_repository, get_revalidation_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/seo", tags=["seo"], dependencies=[Depends(assert_admin)])


@router.get("", response_model=PageSeoListResponse)
async def list_page_seo(
    seo_repo: PageSeoRepository = Depends(get_page_seo_repository),
) -> PageSeoListResponse:
    """Static pages with their overrides; pages without a row are seeded from the defaults."""

    records = {record.slug: record for record in await seo_repo.list_all()}
    for page in STATIC_SEO_PAGES:
        if page.slug in records:
            continue
        records[page.slug] = await seo_repo.upsert(
            page.slug,
            title=page.defaults.title,
            description=page.defaults.description,
            keywords=page.defaults.keywords,
            og_image_url=page.defaults.og_image_url,
        )
        logger.info("seo.page_seeded", slug=page.slug)
    return PageSeoListResponse(pages=[serialise_page(page, records.get(page.slug)) for page in STATIC_SEO_PAGES])


@router.put("", response_model=PageSeoEntryResponse)
async def update_page_seo(
    payload: PageSeoUpdate,
    seo_repo: PageSeoRepository = Depends(get_page_seo_repository),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> PageSeoEntryResponse:
    if not payload.slug:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug is required")
    page = get_static_page(payload.slug)
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown page")

    record = await seo_repo.upsert(
        page.slug,
        title=payload.title,
        description=payload.description,
        keywords=payload.keywords,
        og_image_url=payload.og_image_url,
    )
    await revalidation.revalidate([page.path])
    return PageSeoEntryResponse(page=serialise_page(page, record))
