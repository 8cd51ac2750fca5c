from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...domain.settings import (
    AppearanceResponse,
    AppearanceUpdate,
    ContactSettingsResponse,
    ContactSettingsUpdate,
    FounderBiographyResponse,
    FounderBiographyUpdate,
    GlobalBlocksResponse,
    GlobalBlocksUpdate,
    PublicationsResponse,
    PublicationsUpdate,
    SocialLinksResponse,
    SocialLinksUpdate,
)
from ...services.global_blocks import BLOCK_SLUGS, GlobalBlocksService
from ...services.page_seo import PUBLIC_PATHS
from ...services.revalidation import RevalidationService
from ...services.site_settings import SiteSettingsService, merge_social_links
from ..dependencies import (
    assert_admin,
    get_global_blocks_service,
    get_revalidation_service,
    get_site_settings_service,
)

router = APIRouter(prefix="/api/admin", tags=["settings"], dependencies=[Depends(assert_admin)])

NO_STORE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _no_store(response: Response) -> None:
    response.headers.update(NO_STORE_HEADERS)


@router.get("/settings/contact", response_model=ContactSettingsResponse)
async def get_contact_settings(
    response: Response,
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> ContactSettingsResponse:
    _no_store(response)
    return ContactSettingsResponse(
        contact=await settings_service.get_contact(),
        socials=await settings_service.get_social_links(),
    )


@router.put("/settings/contact", response_model=ContactSettingsResponse)
async def update_contact_settings(
    payload: ContactSettingsUpdate,
    response: Response,
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> ContactSettingsResponse:
    contact = (
        await settings_service.save_contact(payload.contact)
        if payload.contact
        else await settings_service.get_contact()
    )
    socials = (
        await settings_service.save_social_links(payload.socials)
        if payload.socials
        else await settings_service.get_social_links()
    )
    settings_service.invalidate()
    await revalidation.revalidate(PUBLIC_PATHS)
    _no_store(response)
    return ContactSettingsResponse(contact=contact, socials=socials)


@router.get("/social", response_model=SocialLinksResponse)
async def get_social_links(
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> SocialLinksResponse:
    return SocialLinksResponse(links=await settings_service.get_social_links())


@router.put("/social", response_model=SocialLinksResponse)
async def update_social_links(
    payload: SocialLinksUpdate,
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> SocialLinksResponse:
    """Edit labels and URLs of existing links; links are matched by id."""

    current = await settings_service.get_social_links()
    merged = merge_social_links(current, payload.links)
    saved = await settings_service.save_social_links([link.model_dump(by_alias=True) for link in merged])
    await revalidation.revalidate(PUBLIC_PATHS)
    return SocialLinksResponse(links=saved)


@router.get("/settings/appearance", response_model=AppearanceResponse)
async def get_appearance(
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> AppearanceResponse:
    return AppearanceResponse(appearance=await settings_service.get_appearance())


@router.put("/settings/appearance", response_model=AppearanceResponse)
async def update_appearance(
    payload: AppearanceUpdate,
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> AppearanceResponse:
    appearance = await settings_service.save_appearance(payload.appearance)
    await revalidation.revalidate(["/"])
    return AppearanceResponse(appearance=appearance)


@router.get("/publications", response_model=PublicationsResponse)
async def get_publications(
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> PublicationsResponse:
    return PublicationsResponse(publications=await settings_service.get_publications())


@router.put("/publications", response_model=PublicationsResponse)
async def update_publications(
    payload: PublicationsUpdate,
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> PublicationsResponse:
    if not isinstance(payload.publications, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Publications must be an array")
    publications = await settings_service.save_publications(payload.publications)
    await revalidation.revalidate(["/masterskaja"])
    return PublicationsResponse(publications=publications)


@router.get("/founder-biography", response_model=FounderBiographyResponse)
async def get_founder_biography(
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> FounderBiographyResponse:
    return FounderBiographyResponse(biography=await settings_service.get_founder_biography())


@router.put("/founder-biography", response_model=FounderBiographyResponse)
async def update_founder_biography(
    payload: FounderBiographyUpdate,
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> FounderBiographyResponse:
    if not isinstance(payload.biography, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Biography must be an array")
    biography = await settings_service.save_founder_biography(payload.biography)
    await revalidation.revalidate(["/masterskaja"])
    return FounderBiographyResponse(biography=biography)


@router.get("/settings/global-blocks", response_model=GlobalBlocksResponse)
async def get_global_blocks(
    response: Response,
    blocks_service: GlobalBlocksService = Depends(get_global_blocks_service),
) -> GlobalBlocksResponse:
    _no_store(response)
    return GlobalBlocksResponse(blocks=await blocks_service.get_blocks())


@router.put("/settings/global-blocks", response_model=GlobalBlocksResponse)
async def update_global_blocks(
    payload: GlobalBlocksUpdate,
    response: Response,
    blocks_service: GlobalBlocksService = Depends(get_global_blocks_service),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> GlobalBlocksResponse:
    unknown = [slug for slug in payload.blocks if slug not in BLOCK_SLUGS]
    if unknown:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown content slug")
    for slug, data in payload.blocks.items():
        image_url = data.get("imageUrl") if isinstance(data, dict) else None
        await blocks_service.save_block(slug, image_url)
    blocks = await blocks_service.get_blocks()
    await revalidation.revalidate(["/", "/proektirovanie"])
    _no_store(response)
    return GlobalBlocksResponse(blocks=blocks)
