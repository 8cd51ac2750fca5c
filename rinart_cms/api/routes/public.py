from __future__ import annotations

from xml.sax.saxutils import escape

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import PlainTextResponse

from ...core.config import get_settings
from ...domain.projects import ProjectDetailResponse, ProjectSummaryListResponse
from ...domain.seo import ResolvedPageSeo
from ...domain.settings import (
    AppearanceResponse,
    ContactSettingsResponse,
    FounderBiographyResponse,
    GlobalBlocksResponse,
    PublicationsResponse,
)
from ...domain.team import TeamListResponse
from ...repositories.page_seo import PageSeoRepository
from ...repositories.projects import ProjectsRepository
from ...services.catalogs import ProjectCatalog, TeamRoster
from ...services.global_blocks import GlobalBlocksService
from ...services.page_seo import canonical_url, get_static_page, resolve_page_seo
from ...services.site_settings import SiteSettingsService
from ..dependencies import (
    get_global_blocks_service,
    get_page_seo_repository,
    get_project_catalog,
    get_projects_repository,
    get_site_settings_service,
    get_team_roster,
)

router = APIRouter(tags=["public"])

FRESH_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate"}

# Static pages in sitemap order.
SITEMAP_PATHS = ("/", "/proektirovanie", "/masterskaja", "/kontakty")


@router.get("/api/projects", response_model=ProjectSummaryListResponse)
async def list_projects(catalog: ProjectCatalog = Depends(get_project_catalog)) -> ProjectSummaryListResponse:
    return ProjectSummaryListResponse(projects=await catalog.list_summaries())


@router.get("/api/projects/{slug}", response_model=ProjectDetailResponse)
async def get_project(slug: str, catalog: ProjectCatalog = Depends(get_project_catalog)) -> ProjectDetailResponse:
    project = await catalog.get_detail(slug)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return ProjectDetailResponse(project=project)


@router.get("/api/team", response_model=TeamListResponse)
async def list_team(roster: TeamRoster = Depends(get_team_roster)) -> TeamListResponse:
    return TeamListResponse(members=await roster.list_members())


@router.get("/api/settings/contact", response_model=ContactSettingsResponse)
async def get_contact(
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> ContactSettingsResponse:
    return ContactSettingsResponse(
        contact=await settings_service.get_contact(),
        socials=await settings_service.get_social_links(),
    )


@router.get("/api/settings/appearance", response_model=AppearanceResponse)
async def get_appearance(
    response: Response,
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> AppearanceResponse:
    response.headers.update(FRESH_HEADERS)
    return AppearanceResponse(appearance=await settings_service.get_appearance())


@router.get("/api/settings/global-blocks", response_model=GlobalBlocksResponse)
async def get_global_blocks(
    response: Response,
    blocks_service: GlobalBlocksService = Depends(get_global_blocks_service),
) -> GlobalBlocksResponse:
    response.headers.update(FRESH_HEADERS)
    return GlobalBlocksResponse(blocks=await blocks_service.get_blocks())


@router.get("/api/publications", response_model=PublicationsResponse)
async def get_publications(
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> PublicationsResponse:
    return PublicationsResponse(publications=await settings_service.get_publications())


@router.get("/api/founder-biography", response_model=FounderBiographyResponse)
async def get_founder_biography(
    settings_service: SiteSettingsService = Depends(get_site_settings_service),
) -> FounderBiographyResponse:
    return FounderBiographyResponse(biography=await settings_service.get_founder_biography())


@router.get("/api/seo/{slug}", response_model=ResolvedPageSeo)
async def get_page_seo(
    slug: str,
    seo_repo: PageSeoRepository = Depends(get_page_seo_repository),
) -> ResolvedPageSeo:
    page = get_static_page(slug)
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown page")
    return resolve_page_seo(page, await seo_repo.get(slug), get_settings().site_url)


@router.get("/sitemap.xml", include_in_schema=False)
async def sitemap(projects_repo: ProjectsRepository = Depends(get_projects_repository)) -> Response:
    site_url = get_settings().site_url
    entries = [f"  <url><loc>{escape(canonical_url(site_url, path))}</loc></url>" for path in SITEMAP_PATHS]
    for project in await projects_repo.list_all():
        modified = project.updated_at.date().isoformat()
        location = escape(canonical_url(site_url, f"/{project.slug}"))
        entries.append(f"  <url><loc>{location}</loc><lastmod>{modified}</lastmod></url>")
    body = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            *entries,
            "</urlset>",
        ]
    )
    return Response(content=body, media_type="application/xml")


@router.get("/robots.txt", include_in_schema=False, response_class=PlainTextResponse)
async def robots() -> str:
    site_url = get_settings().site_url.rstrip("/")
    return "\n".join(
        [
            "User-agent: *",
            "Allow: /",
            "Disallow: /admin",
            "Disallow: /api",
            "",
            f"Host: {site_url}",
            f"Sitemap: {site_url}/sitemap.xml",
            "",
        ]
    )

