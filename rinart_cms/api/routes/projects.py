from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from ...domain.common import SuccessResponse
from ...domain.projects import (
    Project,
    ProjectCreate,
    ProjectListResponse,
    ProjectMediaReplace,
    ProjectReorderRequest,
    ProjectResponse,
    ProjectUpdate,
)
from ...repositories.media_library import MediaLibraryRepository
from ...repositories.projects import ProjectNotFoundError, ProjectsRepository, SlugConflictError
from ...services.catalogs import ProjectCatalog
from ...services.content import build_content, build_seo_payload, parse_content
from ...services.revalidation import RevalidationService
from ...services.slug import slug_service
from ..dependencies import (
    assert_admin,
    get_media_library_repository,
    get_project_catalog,
    get_projects_repository,
    get_revalidation_service,
)

router = APIRouter(
    prefix="/api/admin/projects",
    tags=["projects"],
    dependencies=[Depends(assert_admin)],
)

SCALAR_FIELDS = ("tagline", "location", "year", "area", "scope", "intro", "hero_image_url")
SEO_FIELDS = ("seo_title", "seo_description", "seo_keywords", "seo_og_image")


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


def _content_from_create(payload: ProjectCreate) -> dict[str, Any] | None:
    seo = build_seo_payload(
        title=payload.seo_title,
        description=payload.seo_description,
        keywords=payload.seo_keywords,
        og_image=payload.seo_og_image,
    )
    return build_content(payload.description_body, payload.facts, seo, payload.description_html)


def _content_from_update(payload: ProjectUpdate, existing: Project) -> dict[str, Any] | None:
    """Rebuild the content document, keeping every section the request did not send."""

    current = parse_content(existing.content)
    current_seo = current.seo or {}
    body = payload.description_body if payload.provided("description_body") else current.body
    facts = payload.facts if payload.provided("facts") else current.facts
    seo = build_seo_payload(
        title=payload.seo_title if payload.provided("seo_title") else current_seo.get("title"),
        description=(
            payload.seo_description
            if payload.provided("seo_description")
            else current_seo.get("description")
        ),
        keywords=payload.seo_keywords if payload.provided("seo_keywords") else current_seo.get("keywords"),
        og_image=payload.seo_og_image if payload.provided("seo_og_image") else current_seo.get("ogImage"),
    )
    html = (
        payload.description_html
        if payload.provided("description_html") and payload.description_html is not None
        else current.html
    )
    return build_content(body, facts, seo, html)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    projects_repo: ProjectsRepository = Depends(get_projects_repository),
    media_repo: MediaLibraryRepository = Depends(get_media_library_repository),
) -> ProjectListResponse:
    projects = await projects_repo.list_all_with_relations()
    media_library = await media_repo.list_assets()
    return ProjectListResponse(projects=projects, media_library=media_library)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    projects_repo: ProjectsRepository = Depends(get_projects_repository),
    catalog: ProjectCatalog = Depends(get_project_catalog),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> ProjectResponse:
    if not payload.title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug and title are required")

    if payload.slug:
        slug = payload.slug.strip()
        if await projects_repo.get_id_by_slug(slug) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Project with this slug already exists",
            )
    else:
        base = slug_service.generate_slug(payload.title)
        slug = slug_service.ensure_unique_slug(base, await projects_repo.list_slugs())

    data = {
        "slug": slug,
        "title": payload.title.strip(),
        "categories": payload.categories,
        "content": _content_from_create(payload),
    }
    data.update({name: getattr(payload, name) for name in SCALAR_FIELDS})
    try:
        project = await projects_repo.create(data, order=payload.order)
    except SlugConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Project with this slug already exists",
        ) from exc

    catalog.invalidate(slug)
    await revalidation.revalidate(["/", f"/{slug}"])
    return ProjectResponse(project=project)


@router.post("/reorder", response_model=SuccessResponse)
async def reorder_projects(
    payload: ProjectReorderRequest,
    projects_repo: ProjectsRepository = Depends(get_projects_repository),
    catalog: ProjectCatalog = Depends(get_project_catalog),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> SuccessResponse:
    await projects_repo.reorder(payload.order)
    catalog.invalidate_all()
    await revalidation.revalidate(["/"])
    return SuccessResponse()


@router.get("/{slug}", response_model=ProjectResponse)
async def get_project(
    slug: str,
    projects_repo: ProjectsRepository = Depends(get_projects_repository),
) -> ProjectResponse:
    project = await projects_repo.get_by_slug(slug)
    if project is None:
        raise _not_found()
    return ProjectResponse(project=project)


@router.patch("/{slug}", response_model=ProjectResponse)
async def update_project(
    slug: str,
    payload: ProjectUpdate,
    projects_repo: ProjectsRepository = Depends(get_projects_repository),
    catalog: ProjectCatalog = Depends(get_project_catalog),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> ProjectResponse:
    existing = await projects_repo.get_by_slug(slug)
    if existing is None:
        raise _not_found()

    updates: dict[str, Any] = {}
    if payload.provided("title"):
        updates["title"] = payload.title or existing.title
    if payload.provided("slug") and payload.slug and payload.slug != slug:
        if await projects_repo.get_id_by_slug(payload.slug) is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Slug already in use")
        updates["slug"] = payload.slug
    for name in SCALAR_FIELDS:
        if payload.provided(name):
            updates[name] = getattr(payload, name)
    if payload.provided("order"):
        updates["order"] = payload.order
    if payload.provided("categories"):
        updates["categories"] = payload.categories
    if payload.provided("description_body", "facts", "description_html", *SEO_FIELDS):
        updates["content"] = _content_from_update(payload, existing)

    try:
        project = await projects_repo.update(slug, updates)
    except SlugConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Slug already in use") from exc
    if project is None:
        raise _not_found()

    new_slug = updates.get("slug", slug)
    catalog.invalidate(slug)
    catalog.invalidate(new_slug)
    await revalidation.revalidate(["/", f"/{slug}", f"/{new_slug}"])
    return ProjectResponse(project=project)


@router.delete("/{slug}", response_model=SuccessResponse)
async def delete_project(
    slug: str,
    projects_repo: ProjectsRepository = Depends(get_projects_repository),
    catalog: ProjectCatalog = Depends(get_project_catalog),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> SuccessResponse:
    await projects_repo.delete(slug)
    catalog.invalidate(slug)
    await revalidation.revalidate(["/", f"/{slug}"])
    return SuccessResponse()


@router.post("/{slug}/media", response_model=SuccessResponse)
async def replace_project_media(
    slug: str,
    payload: ProjectMediaReplace,
    projects_repo: ProjectsRepository = Depends(get_projects_repository),
    catalog: ProjectCatalog = Depends(get_project_catalog),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> SuccessResponse:
    options: dict[str, Any] = {
        "gallery": [item.model_dump() for item in payload.gallery],
        "schemes": [item.model_dump() for item in payload.schemes],
    }
    if payload.provided("feature_image_url"):
        options["feature_image_url"] = payload.feature_image_url
    try:
        await projects_repo.replace_media(slug, **options)
    except ProjectNotFoundError as exc:
        raise _not_found() from exc

    catalog.invalidate(slug)
    await revalidation.revalidate(["/", f"/{slug}"])
    return SuccessResponse()
