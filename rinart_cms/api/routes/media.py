from __future__ import annotations

from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from ...domain.common import SuccessResponse
from ...domain.media import (
    MediaAssetCreate,
    MediaAssetDelete,
    MediaAssetResponse,
    MediaLibraryResponse,
    UploadResponse,
)
from ...repositories.media_library import MediaLibraryRepository
from ...services.catalogs import PublicCaches
from ...services.page_seo import PUBLIC_PATHS
from ...services.revalidation import RevalidationService
from ...services.uploads import (
    UploadError,
    fetch_remote_image,
    is_local_upload,
    remove_local_upload,
    store_image,
)
from ..dependencies import (
    assert_admin,
    get_media_library_repository,
    get_public_caches,
    get_revalidation_service,
)

router = APIRouter(
    prefix="/api/admin/media",
    tags=["media"],
    dependencies=[Depends(assert_admin)],
)


@router.post("/upload", response_model=UploadResponse)
async def upload_media(file: UploadFile | None = File(default=None)) -> UploadResponse:
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is required")
    data = await file.read()
    try:
        stored = await store_image(data, file.content_type, file.filename)
    except UploadError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return UploadResponse(
        url=stored.url,
        original_name=stored.original_name,
        size=stored.size,
        mime_type=stored.mime_type,
    )


@router.get("/library", response_model=MediaLibraryResponse)
async def list_library(
    media_repo: MediaLibraryRepository = Depends(get_media_library_repository),
) -> MediaLibraryResponse:
    return MediaLibraryResponse(assets=await media_repo.list_assets())


@router.post("/library", response_model=MediaAssetResponse)
async def add_library_asset(
    payload: MediaAssetCreate,
    media_repo: MediaLibraryRepository = Depends(get_media_library_repository),
) -> MediaAssetResponse:
    """Register an image URL; remote images are downloaded into the uploads directory first."""

    if not payload.url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image URL is required")

    url, title = payload.url, payload.title
    if is_local_upload(url):
        title = title or PurePosixPath(url).name
    elif url.startswith(("http://", "https://")):
        try:
            stored = await fetch_remote_image(url)
        except UploadError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        url, title = stored.url, title or stored.original_name or PurePosixPath(stored.url).name

    asset = await media_repo.create(url, title)
    return MediaAssetResponse(asset=asset)


@router.delete("/library", response_model=SuccessResponse)
async def delete_library_asset(
    payload: MediaAssetDelete,
    media_repo: MediaLibraryRepository = Depends(get_media_library_repository),
    caches: PublicCaches = Depends(get_public_caches),
    revalidation: RevalidationService = Depends(get_revalidation_service),
) -> SuccessResponse:
    if not payload.id and not payload.url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Asset id or URL is required")

    removal = await media_repo.delete(asset_id=payload.id or None, url=payload.url)
    if removal is None:
        return SuccessResponse()

    remove_local_upload(removal.url)
    caches.clear()
    paths = list(PUBLIC_PATHS) + [f"/{slug}" for slug in sorted(removal.project_slugs)]
    await revalidation.revalidate(paths)
    return SuccessResponse()
