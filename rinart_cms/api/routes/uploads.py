from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from ...services.uploads import content_type_for, resolve_upload_path

router = APIRouter(prefix="/uploads", tags=["uploads"])

IMMUTABLE_CACHE = "public, max-age=31536000, immutable"


@router.get("/{file_path:path}", include_in_schema=False)
async def serve_upload(file_path: str) -> FileResponse:
    """Serve a stored upload; file names are content-unique so responses are cached forever."""

    path = resolve_upload_path(file_path)
    if path is None or not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return FileResponse(
        path,
        media_type=content_type_for(path),
        headers={"Cache-Control": IMMUTABLE_CACHE},
    )
