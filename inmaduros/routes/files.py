"""
Serves uploads stored by the local storage backend.

With STORAGE_BACKEND=supabase photos are served by Supabase directly and
this endpoint answers 404 for everything.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from inmaduros.exceptions import NotFoundError, ValidationError
from inmaduros.services.storage_service import storage_service

router = APIRouter(prefix="/api", tags=["Files"])


@router.get(
    "/files/{file_path:path}",
    summary="Serve an uploaded image",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found"},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    """
    Security:
        - Path is resolved relative to STORAGE_ROOT and must stay inside it
        - Only regular files are served
    """
    if storage_service.backend != "local":
        raise NotFoundError(message="File not found", resource="file", resource_id=file_path)

    storage_root = storage_service.storage_root
    full_path = (storage_root / file_path).resolve()

    # Prevents ../ traversal out of the storage root
    if not full_path.is_relative_to(storage_root):
        raise ValidationError(message="Invalid file path", field="file_path")

    if not full_path.is_file():
        raise NotFoundError(message="File not found", resource="file", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
