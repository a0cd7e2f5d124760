"""
Los Inmaduros Backend — Photo Storage Service
==============================================

What:  Validates uploaded images and stores/deletes them on the configured
       backend (local disk or Supabase Storage).
Why:   Centralizes every storage operation behind one interface so the photo
       service never cares where bytes end up.
How:   Validation runs before any byte is written; files get a generated
       unique name inside a folder chosen by the photo context.
Who:   Called by PhotoService for uploads, cover replacement and deletes.

Security Model:
    1. MIME allow-list:   JPEG, PNG, GIF, WebP only
    2. Extension check:   extension of the (sanitized) original name must
                          match the declared MIME type
    3. Size check:        5MB by default (settings.max_file_size)
    4. Generated names:   `<epoch-ms>-<random>.<ext>`; no user input reaches
                          the storage path except the validated extension

Storage Layout (both backends):
    routes/1730899200000-3f9a1c2e.jpg
    route-calls/covers/...
    route-calls/gallery/...
    general/...
"""

import asyncio
import logging
import os
import re
import secrets
import time
from pathlib import Path
from typing import Any, Optional, Tuple

import aiofiles
from supabase import Client, create_client

from inmaduros.config import settings
from inmaduros.constants import DEFAULT_PHOTO_FOLDER, PHOTO_FOLDERS
from inmaduros.exceptions import FileStorageError, ValidationError
from inmaduros.models.enums import PhotoContext

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# MIME type → extensions accepted for it
ALLOWED_MIME_TYPES = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/jpg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
}

LOCAL_URL_PREFIX = "/api/files/"
MAX_FILENAME_LENGTH = 255

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_DOT_RUNS = re.compile(r"\.{2,}")


def sanitize_filename(filename: str) -> str:
    """
    Make a client-supplied filename safe to log or reuse.

        "../../../etc/passwd.jpg"  → "_._._etc_passwd.jpg"
        "...hidden-file.jpg"       → "hidden-file.jpg"
    """
    sanitized = _UNSAFE_CHARS.sub("_", filename)
    sanitized = _DOT_RUNS.sub(".", sanitized)
    sanitized = sanitized.lstrip(".")
    return sanitized[:MAX_FILENAME_LENGTH]


def get_folder_by_context(context: Optional[PhotoContext]) -> str:
    if context is None:
        return DEFAULT_PHOTO_FOLDER
    return PHOTO_FOLDERS.get(context, DEFAULT_PHOTO_FOLDER)


class StorageService:
    """
    Manages image validation, upload and removal.

    The Supabase client is created on first use so that local development
    and the test suite never need Supabase credentials.
    """

    def __init__(
        self,
        backend: Optional[str] = None,
        storage_root: Optional[str] = None,
    ):
        self.backend = backend or settings.storage_backend
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.bucket = settings.supabase_bucket
        self._supabase: Optional[Client] = None
        if self.backend == "local":
            self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("StorageService initialized with backend=%s", self.backend)

    @property
    def supabase(self) -> Client:
        if self._supabase is None:
            if not settings.supabase_url or not settings.supabase_service_role_key:
                raise FileStorageError(
                    message="Photo storage is not configured",
                    context={"backend": "supabase"},
                )
            self._supabase = create_client(settings.supabase_url, settings.supabase_service_role_key)
        return self._supabase

    # ── Validation ────────────────────────────────────────────────────────

    def validate_image(self, filename: str, content_type: Optional[str], size: int) -> str:
        """
        Validate an uploaded image.

        Returns:
            The normalized extension to store the file with.

        Raises:
            ValidationError with a message the client can act on.
        """
        mime_type = (content_type or "").lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message="Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed.",
                field="file",
                context={"content_type": mime_type},
            )

        if size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File too large. Maximum file size is {max_mb:.0f}MB.",
                field="file",
                context={"size": size, "max_size": settings.max_file_size},
            )

        if size == 0:
            raise ValidationError(message="Uploaded file is empty", field="file")

        safe_name = sanitize_filename(filename or "")
        extension = Path(safe_name).suffix.lower().lstrip(".")
        allowed_extensions = ALLOWED_MIME_TYPES[mime_type]
        if extension not in allowed_extensions:
            raise ValidationError(
                message=(
                    f"File extension '.{extension}' does not match content type '{mime_type}'"
                    if extension
                    else "File name must have an image extension"
                ),
                field="file",
                context={"extension": extension, "allowed": list(allowed_extensions)},
            )
        return extension

    # ── Upload / Delete ───────────────────────────────────────────────────

    def _generate_object_path(self, folder: str, extension: str) -> str:
        unique_name = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{extension}"
        return f"{folder}/{unique_name}"

    async def upload_file(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        context: Optional[PhotoContext] = None,
    ) -> str:
        """
        Validate and store an image.

        Returns:
            Public URL of the stored image.
        """
        extension = self.validate_image(filename, content_type, len(content))
        object_path = self._generate_object_path(get_folder_by_context(context), extension)

        if self.backend == "supabase":
            return await self._upload_supabase(object_path, content, content_type)
        return await self._upload_local(object_path, content)

    async def _upload_local(self, object_path: str, content: bytes) -> str:
        absolute_path = self.storage_root / object_path
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": object_path, "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", object_path, len(content))
        return f"{LOCAL_URL_PREFIX}{object_path}"

    async def _upload_supabase(self, object_path: str, content: bytes, content_type: str) -> str:
        bucket = self.supabase.storage.from_(self.bucket)
        try:
            # The SDK is synchronous; keep it off the event loop
            await asyncio.to_thread(
                bucket.upload,
                path=object_path,
                file=content,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except Exception as e:
            logger.error("Supabase upload failed for %s: %s", object_path, str(e))
            raise FileStorageError(
                message="Failed to upload file to storage",
                context={"path": object_path, "error": str(e)},
            )

        logger.info("File uploaded to bucket %s: %s (%d bytes)", self.bucket, object_path, len(content))
        return bucket.get_public_url(object_path)

    def object_path_from_url(self, file_url: str) -> Optional[str]:
        """Map a stored public URL back to its object path (None if foreign)."""
        if file_url.startswith(LOCAL_URL_PREFIX):
            return file_url[len(LOCAL_URL_PREFIX):]
        marker = f"/storage/v1/object/public/{self.bucket}/"
        if marker in file_url:
            return file_url.split(marker, 1)[1]
        return None

    async def delete_file(self, file_url: str) -> None:
        """
        Remove a stored image.

        Best-effort: a failure is logged and never fails the request, since
        the database change (soft delete, cover replacement) must go through.
        """
        object_path = self.object_path_from_url(file_url)
        if object_path is None:
            logger.warning("Unrecognized file URL, skipping deletion: %s", file_url)
            return

        try:
            if file_url.startswith(LOCAL_URL_PREFIX):
                path = (self.storage_root / object_path).resolve()
                if not path.is_relative_to(self.storage_root):
                    logger.warning("Refusing to delete outside storage root: %s", object_path)
                    return
                if path.exists():
                    os.remove(path)
                    logger.info("Deleted file: %s", object_path)
                else:
                    logger.debug("Delete: file already gone: %s", object_path)
            else:
                bucket = self.supabase.storage.from_(self.bucket)
                await asyncio.to_thread(bucket.remove, [object_path])
                logger.info("Deleted object %s from bucket %s", object_path, self.bucket)
        except Exception as e:
            logger.warning("Failed to delete file %s: %s", file_url, str(e))

    def health(self) -> Tuple[str, Any]:
        """Cheap availability probe used by GET /health."""
        if self.backend == "local":
            writable = os.access(self.storage_root, os.W_OK)
            return ("available" if writable else "unavailable"), str(self.storage_root)
        configured = bool(settings.supabase_url and settings.supabase_service_role_key)
        return ("available" if configured else "unavailable"), self.bucket


# ── Singleton Instance ────────────────────────────────────────────────────
storage_service = StorageService()
