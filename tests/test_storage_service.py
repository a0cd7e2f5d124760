"""
Los Inmaduros Backend — Storage Service Unit Tests
===================================================

What:  Tests for StorageService validation, local upload and deletion.
Why:   Uploads are the only place where client bytes reach the disk.
How:   Local backend rooted in a pytest tmp_path; Supabase is mocked.

Test Strategy:
    ✅ MIME type allow-list (JPEG, PNG, GIF, WebP)
    ✅ Size limit (5MB) and empty files
    ✅ Extension must match the MIME type
    ✅ Filename sanitization
    ✅ Local upload writes under the context folder, delete removes it
    ✅ Supabase upload goes through the bucket API
"""

from unittest.mock import MagicMock, patch

import pytest

from conftest import PNG_BYTES
from inmaduros.exceptions import FileStorageError, ValidationError
from inmaduros.models import PhotoContext
from inmaduros.services.storage_service import (
    LOCAL_URL_PREFIX,
    StorageService,
    get_folder_by_context,
    sanitize_filename,
)


class TestFilenameHelpers:

    def test_sanitize_replaces_path_separators(self):
        assert sanitize_filename("../../../etc/passwd.jpg") == "_._._etc_passwd.jpg"

    def test_sanitize_strips_leading_dots(self):
        assert sanitize_filename("...hidden-file.jpg") == "hidden-file.jpg"

    def test_sanitize_replaces_spaces_and_accents(self):
        assert sanitize_filename("mi foto añeja.png") == "mi_foto_a_eja.png"

    def test_sanitize_truncates_long_names(self):
        assert len(sanitize_filename("a" * 300 + ".jpg")) == 255

    def test_folder_by_context(self):
        assert get_folder_by_context(PhotoContext.ROUTE_GALLERY) == "routes"
        assert get_folder_by_context(PhotoContext.ROUTE_CALL_COVER) == "route-calls/covers"
        assert get_folder_by_context(PhotoContext.ROUTE_CALL_GALLERY) == "route-calls/gallery"
        assert get_folder_by_context(None) == "general"


class TestImageValidation:

    def setup_method(self):
        self.service = StorageService(backend="local")

    @pytest.mark.parametrize(
        "filename,content_type,expected",
        [
            ("photo.jpg", "image/jpeg", "jpg"),
            ("photo.JPEG", "image/jpeg", "jpeg"),
            ("photo.jpg", "image/jpg", "jpg"),
            ("photo.png", "image/png", "png"),
            ("anim.gif", "image/gif", "gif"),
            ("photo.webp", "image/webp", "webp"),
        ],
    )
    def test_allowed_types(self, filename, content_type, expected):
        assert self.service.validate_image(filename, content_type, 1000) == expected

    def test_rejects_other_mime_types(self):
        with pytest.raises(ValidationError, match="Only JPEG, PNG, GIF, and WebP"):
            self.service.validate_image("doc.pdf", "application/pdf", 1000)

    def test_rejects_missing_content_type(self):
        with pytest.raises(ValidationError, match="Invalid file type"):
            self.service.validate_image("photo.jpg", None, 1000)

    def test_rejects_files_over_5mb(self):
        with pytest.raises(ValidationError, match="Maximum file size is 5MB"):
            self.service.validate_image("big.jpg", "image/jpeg", 5 * 1024 * 1024 + 1)

    def test_accepts_exactly_5mb(self):
        assert self.service.validate_image("big.jpg", "image/jpeg", 5 * 1024 * 1024) == "jpg"

    def test_rejects_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_image("photo.jpg", "image/jpeg", 0)

    def test_rejects_extension_mismatch(self):
        with pytest.raises(ValidationError, match="does not match"):
            self.service.validate_image("photo.exe", "image/png", 1000)

    def test_rejects_missing_extension(self):
        with pytest.raises(ValidationError, match="must have an image extension"):
            self.service.validate_image("photo", "image/png", 1000)


class TestLocalStorage:

    @pytest.mark.asyncio
    async def test_upload_writes_file_under_context_folder(self, tmp_path):
        service = StorageService(backend="local", storage_root=str(tmp_path))

        url = await service.upload_file(PNG_BYTES, "pic.png", "image/png", PhotoContext.ROUTE_GALLERY)

        assert url.startswith(f"{LOCAL_URL_PREFIX}routes/")
        assert url.endswith(".png")
        stored = tmp_path / url[len(LOCAL_URL_PREFIX):]
        assert stored.read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_upload_generates_unique_names(self, tmp_path):
        service = StorageService(backend="local", storage_root=str(tmp_path))

        first = await service.upload_file(PNG_BYTES, "pic.png", "image/png")
        second = await service.upload_file(PNG_BYTES, "pic.png", "image/png")

        assert first != second
        assert first.startswith(f"{LOCAL_URL_PREFIX}general/")

    @pytest.mark.asyncio
    async def test_delete_removes_file(self, tmp_path):
        service = StorageService(backend="local", storage_root=str(tmp_path))
        url = await service.upload_file(PNG_BYTES, "pic.png", "image/png", PhotoContext.ROUTE_CALL_COVER)

        await service.delete_file(url)

        assert not (tmp_path / url[len(LOCAL_URL_PREFIX):]).exists()

    @pytest.mark.asyncio
    async def test_delete_missing_file_is_silent(self, tmp_path):
        service = StorageService(backend="local", storage_root=str(tmp_path))
        await service.delete_file(f"{LOCAL_URL_PREFIX}routes/does-not-exist.png")

    @pytest.mark.asyncio
    async def test_delete_refuses_paths_outside_root(self, tmp_path):
        root = tmp_path / "storage"
        service = StorageService(backend="local", storage_root=str(root))
        outside = tmp_path / "keep.txt"
        outside.write_text("important")

        await service.delete_file(f"{LOCAL_URL_PREFIX}../keep.txt")

        assert outside.exists()

    def test_object_path_from_url(self, tmp_path):
        service = StorageService(backend="local", storage_root=str(tmp_path))
        assert service.object_path_from_url("/api/files/routes/a.png") == "routes/a.png"
        assert (
            service.object_path_from_url(
                f"https://xyz.supabase.co/storage/v1/object/public/{service.bucket}/routes/a.png"
            )
            == "routes/a.png"
        )
        assert service.object_path_from_url("https://example.com/a.png") is None

    def test_health_reports_writable_root(self, tmp_path):
        service = StorageService(backend="local", storage_root=str(tmp_path))
        status, detail = service.health()
        assert status == "available"
        assert detail == str(tmp_path.resolve())


class TestSupabaseStorage:

    @pytest.mark.asyncio
    async def test_upload_uses_bucket_api(self):
        service = StorageService(backend="supabase")
        bucket = MagicMock()
        bucket.get_public_url.return_value = "https://xyz.supabase.co/storage/v1/object/public/photos/x.png"
        client = MagicMock()
        client.storage.from_.return_value = bucket
        service._supabase = client

        url = await service.upload_file(PNG_BYTES, "pic.png", "image/png", PhotoContext.ROUTE_CALL_GALLERY)

        assert url == "https://xyz.supabase.co/storage/v1/object/public/photos/x.png"
        kwargs = bucket.upload.call_args.kwargs
        assert kwargs["path"].startswith("route-calls/gallery/")
        assert kwargs["file"] == PNG_BYTES
        assert kwargs["file_options"]["content-type"] == "image/png"

    @pytest.mark.asyncio
    async def test_upload_failure_raises_storage_error(self):
        service = StorageService(backend="supabase")
        bucket = MagicMock()
        bucket.upload.side_effect = RuntimeError("bucket not found")
        client = MagicMock()
        client.storage.from_.return_value = bucket
        service._supabase = client

        with pytest.raises(FileStorageError):
            await service.upload_file(PNG_BYTES, "pic.png", "image/png")

    @pytest.mark.asyncio
    async def test_delete_removes_object(self):
        service = StorageService(backend="supabase")
        bucket = MagicMock()
        client = MagicMock()
        client.storage.from_.return_value = bucket
        service._supabase = client

        await service.delete_file(
            f"https://xyz.supabase.co/storage/v1/object/public/{service.bucket}/routes/a.png"
        )

        bucket.remove.assert_called_once_with(["routes/a.png"])

    def test_unconfigured_client_raises(self):
        service = StorageService(backend="supabase")
        with patch("inmaduros.services.storage_service.settings") as mock_settings:
            mock_settings.supabase_url = ""
            mock_settings.supabase_service_role_key = ""
            with pytest.raises(FileStorageError, match="not configured"):
                _ = service.supabase
