"""
Los Inmaduros Backend — Photo API Tests
========================================

What:  Uploads, galleries, cover photos and post-moderation.
How:   Real multipart uploads against the local storage backend (a temp
       directory configured in conftest), served back through /api/files.

What we test:
    ✅ Upload rules per context (route exists, organizer, confirmed attendee)
    ✅ File validation errors surface as 400
    ✅ Galleries list ACTIVE photos of their own context only
    ✅ Cover replacement reuses the photo and removes the old file
    ✅ A failed database write removes the new file and keeps the old cover
    ✅ Flag → pending review → approve / reject (admin only)
    ✅ Rejected photos can be approved again; deleted ones cannot be moderated
    ✅ Soft delete by owner or admin, never twice
"""

import uuid
from unittest.mock import AsyncMock

import pytest

from conftest import PNG_BYTES
from inmaduros.models import Attendance, AttendanceStatus, PhotoContext
from inmaduros.schemas.photo import PhotoUploadData
from inmaduros.services.photo_service import photo_service
from inmaduros.services.storage_service import LOCAL_URL_PREFIX, storage_service


async def upload(client, context, route_id=None, route_call_id=None, caption=None, file=None):
    data = {"context": context}
    if route_id is not None:
        data["routeId"] = str(route_id)
    if route_call_id is not None:
        data["routeCallId"] = str(route_call_id)
    if caption is not None:
        data["caption"] = caption
    files = {"file": file or ("pic.png", PNG_BYTES, "image/png")}
    return await client.post("/api/photos", data=data, files=files)


def stored_path(image_url):
    return storage_service.storage_root / image_url[len(LOCAL_URL_PREFIX):]


class TestUpload:

    @pytest.mark.asyncio
    async def test_route_gallery_upload(self, client, user, route):
        response = await upload(client, "ROUTE_GALLERY", route_id=route.id, caption="Atardecer")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Photo uploaded successfully"
        photo = body["data"]
        assert photo["status"] == "ACTIVE"
        assert photo["context"] == "ROUTE_GALLERY"
        assert photo["caption"] == "Atardecer"
        assert photo["route"]["slug"] == "heroes"
        assert photo["user"]["name"] == "Alice"
        assert photo["imageUrl"].startswith("/api/files/routes/")
        assert stored_path(photo["imageUrl"]).read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_uploaded_file_is_served(self, client, user, route):
        image_url = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]["imageUrl"]

        response = await client.get(image_url)

        assert response.status_code == 200
        assert response.content == PNG_BYTES
        assert response.headers["cache-control"] == "public, max-age=86400"

    @pytest.mark.asyncio
    async def test_missing_route_id(self, client, user):
        response = await upload(client, "ROUTE_GALLERY")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert "routeId is required for ROUTE_GALLERY context" in body["details"][0]["message"]

    @pytest.mark.asyncio
    async def test_unknown_route(self, client, user):
        response = await upload(client, "ROUTE_GALLERY", route_id=uuid.uuid4())
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_file_type(self, client, user, route):
        response = await upload(
            client, "ROUTE_GALLERY", route_id=route.id, file=("doc.pdf", b"%PDF-1.4", "application/pdf")
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed."

    @pytest.mark.asyncio
    async def test_cover_requires_organizer(self, client, auth_state, user, other_user, route_call_factory):
        route_call = await route_call_factory(other_user)

        response = await upload(client, "ROUTE_CALL_COVER", route_call_id=route_call.id)

        assert response.status_code == 403
        assert response.json()["error"] == "Only the organizer can upload a cover photo"

    @pytest.mark.asyncio
    async def test_gallery_requires_confirmed_attendance(
        self, client, session_factory, user, other_user, route_call_factory
    ):
        route_call = await route_call_factory(other_user)

        denied = await upload(client, "ROUTE_CALL_GALLERY", route_call_id=route_call.id)
        async with session_factory() as session:
            session.add(Attendance(route_call_id=route_call.id, user_id=user.id, status=AttendanceStatus.CONFIRMED))
            await session.commit()
        allowed = await upload(client, "ROUTE_CALL_GALLERY", route_call_id=route_call.id)

        assert denied.status_code == 403
        assert allowed.status_code == 201
        assert allowed.json()["data"]["routeCall"]["id"] == str(route_call.id)

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client, route):
        response = await upload(client, "ROUTE_GALLERY", route_id=route.id)
        assert response.status_code == 401


class TestGalleries:

    @pytest.mark.asyncio
    async def test_route_gallery_lists_active_only(self, client, auth_state, user, admin_user, route):
        keep = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        hidden = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        auth_state["user"] = admin_user
        await client.patch(f"/api/photos/{hidden['id']}/reject")

        response = await client.get("/api/photos/routes/heroes/gallery")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["route"] == {"id": str(route.id), "name": "Héroes"}
        assert data["count"] == 1
        assert [p["id"] for p in data["photos"]] == [keep["id"]]

    @pytest.mark.asyncio
    async def test_route_call_gallery_excludes_cover(
        self, client, session_factory, user, route_call_factory
    ):
        route_call = await route_call_factory(user)
        async with session_factory() as session:
            session.add(Attendance(route_call_id=route_call.id, user_id=user.id, status=AttendanceStatus.CONFIRMED))
            await session.commit()
        await upload(client, "ROUTE_CALL_COVER", route_call_id=route_call.id)
        gallery_photo = (await upload(client, "ROUTE_CALL_GALLERY", route_call_id=route_call.id)).json()["data"]

        response = await client.get(f"/api/photos/route-calls/{route_call.id}/gallery")

        data = response.json()["data"]
        assert data["routeCall"]["title"] == "Ruta nocturna"
        assert [p["id"] for p in data["photos"]] == [gallery_photo["id"]]

    @pytest.mark.asyncio
    async def test_unknown_gallery_targets(self, client):
        assert (await client.get("/api/photos/routes/nope/gallery")).status_code == 404
        assert (await client.get(f"/api/photos/route-calls/{uuid.uuid4()}/gallery")).status_code == 404

    @pytest.mark.asyncio
    async def test_list_photos_filters(self, client, user, route, route_call_factory):
        route_call = await route_call_factory(user)
        await upload(client, "ROUTE_GALLERY", route_id=route.id)
        await upload(client, "ROUTE_CALL_COVER", route_call_id=route_call.id)

        everything = (await client.get("/api/photos")).json()
        covers = (await client.get("/api/photos", params={"context": "ROUTE_CALL_COVER"})).json()
        by_route = (await client.get("/api/photos", params={"routeId": str(route.id)})).json()

        assert everything["pagination"]["totalCount"] == 2
        assert covers["pagination"]["totalCount"] == 1
        assert by_route["data"][0]["context"] == "ROUTE_GALLERY"

    @pytest.mark.asyncio
    async def test_my_photos_hides_deleted(self, client, user, route):
        kept = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        deleted = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        await client.delete(f"/api/photos/{deleted['id']}")

        response = await client.get("/api/photos/my-photos")

        assert response.json()["count"] == 1
        assert response.json()["data"][0]["id"] == kept["id"]


class TestCoverPhoto:

    @pytest.mark.asyncio
    async def test_create_then_replace_cover(self, client, user, route_call_factory):
        route_call = await route_call_factory(user)
        url = f"/api/photos/route-calls/{route_call.id}/cover-photo"

        first = await client.patch(url, files={"file": ("a.png", PNG_BYTES, "image/png")})
        second = await client.patch(url, files={"file": ("b.jpg", b"\xff\xd8\xff\xe0jpeg", "image/jpeg")})

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["message"] == "Cover photo updated successfully"
        old, new = first.json()["data"], second.json()["data"]
        assert new["id"] == old["id"]
        assert new["imageUrl"] != old["imageUrl"]
        assert new["imageUrl"].startswith("/api/files/route-calls/covers/")
        assert not stored_path(old["imageUrl"]).exists()
        assert stored_path(new["imageUrl"]).exists()

    @pytest.mark.asyncio
    async def test_only_organizer(self, client, auth_state, user, other_user, route_call_factory):
        route_call = await route_call_factory(other_user)

        response = await client.patch(
            f"/api/photos/route-calls/{route_call.id}/cover-photo",
            files={"file": ("a.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Only the organizer can update the cover photo"


class TestStorageCleanup:
    """A failed database write must not leave files behind or lose the old cover."""

    @staticmethod
    def stored_files(folder):
        root = storage_service.storage_root / folder
        return set(root.rglob("*")) if root.exists() else set()

    @pytest.mark.asyncio
    async def test_failed_upload_removes_file(self, db_session, user, route, monkeypatch):
        before = self.stored_files("routes")
        monkeypatch.setattr(db_session, "flush", AsyncMock(side_effect=RuntimeError("database unavailable")))

        with pytest.raises(RuntimeError):
            await photo_service.upload_photo(
                db_session,
                user,
                PhotoUploadData(context=PhotoContext.ROUTE_GALLERY, route_id=route.id),
                PNG_BYTES,
                "pic.png",
                "image/png",
            )

        assert self.stored_files("routes") == before

    @pytest.mark.asyncio
    async def test_failed_cover_replacement_keeps_old_file(
        self, client, db_session, user, route_call_factory, monkeypatch
    ):
        route_call = await route_call_factory(user)
        first = await client.patch(
            f"/api/photos/route-calls/{route_call.id}/cover-photo",
            files={"file": ("a.png", PNG_BYTES, "image/png")},
        )
        old_url = first.json()["data"]["imageUrl"]
        before = self.stored_files("route-calls/covers")
        monkeypatch.setattr(db_session, "flush", AsyncMock(side_effect=RuntimeError("database unavailable")))

        with pytest.raises(RuntimeError):
            await photo_service.update_cover_photo(
                db_session, user, route_call.id, PNG_BYTES, "b.png", "image/png"
            )

        assert stored_path(old_url).exists()
        assert self.stored_files("route-calls/covers") == before



class TestModeration:

    @pytest.mark.asyncio
    async def test_flag_then_approve(self, client, auth_state, user, admin_user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]

        flagged = await client.patch(f"/api/photos/{photo['id']}/flag")
        assert flagged.status_code == 200
        assert flagged.json()["message"] == "Photo flagged for review"
        assert flagged.json()["data"]["status"] == "FLAGGED"

        auth_state["user"] = admin_user
        queue = (await client.get("/api/photos/pending-review")).json()
        assert [p["id"] for p in queue["data"]] == [photo["id"]]

        approved = await client.patch(f"/api/photos/{photo['id']}/approve")
        assert approved.status_code == 200
        data = approved.json()["data"]
        assert data["status"] == "ACTIVE"
        assert data["moderatedBy"] == str(admin_user.id)
        assert data["moderator"]["name"] == "Admin"
        assert data["moderatedAt"] is not None

        assert (await client.get("/api/photos/pending-review")).json()["count"] == 0

    @pytest.mark.asyncio
    async def test_cannot_flag_twice(self, client, user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        await client.patch(f"/api/photos/{photo['id']}/flag")

        response = await client.patch(f"/api/photos/{photo['id']}/flag")

        assert response.status_code == 400
        assert response.json()["error"] == "Only active photos can be flagged"

    @pytest.mark.asyncio
    async def test_reject_with_notes(self, client, auth_state, user, admin_user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        auth_state["user"] = admin_user

        response = await client.patch(
            f"/api/photos/{photo['id']}/reject", json={"moderationNotes": "Contenido inapropiado"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "REJECTED"
        assert response.json()["data"]["moderationNotes"] == "Contenido inapropiado"

    @pytest.mark.asyncio
    async def test_moderation_requires_admin(self, client, user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]

        approve = await client.patch(f"/api/photos/{photo['id']}/approve")
        queue = await client.get("/api/photos/pending-review")

        assert approve.status_code == 403
        assert approve.json()["error"] == "Admin access required"
        assert queue.status_code == 403

    @pytest.mark.asyncio
    async def test_approve_rejected_photo(self, client, auth_state, user, admin_user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        auth_state["user"] = admin_user
        await client.patch(f"/api/photos/{photo['id']}/reject", json={"moderationNotes": "Borrosa"})

        response = await client.patch(f"/api/photos/{photo['id']}/approve")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ACTIVE"
        assert response.json()["data"]["moderatedBy"] == str(admin_user.id)

    @pytest.mark.asyncio
    async def test_moderating_deleted_photo_is_rejected(self, client, auth_state, user, admin_user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        await client.delete(f"/api/photos/{photo['id']}")
        auth_state["user"] = admin_user

        approve = await client.patch(f"/api/photos/{photo['id']}/approve")
        reject = await client.patch(f"/api/photos/{photo['id']}/reject", json={})

        assert approve.status_code == 400
        assert approve.json()["error"] == "Photo is already deleted"
        assert reject.status_code == 400
        assert reject.json()["error"] == "Photo is already deleted"

    @pytest.mark.asyncio
    async def test_unknown_photo(self, client, user):
        response = await client.patch(f"/api/photos/{uuid.uuid4()}/flag")
        assert response.status_code == 404
        assert response.json()["error"] == "Photo not found"


class TestDeletePhoto:

    @pytest.mark.asyncio
    async def test_owner_deletes(self, client, user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]

        response = await client.delete(f"/api/photos/{photo['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Photo deleted successfully"
        assert not stored_path(photo["imageUrl"]).exists()

    @pytest.mark.asyncio
    async def test_delete_twice(self, client, user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        await client.delete(f"/api/photos/{photo['id']}")

        response = await client.delete(f"/api/photos/{photo['id']}")

        assert response.status_code == 400
        assert response.json()["error"] == "Photo is already deleted"

    @pytest.mark.asyncio
    async def test_other_user_cannot_delete(self, client, auth_state, user, other_user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        auth_state["user"] = other_user

        response = await client.delete(f"/api/photos/{photo['id']}")

        assert response.status_code == 403
        assert response.json()["error"] == "You can only delete your own photos"

    @pytest.mark.asyncio
    async def test_admin_deletes(self, client, auth_state, user, admin_user, route):
        photo = (await upload(client, "ROUTE_GALLERY", route_id=route.id)).json()["data"]
        auth_state["user"] = admin_user

        response = await client.delete(f"/api/photos/{photo['id']}")

        assert response.status_code == 200
