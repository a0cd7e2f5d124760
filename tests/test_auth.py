"""
Los Inmaduros Backend — Authentication Tests
=============================================

What:  Clerk session token verification, user sync and the auth endpoints.
How:   Tokens are signed with a throwaway RSA key (python-jose); the public
       key is configured as CLERK_JWT_KEY. Clerk Backend API calls are
       mocked with AsyncMock (dependencies) or httpx.MockTransport (client).

What we test:
    ✅ Valid token → user mirrored from Clerk on first sight, reused after
    ✅ Missing, malformed, expired or foreign-party tokens → 401
    ✅ Clerk outage during sync → 401 "Authentication failed"
    ✅ Admin-only endpoints with a real token
    ✅ JWKS fallback is cached
    ✅ ClerkClient error mapping and retries
    ✅ POST /api/auth/test-token
"""

import time
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwk, jwt
from sqlalchemy import select
from tenacity import wait_none

from inmaduros import auth
from inmaduros.auth import clear_jwks_cache, get_current_user, optional_auth, verify_session_token
from inmaduros.config import settings
from inmaduros.exceptions import IdentityProviderError, NotFoundError, UnauthorizedError
from inmaduros.models import User, UserRole
from inmaduros.services import clerk_service
from inmaduros.services.clerk_service import ClerkClient, clerk_client, primary_email
from inmaduros.services.user_sync_service import user_sync_service

CLERK_USER = {
    "id": "user_2new",
    "first_name": "Nuria",
    "last_name": "Patina",
    "image_url": "https://img.clerk.com/nuria.png",
    "primary_email_address_id": "idn_2",
    "email_addresses": [
        {"id": "idn_1", "email_address": "old@example.com"},
        {"id": "idn_2", "email_address": "nuria@example.com"},
    ],
}


@pytest.fixture(scope="module")
def rsa_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture
def jwt_key(monkeypatch, rsa_keys):
    monkeypatch.setattr(settings, "clerk_jwt_key", rsa_keys[1])
    clear_jwks_cache()
    yield
    clear_jwks_cache()


@pytest.fixture
def make_token(rsa_keys):
    def _make(sub="user_2new", expires_in=300, **claims):
        now = int(time.time())
        payload = {"sub": sub, "iat": now, "nbf": now - 5, "exp": now + expires_in, **claims}
        return jwt.encode(payload, rsa_keys[0], algorithm="RS256")

    return _make


@pytest.fixture
def real_auth_app(app):
    """The test app with the genuine get_current_user dependency."""
    app.dependency_overrides.pop(get_current_user, None)
    return app


@pytest_asyncio.fixture
async def mock_clerk_user(monkeypatch):
    get_user = AsyncMock(return_value=CLERK_USER)
    monkeypatch.setattr(clerk_client, "get_user", get_user)
    return get_user


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestVerifySessionToken:

    @pytest.mark.asyncio
    async def test_valid_token(self, jwt_key, make_token):
        claims = await verify_session_token(make_token())
        assert claims["sub"] == "user_2new"

    @pytest.mark.asyncio
    async def test_expired_token(self, jwt_key, make_token):
        with pytest.raises(UnauthorizedError, match="Invalid authentication token"):
            await verify_session_token(make_token(expires_in=-60))

    @pytest.mark.asyncio
    async def test_garbage_token(self, jwt_key):
        with pytest.raises(UnauthorizedError):
            await verify_session_token("not.a.jwt")

    @pytest.mark.asyncio
    async def test_token_signed_by_other_key(self, jwt_key):
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        other_pem = other.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode()
        token = jwt.encode({"sub": "user_x", "exp": int(time.time()) + 60}, other_pem, algorithm="RS256")

        with pytest.raises(UnauthorizedError):
            await verify_session_token(token)

    @pytest.mark.asyncio
    async def test_authorized_parties(self, monkeypatch, jwt_key, make_token):
        monkeypatch.setattr(settings, "clerk_authorized_parties", "http://localhost:3000")

        claims = await verify_session_token(make_token(azp="http://localhost:3000"))
        assert claims["azp"] == "http://localhost:3000"

        with pytest.raises(UnauthorizedError):
            await verify_session_token(make_token(azp="https://evil.example.com"))

    @pytest.mark.asyncio
    async def test_missing_subject(self, jwt_key, make_token):
        with pytest.raises(UnauthorizedError):
            await verify_session_token(make_token(sub=""))

    @pytest.mark.asyncio
    async def test_jwks_fallback_is_cached(self, monkeypatch, rsa_keys, make_token):
        monkeypatch.setattr(settings, "clerk_jwt_key", "")
        clear_jwks_cache()
        public_jwk = jwk.construct(rsa_keys[1], "RS256").to_dict()
        get_jwks = AsyncMock(return_value={"keys": [public_jwk]})
        monkeypatch.setattr(clerk_client, "get_jwks", get_jwks)

        try:
            await verify_session_token(make_token())
            await verify_session_token(make_token())
        finally:
            clear_jwks_cache()

        get_jwks.assert_awaited_once()


class TestAuthDependency:

    @pytest.mark.asyncio
    async def test_first_request_creates_user(
        self, real_auth_app, client, session_factory, jwt_key, make_token, mock_clerk_user
    ):
        response = await client.get("/api/auth/me", headers=bearer(make_token()))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "nuria@example.com"
        assert data["name"] == "Nuria"
        assert data["lastName"] == "Patina"
        assert data["role"] == "USER"
        mock_clerk_user.assert_awaited_once_with("user_2new")

        async with session_factory() as session:
            stored = (await session.execute(select(User).where(User.clerk_id == "user_2new"))).scalar_one()
        assert stored.image_url == "https://img.clerk.com/nuria.png"

    @pytest.mark.asyncio
    async def test_known_user_skips_clerk(
        self, real_auth_app, client, user, jwt_key, make_token, mock_clerk_user
    ):
        response = await client.get("/api/auth/me", headers=bearer(make_token(sub=user.clerk_id)))

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(user.id)
        mock_clerk_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_token(self, real_auth_app, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        body = response.json()
        assert body == {
            "success": False,
            "error": "No authentication token provided",
            "request_id": response.headers["X-Request-ID"],
        }

    @pytest.mark.asyncio
    async def test_invalid_token(self, real_auth_app, client, jwt_key):
        response = await client.get("/api/auth/me", headers=bearer("garbage"))
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid authentication token"

    @pytest.mark.asyncio
    async def test_clerk_outage(self, real_auth_app, client, monkeypatch, jwt_key, make_token):
        monkeypatch.setattr(clerk_client, "get_user", AsyncMock(side_effect=IdentityProviderError()))

        response = await client.get("/api/auth/me", headers=bearer(make_token()))

        assert response.status_code == 401
        assert response.json()["error"] == "Authentication failed"

    @pytest.mark.asyncio
    async def test_admin_endpoint_with_real_token(
        self, real_auth_app, client, user, admin_user, jwt_key, make_token
    ):
        as_user = await client.get("/api/photos/pending-review", headers=bearer(make_token(sub=user.clerk_id)))
        as_admin = await client.get(
            "/api/photos/pending-review", headers=bearer(make_token(sub=admin_user.clerk_id))
        )

        assert as_user.status_code == 403
        assert as_admin.status_code == 200

    @pytest.mark.asyncio
    async def test_optional_auth(self, db_session, user, jwt_key, make_token):
        anonymous = await optional_auth(credentials=None, db=db_session)
        broken = await optional_auth(
            credentials=HTTPAuthorizationCredentials(scheme="Bearer", credentials="garbage"),
            db=db_session,
        )
        known = await optional_auth(
            credentials=HTTPAuthorizationCredentials(scheme="Bearer", credentials=make_token(sub=user.clerk_id)),
            db=db_session,
        )

        assert anonymous is None
        assert broken is None
        assert known.id == user.id


class TestUserSync:

    def test_primary_email_preferred(self):
        assert primary_email(CLERK_USER) == "nuria@example.com"

    def test_first_email_fallback(self):
        user = dict(CLERK_USER, primary_email_address_id=None)
        assert primary_email(user) == "old@example.com"
        assert primary_email({"email_addresses": []}) is None

    @pytest.mark.asyncio
    async def test_user_without_email_is_rejected(self, db_session, monkeypatch):
        monkeypatch.setattr(
            clerk_client, "get_user", AsyncMock(return_value={"id": "user_x", "email_addresses": []})
        )
        with pytest.raises(IdentityProviderError, match="no email"):
            await user_sync_service.get_or_create_user(db_session, "user_x")

    @pytest.mark.asyncio
    async def test_missing_first_name_defaults_to_user(self, db_session, monkeypatch):
        monkeypatch.setattr(clerk_client, "get_user", AsyncMock(return_value=dict(CLERK_USER, first_name=None)))

        created = await user_sync_service.get_or_create_user(db_session, "user_2new")

        assert created.name == "User"
        assert created.role == UserRole.USER

    @pytest.mark.asyncio
    async def test_update_from_clerk(self, db_session, user, monkeypatch):
        monkeypatch.setattr(
            clerk_client,
            "get_user",
            AsyncMock(return_value=dict(CLERK_USER, id=user.clerk_id, first_name="Alicia")),
        )

        updated = await user_sync_service.update_user_from_clerk(db_session, user.clerk_id)

        assert updated.id == user.id
        assert updated.name == "Alicia"
        assert updated.email == "nuria@example.com"


class TestClerkClient:

    @pytest.fixture
    def mock_transport(self, monkeypatch):
        """Route every httpx.AsyncClient opened by the Clerk client to a handler."""
        calls = []
        state = {"handler": None}
        real_client = httpx.AsyncClient

        def handler(request):
            calls.append(request)
            return state["handler"](request)

        def client_factory(**kwargs):
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        monkeypatch.setattr(clerk_service.httpx, "AsyncClient", client_factory)
        monkeypatch.setattr(ClerkClient._send.retry, "wait", wait_none())
        return state, calls

    @pytest.mark.asyncio
    async def test_get_user_sends_secret(self, mock_transport):
        state, calls = mock_transport
        state["handler"] = lambda request: httpx.Response(200, json=CLERK_USER)

        result = await ClerkClient(secret_key="sk_test_123", api_url="https://api.clerk.test").get_user("user_2new")

        assert result["id"] == "user_2new"
        assert calls[0].url.path == "/v1/users/user_2new"
        assert calls[0].headers["Authorization"] == "Bearer sk_test_123"

    @pytest.mark.asyncio
    async def test_not_found(self, mock_transport):
        state, _ = mock_transport
        state["handler"] = lambda request: httpx.Response(404, json={"errors": []})

        with pytest.raises(NotFoundError):
            await ClerkClient(secret_key="sk_test_123").get_user("user_missing")

    @pytest.mark.asyncio
    async def test_server_errors_are_retried(self, mock_transport):
        state, calls = mock_transport
        state["handler"] = lambda request: httpx.Response(503)

        with pytest.raises(IdentityProviderError):
            await ClerkClient(secret_key="sk_test_123").get_user("user_2new")

        assert len(calls) == settings.retry_max_attempts

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, mock_transport):
        state, calls = mock_transport
        state["handler"] = lambda request: httpx.Response(422)

        with pytest.raises(IdentityProviderError):
            await ClerkClient(secret_key="sk_test_123").create_session("user_2new")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_find_users_accepts_wrapped_list(self, mock_transport):
        state, calls = mock_transport
        state["handler"] = lambda request: httpx.Response(200, json={"data": [CLERK_USER], "total_count": 1})

        users = await ClerkClient(secret_key="sk_test_123").find_users_by_email("nuria@example.com")

        assert [u["id"] for u in users] == ["user_2new"]
        assert calls[0].url.params.get_list("email_address") == ["nuria@example.com"]

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        with pytest.raises(IdentityProviderError, match="not configured"):
            await ClerkClient(secret_key="").get_jwks()


class TestTestTokenEndpoint:

    @pytest.mark.asyncio
    async def test_issues_token(self, client, monkeypatch):
        monkeypatch.setattr(clerk_client, "find_users_by_email", AsyncMock(return_value=[CLERK_USER]))
        monkeypatch.setattr(clerk_client, "create_session", AsyncMock(return_value={"id": "sess_1"}))
        create_token = AsyncMock(return_value="eyJ.test.token")
        monkeypatch.setattr(clerk_client, "create_session_token", create_token)

        response = await client.post("/api/auth/test-token", json={"email": "nuria@example.com"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"] == "eyJ.test.token"
        assert data["userId"] == "user_2new"
        assert data["sessionId"] == "sess_1"
        assert data["email"] == "nuria@example.com"
        create_token.assert_awaited_once_with("sess_1", settings.clerk_test_token_template)

    @pytest.mark.asyncio
    async def test_email_required(self, client):
        response = await client.post("/api/auth/test-token", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Email is required"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client, monkeypatch):
        monkeypatch.setattr(clerk_client, "find_users_by_email", AsyncMock(return_value=[]))

        response = await client.post("/api/auth/test-token", json={"email": "ghost@example.com"})

        assert response.status_code == 404
        assert response.json()["error"] == "User not found. Create user in Clerk dashboard first."

    def test_not_registered_in_production(self, monkeypatch):
        from inmaduros.main import create_app

        monkeypatch.setattr(settings, "environment", "production")
        paths = create_app().openapi()["paths"]

        assert "/api/auth/test-token" not in paths
        assert "/api/auth/me" in paths
