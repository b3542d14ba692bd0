"""Tests for identity resolution, profile provisioning and the auth routes."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.config.settings import settings
from app.core.dependencies import get_auth_service
from app.core.errors import AuthenticationError, ValidationError
from app.main import app
from app.modules.auth.schemas import RegisterRequest
from app.modules.auth import service as auth_service
from app.modules.auth.service import AuthService


def supabase_user(user_id="u1", email="u1@example.com", metadata=None):
    return SimpleNamespace(
        id=user_id,
        email=email,
        user_metadata=metadata or {},
        app_metadata={},
        created_at="2024-01-01T00:00:00",
        updated_at=None,
    )


@pytest.fixture
def supabase():
    client = MagicMock()
    client.auth.get_user.return_value = SimpleNamespace(user=supabase_user(metadata={"display_name": "Uma"}))
    return client


@pytest.fixture
def auth_store():
    return MagicMock()


@pytest.fixture
def service(supabase, auth_store):
    return AuthService(supabase, auth_store)


class TestGetCurrentUser:
    """Tests for token resolution."""

    def test_resolves_identity(self, service):
        user = service.get_current_user("token-1")
        assert user["id"] == "u1"
        assert user["email"] == "u1@example.com"

    def test_cached_per_token(self, service, supabase):
        """The identity provider is called once per token within the TTL."""
        service.get_current_user("token-1")
        service.get_current_user("token-1")
        assert supabase.auth.get_user.call_count == 1
        service.get_current_user("token-2")
        assert supabase.auth.get_user.call_count == 2

    def test_provisions_profile_once(self, service, auth_store):
        """A cache miss upserts the profile row; cached hits do not."""
        service.get_current_user("token-1")
        service.get_current_user("token-1")
        auth_store.upsert.assert_called_once()
        table, row = auth_store.upsert.call_args.args
        assert table == "users"
        assert row["id"] == "u1"
        assert row["display_name"] == "Uma"

    def test_profile_defaults(self, supabase, auth_store):
        """Identities without metadata get a placeholder display name."""
        supabase.auth.get_user.return_value = SimpleNamespace(user=supabase_user(user_id="u2"))
        AuthService(supabase, auth_store).get_current_user("token-x")
        row = auth_store.upsert.call_args.args[1]
        assert row["display_name"] == "User"
        assert row["avatar_url"] == ""

    def test_expired_token_is_401(self, supabase, auth_store):
        supabase.auth.get_user.side_effect = Exception("JWT expired")
        with pytest.raises(AuthenticationError) as exc:
            AuthService(supabase, auth_store).get_current_user("stale")
        assert exc.value.status_code == 401
        auth_store.upsert.assert_not_called()

    def test_missing_user_is_401(self, supabase, auth_store):
        supabase.auth.get_user.return_value = SimpleNamespace(user=None)
        with pytest.raises(AuthenticationError):
            AuthService(supabase, auth_store).get_current_user("token")

    def test_logout_drops_cache_entry(self, service, supabase):
        """After logout the next request goes back to the identity provider."""
        service.get_current_user("token-1")
        service.logout("token-1")
        service.get_current_user("token-1")
        assert supabase.auth.get_user.call_count == 2


class TestIdentityCacheBounds:
    """Tests for the size bound of the identity cache."""

    @pytest.fixture
    def clock(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr(auth_service, "_clock", lambda: now[0])
        monkeypatch.setattr(settings, "auth_cache_max_size", 3)
        monkeypatch.setattr(settings, "auth_cache_ttl_seconds", 10)
        return now

    def test_expired_entries_make_room(self, clock, service, supabase, auth_store):
        """Once old tokens expire, a new token is cached again instead of hitting Supabase every time."""
        for token in ("t1", "t2", "t3"):
            service.get_current_user(token)
        clock[0] += 60
        for _ in range(5):
            service.get_current_user("fresh")
        assert supabase.auth.get_user.call_count == 4
        assert auth_store.upsert.call_count == 4
        assert len(auth_service._identity_cache) == 1

    def test_full_cache_evicts_oldest(self, clock, service, supabase):
        """With every entry still live, the oldest token makes way for the newest."""
        for token in ("t1", "t2", "t3", "t4"):
            service.get_current_user(token)
        assert len(auth_service._identity_cache) == 3
        service.get_current_user("t4")
        assert supabase.auth.get_user.call_count == 4
        service.get_current_user("t1")
        assert supabase.auth.get_user.call_count == 5


class TestRegister:
    """Tests for registration."""

    def test_duplicate_email_is_400(self, supabase, auth_store):
        supabase.auth.sign_up.side_effect = Exception("User already registered")
        with pytest.raises(ValidationError) as exc:
            AuthService(supabase, auth_store).register(
                RegisterRequest(email="a@example.com", password="secret123")
            )
        assert exc.value.detail == "User already exists"

    def test_display_name_sent_as_metadata(self, supabase, auth_store):
        supabase.auth.sign_up.return_value = SimpleNamespace(user=supabase_user(email="a@example.com"))
        response = AuthService(supabase, auth_store).register(
            RegisterRequest(email="a@example.com", password="secret123", display_name="Ada")
        )
        assert response.email == "a@example.com"
        payload = supabase.auth.sign_up.call_args.args[0]
        assert payload["options"]["data"] == {"display_name": "Ada"}

    def test_short_password_rejected(self):
        with pytest.raises(PydanticValidationError):
            RegisterRequest(email="a@example.com", password="abc")

    def test_confirmation_required_without_session(self, supabase, auth_store):
        """Projects with email confirmation return a user but no session."""
        supabase.auth.sign_up.return_value = SimpleNamespace(user=supabase_user(), session=None)
        response = AuthService(supabase, auth_store).register(
            RegisterRequest(email="u1@example.com", password="secret123")
        )
        assert response.confirmation_required is True


class TestAuthRoutes:
    """Tests for the /auth endpoints."""

    @pytest.fixture
    def auth_client(self, client, supabase, store):
        app.dependency_overrides[get_auth_service] = lambda: AuthService(supabase, store)
        return client

    def test_login_returns_token(self, auth_client, supabase):
        supabase.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=supabase_user(),
            session=SimpleNamespace(access_token="jwt-token"),
        )
        response = auth_client.post("/api/v1/auth/login", json={"email": "u1@example.com", "password": "pw"})
        assert response.status_code == 200
        assert response.json()["access_token"] == "jwt-token"

    def test_login_bad_credentials(self, auth_client, supabase):
        supabase.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        response = auth_client.post("/api/v1/auth/login", json={"email": "u1@example.com", "password": "pw"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    def test_login_rejects_malformed_email(self, auth_client):
        """Body validation errors are 400 with an error message."""
        response = auth_client.post("/api/v1/auth/login", json={"email": "not-an-email", "password": "pw"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_me_requires_token(self, auth_client):
        response = auth_client.get("/api/v1/auth/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_me_returns_identity(self, auth_client, auth):
        response = auth_client.get("/api/v1/auth/me", headers=auth("alice"))
        assert response.status_code == 200
        assert response.json()["id"] == "alice"

    def test_logout(self, auth_client, auth, supabase):
        response = auth_client.post("/api/v1/auth/logout", headers=auth("alice"))
        assert response.status_code == 200
        supabase.auth.sign_out.assert_called_once()
