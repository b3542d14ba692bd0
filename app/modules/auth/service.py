import hashlib
import logging
import threading
import time
from datetime import datetime
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, RegisteredUser, SessionToken
from app.config.settings import settings
from app.core.errors import AuthenticationError, UpstreamError, ValidationError
from app.database.resource_store import ResourceStore
from fastapi import HTTPException
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# token digest -> (identity, monotonic expiry); shared by every AuthService instance
_identity_cache: Dict[str, Tuple[Dict[str, Any], float]] = {}
_cache_lock = threading.Lock()
_clock = time.monotonic


def clear_auth_cache():
    with _cache_lock:
        _identity_cache.clear()


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _mentions(error: Exception, *fragments: str) -> bool:
    text = str(error).lower()
    return any(fragment.lower() in text for fragment in fragments)


def _remember(key: str, identity: Dict[str, Any], now: float) -> None:
    """Cache an identity, dropping expired entries first and then the oldest one if still full."""
    max_size = settings.auth_cache_max_size
    if max_size <= 0:
        return
    with _cache_lock:
        if len(_identity_cache) >= max_size:
            for stale in [k for k, (_, expires_at) in _identity_cache.items() if expires_at <= now]:
                del _identity_cache[stale]
        while len(_identity_cache) >= max_size:
            # dicts keep insertion order, so the first key is the oldest entry
            del _identity_cache[next(iter(_identity_cache))]
        _identity_cache[key] = (identity, now + settings.auth_cache_ttl_seconds)


def _recall(key: str, now: float) -> Optional[Dict[str, Any]]:
    with _cache_lock:
        cached = _identity_cache.get(key)
        if cached is None:
            return None
        identity, expires_at = cached
        if now < expires_at:
            return identity
        del _identity_cache[key]
        return None


class AuthService:
    """Thin wrapper over Supabase Auth plus profile provisioning for new identities."""

    def __init__(self, supabase: Client, store: Optional[ResourceStore] = None):
        self.supabase = supabase
        self.store = store or ResourceStore(supabase)

    def register(self, payload: RegisterRequest) -> RegisteredUser:
        metadata = {"display_name": payload.display_name} if payload.display_name else {}
        try:
            result = self.supabase.auth.sign_up({
                "email": payload.email,
                "password": payload.password,
                "options": {"data": metadata},
            })
        except Exception as e:
            if _mentions(e, "already registered", "already exists"):
                raise ValidationError("User already exists")
            logger.error("Sign-up for %s failed: %s", payload.email, e)
            raise UpstreamError("Registration failed")

        if not result.user:
            raise ValidationError("Failed to register user")
        return RegisteredUser(
            user_id=result.user.id,
            email=result.user.email or payload.email,
            # Supabase withholds the session until the address is confirmed
            confirmation_required=getattr(result, "session", None) is None,
        )

    def login(self, payload: LoginRequest) -> SessionToken:
        try:
            result = self.supabase.auth.sign_in_with_password({
                "email": payload.email,
                "password": payload.password,
            })
        except Exception as e:
            if _mentions(e, "invalid", "credentials"):
                raise AuthenticationError("Invalid email or password")
            logger.error("Sign-in for %s failed: %s", payload.email, e)
            raise UpstreamError("Login failed")

        if not result.user or not result.session:
            raise AuthenticationError("Invalid credentials")
        session = result.session
        return SessionToken(
            access_token=session.access_token,
            refresh_token=getattr(session, "refresh_token", None),
            expires_in=getattr(session, "expires_in", None),
            user_id=result.user.id,
            email=result.user.email or payload.email,
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """
        Resolve the caller identity from a Supabase Auth token.

        Identities are cached per token for auth_cache_ttl_seconds so a burst of
        requests costs one round trip. On a cache miss the caller's profile row
        is provisioned with an idempotent upsert, so handlers never need to
        create missing profiles themselves.
        """
        key = _digest(token)
        now = _clock()
        cached = _recall(key, now)
        if cached is not None:
            return cached

        try:
            response = self.supabase.auth.get_user(jwt=token)
        except HTTPException:
            raise
        except Exception as e:
            if _mentions(e, "jwt", "expired", "invalid"):
                raise AuthenticationError("Invalid or expired token")
            logger.error("Identity provider error: %s", e)
            raise AuthenticationError("Authentication failed")
        if not response or not response.user:
            raise AuthenticationError("Invalid or expired token")

        user = response.user
        identity = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
            "created_at": user.created_at,
            "updated_at": user.updated_at,
        }
        self.provision_profile(identity)
        _remember(key, identity, now)
        return identity

    def provision_profile(self, identity: Dict[str, Any]) -> None:
        """Create the users row for this identity if it does not exist yet. Existing profiles are untouched."""
        metadata = identity.get("user_metadata") or {}
        self.store.upsert("users", {
            "id": identity["id"],
            "email": identity.get("email") or "",
            "display_name": metadata.get("display_name") or metadata.get("full_name") or "User",
            "avatar_url": metadata.get("avatar_url") or "",
            "last_active": datetime.utcnow().isoformat(),
        })

    def logout(self, token: str) -> bool:
        with _cache_lock:
            _identity_cache.pop(_digest(token), None)
        try:
            # Access tokens are stateless JWTs; this only revokes the refresh token
            self.supabase.auth.sign_out()
        except Exception as e:
            logger.warning("Sign-out failed: %s", e)
            return False
        return True
