"""
Core dependencies for caller identity and resource access checks.

Every check follows the same order: resolve the resource (404), then
evaluate the access policy (403).
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core import access_policy
from app.core.access_policy import AccessContext
from app.core.errors import AuthenticationError, AuthorizationError
from app.database.resource_store import ResourceStore, get_resource_store
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    store: ResourceStore = Depends(get_resource_store)
) -> AuthService:
    return AuthService(supabase, store)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[dict]:
    """Caller identity, or None for anonymous requests. A token that is present but invalid is still a 401."""
    if credentials is None or not credentials.credentials:
        return None
    return auth_service.get_current_user(credentials.credentials)


def get_current_user_id(user_data: Optional[dict] = Depends(get_optional_user)) -> dict:
    """Caller identity for operations that require one"""
    if user_data is None:
        raise AuthenticationError()
    return user_data


def actor_id(user_data: Optional[dict]) -> Optional[str]:
    return user_data["id"] if user_data else None


def is_idea_member(idea_id: str, user_id: Optional[str], store: ResourceStore) -> bool:
    """True if the user has an assignment row on the idea"""
    if not user_id:
        return False
    return store.find_one("idea_assignments", {"idea_id": idea_id, "user_id": user_id}) is not None


def idea_access_context(idea: Dict[str, Any], user_id: Optional[str], store: ResourceStore) -> AccessContext:
    # Creators never need the membership lookup
    if user_id and idea.get("creator_id") == user_id:
        return AccessContext(idea_creator_id=idea["creator_id"], is_member=False)
    return AccessContext(
        idea_creator_id=idea.get("creator_id"),
        is_member=is_idea_member(idea["id"], user_id, store)
    )


def check_idea_access(idea_id: str, user_data: Optional[dict], store: ResourceStore) -> Dict[str, Any]:
    """Return the idea if the caller may read it (published, creator or member)"""
    idea = store.get("ideas", idea_id, not_found="Idea not found")
    user_id = actor_id(user_data)
    if not access_policy.ideas.can_read(user_id, idea, idea_access_context(idea, user_id, store)):
        raise AuthorizationError("Not authorized to view this idea")
    return idea


def check_post_access(post_id: str, user_data: Optional[dict], store: ResourceStore) -> Dict[str, Any]:
    """Return the post if the caller may read it (public or creator)"""
    post = store.get("posts", post_id, not_found="Post not found")
    if not access_policy.posts.can_read(actor_id(user_data), post):
        raise AuthorizationError("Not authorized to view this post")
    return post


def check_feature_request_access(request_id: str, user_data: Optional[dict], store: ResourceStore) -> Dict[str, Any]:
    feature_request = store.get("feature_requests", request_id, not_found="Feature request not found")
    if not access_policy.feature_requests.can_read(actor_id(user_data), feature_request):
        raise AuthorizationError("Not authorized to view this feature request")
    return feature_request


def checklist_access_context(checklist: Dict[str, Any], user_id: Optional[str], store: ResourceStore) -> AccessContext:
    """Context for checklist rules: the parent idea's creator and the caller's assignment on that idea"""
    idea = store.find_one("ideas", {"id": checklist["idea_id"]})
    if idea is None:
        logger.warning(f"Checklist {checklist['id']} references missing idea {checklist['idea_id']}")
        return AccessContext(idea_creator_id=None, is_member=False)
    return idea_access_context(idea, user_id, store)
