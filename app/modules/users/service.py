from app.database.resource_store import ResourceStore
from app.modules.users.schemas import UserUpdate, UserResponse, UserSummary
from app.core.errors import UpstreamError
from fastapi import HTTPException
from typing import Dict, Iterable, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: ResourceStore):
        self.store = store

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        return UserResponse(**self.store.get("users", user_id, not_found="User not found"))

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update user profile"""
        try:
            update_data = {"updated_at": datetime.utcnow().isoformat()}
            if user_data.display_name is not None:
                update_data["display_name"] = user_data.display_name.strip() or "User"
            if user_data.avatar_url is not None:
                update_data["avatar_url"] = user_data.avatar_url
            if user_data.bio is not None:
                update_data["bio"] = user_data.bio

            row = self.store.update("users", user_id, update_data, not_found="User not found")
            return UserResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating user {user_id}: {e}")
            raise UpstreamError("Failed to update user")

    def summaries(self, user_ids: Iterable[Optional[str]]) -> Dict[str, UserSummary]:
        """Author info for a batch of user ids; unknown users fall back to 'Anonymous'"""
        ids = sorted({uid for uid in user_ids if uid})
        if not ids:
            return {}
        rows = self.store.query("users", in_={"id": ids})
        found = {
            row["id"]: UserSummary(
                id=row["id"],
                display_name=row.get("display_name") or "Anonymous",
                avatar_url=row.get("avatar_url") or "",
            )
            for row in rows
        }
        return {uid: found.get(uid, UserSummary(id=uid)) for uid in ids}
