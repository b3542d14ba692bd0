from app.config.settings import settings
from app.database.resource_store import ResourceStore
from app.modules.feature_requests.schemas import (
    FeatureRequestCreate, FeatureRequestStatusUpdate, FeatureRequestResponse,
    FeatureRequestDetailResponse, UpvoteResponse
)
from app.modules.ideas.schemas import CommentCreate, CommentResponse
from app.modules.notifications.service import NotificationService
from app.modules.users.service import UserService
from app.core import access_policy
from app.core.access_policy import enforce
from app.core.dependencies import actor_id, check_feature_request_access
from app.core.errors import UpstreamError
from app.core.vote_ledger import VoteLedger, FEATURE_REQUEST_VOTES, UPVOTE, CREATED
from fastapi import HTTPException
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class FeatureRequestService:
    def __init__(self, store: ResourceStore):
        self.store = store
        self.users = UserService(store)
        self.notifications = NotificationService(store)
        self.ledger = VoteLedger(store, FEATURE_REQUEST_VOTES)

    def _shape(self, requests: List[Dict[str, Any]]) -> List[FeatureRequestResponse]:
        if not requests:
            return []
        creators = self.users.summaries(r.get("creator_id") for r in requests)
        counts: Dict[str, int] = {}
        comments = self.store.query("feature_request_comments", in_={"feature_request_id": [r["id"] for r in requests]})
        for c in comments:
            counts[c["feature_request_id"]] = counts.get(c["feature_request_id"], 0) + 1
        return [
            FeatureRequestResponse(**{**r, "comment_count": counts.get(r["id"], 0), "creator": creators.get(r.get("creator_id"))})
            for r in requests
        ]

    def list_feature_requests(self, user_data: Optional[dict], status: Optional[str] = None) -> List[FeatureRequestResponse]:
        """
        Feature requests visible to the caller, newest first.

        status "all" (or none) returns everything, "popular" returns requests
        with at least popular_upvote_threshold upvotes, anything else filters
        on the status column.
        """
        filters = {}
        if status and status not in ("all", "popular"):
            filters["status"] = status
        rows = self.store.query("feature_requests", filters=filters, order="created_at", desc=True)

        user_id = actor_id(user_data)
        rows = [r for r in rows if access_policy.feature_requests.can_read(user_id, r)]
        if status == "popular":
            rows = [r for r in rows if (r.get("upvotes") or 0) >= settings.popular_upvote_threshold]
        return self._shape(rows)

    def create_feature_request(self, data: FeatureRequestCreate, user_id: str) -> FeatureRequestResponse:
        try:
            row = self.store.insert("feature_requests", {
                "title": data.title,
                "description": data.description,
                "category": data.category,
                "status": "active",
                "is_public": data.is_public,
                "creator_id": user_id,
                "upvotes": 0,
            })
            return self._shape([row])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating feature request: {e}")
            raise UpstreamError("Failed to create feature request")

    def get_feature_request(self, request_id: str, user_data: Optional[dict]) -> FeatureRequestDetailResponse:
        """Feature request with its comments, oldest comment first"""
        feature_request = check_feature_request_access(request_id, user_data, self.store)
        shaped = self._shape([feature_request])[0]
        return FeatureRequestDetailResponse(**shaped.model_dump(), comments=self._comments(request_id))

    def update_status(self, request_id: str, data: FeatureRequestStatusUpdate, user_id: str) -> FeatureRequestResponse:
        """Change the status (creator only)"""
        feature_request = self.store.get("feature_requests", request_id, not_found="Feature request not found")
        enforce(access_policy.feature_requests.can_modify(user_id, feature_request), "Forbidden")
        row = self.store.update(
            "feature_requests",
            request_id,
            {"status": data.status, "updated_at": datetime.utcnow().isoformat()},
            not_found="Feature request not found"
        )
        return self._shape([row])[0]

    def _comments(self, request_id: str) -> List[CommentResponse]:
        rows = self.store.query("feature_request_comments", filters={"feature_request_id": request_id}, order="created_at")
        users = self.users.summaries(r["user_id"] for r in rows)
        return [CommentResponse(**r, user=users.get(r["user_id"])) for r in rows]

    def add_comment(self, request_id: str, comment_data: CommentCreate, user_data: dict) -> CommentResponse:
        feature_request = check_feature_request_access(request_id, user_data, self.store)
        user_id = user_data["id"]
        row = self.store.insert("feature_request_comments", {
            "feature_request_id": request_id,
            "user_id": user_id,
            "content": comment_data.content,
        })
        self.notifications.notify(
            recipient_id=feature_request.get("creator_id"),
            sender_id=user_id,
            type="comment",
            title="New comment on your feature request",
            content=f'Someone commented on your "{feature_request.get("title", "")}" feature request',
            source_url=f"/feature-requests/{request_id}",
        )
        return CommentResponse(**row, user=self.users.summaries([user_id]).get(user_id))

    def upvote(self, request_id: str, user_data: dict) -> UpvoteResponse:
        """Toggle the caller's upvote. The owner is notified when a new upvote lands."""
        feature_request = check_feature_request_access(request_id, user_data, self.store)
        user_id = user_data["id"]
        result = self.ledger.apply_vote(request_id, user_id, UPVOTE)
        if result.action == CREATED:
            self.notifications.notify(
                recipient_id=feature_request.get("creator_id"),
                sender_id=user_id,
                type="upvote",
                title="Your feature request got an upvote!",
                content=f'Someone upvoted your feature request "{feature_request.get("title", "")}".',
                source_url=f"/feature-requests/{request_id}",
            )
        return UpvoteResponse(action=result.action, upvotes=result.upvotes)
