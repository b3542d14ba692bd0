from app.database.resource_store import ResourceStore
from app.modules.ideas.schemas import (
    IdeaCreate, IdeaUpdate, IdeaResponse, UserIdeasResponse,
    AssignmentResponse, AssignResult, VoteResponse, CommentCreate, CommentResponse
)
from app.modules.notifications.service import NotificationService
from app.modules.users.service import UserService
from app.core import access_policy
from app.core.access_policy import enforce
from app.core.dependencies import check_idea_access, idea_access_context
from app.core.errors import ConflictError, NotFoundError, UpstreamError
from app.core.vote_ledger import VoteLedger, IDEA_VOTES, validate_vote_type
from fastapi import HTTPException
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class IdeaService:
    def __init__(self, store: ResourceStore):
        self.store = store
        self.users = UserService(store)
        self.notifications = NotificationService(store)
        self.ledger = VoteLedger(store, IDEA_VOTES)

    def _shape(self, ideas: List[Dict[str, Any]]) -> List[IdeaResponse]:
        """Attach creator info and comment counts"""
        if not ideas:
            return []
        creators = self.users.summaries(i.get("creator_id") for i in ideas)
        comment_rows = self.store.query("comments", in_={"idea_id": [i["id"] for i in ideas]})
        counts: Dict[str, int] = {}
        for c in comment_rows:
            counts[c["idea_id"]] = counts.get(c["idea_id"], 0) + 1
        return [
            IdeaResponse(**{**i, "comment_count": counts.get(i["id"], 0), "creator": creators.get(i.get("creator_id"))})
            for i in ideas
        ]

    def list_public_ideas(self) -> List[IdeaResponse]:
        """Published ideas, newest first (no login required)"""
        rows = self.store.query("ideas", filters={"is_published": True}, order="created_at", desc=True)
        return self._shape(rows)

    def list_user_ideas(self, user_id: str) -> UserIdeasResponse:
        """Ideas the user created and ideas they are assigned to"""
        mine = self.store.query("ideas", filters={"creator_id": user_id}, order="created_at", desc=True)
        assignments = self.store.query("idea_assignments", filters={"user_id": user_id})
        collaborated = [
            i for i in self.store.query(
                "ideas",
                in_={"id": [a["idea_id"] for a in assignments]},
                order="created_at",
                desc=True
            )
            if i.get("creator_id") != user_id
        ]
        return UserIdeasResponse(my_ideas=self._shape(mine), collaborated_ideas=self._shape(collaborated))

    def create_idea(self, idea_data: IdeaCreate, user_id: str) -> IdeaResponse:
        """Create a new idea owned by the caller"""
        try:
            now = datetime.utcnow().isoformat()
            row = self.store.insert("ideas", {
                "title": idea_data.title,
                "description": idea_data.description or "",
                "is_published": idea_data.is_published,
                "published_at": now if idea_data.is_published else None,
                "creator_id": user_id,
                "status": idea_data.status,
                "upvotes": 0,
                "tags": idea_data.tags or [],
            })
            return self._shape([row])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating idea: {e}")
            raise UpstreamError("Failed to create idea")

    def get_idea(self, idea_id: str, user_data: Optional[dict]) -> IdeaResponse:
        """Get idea by ID if the caller may read it"""
        idea = check_idea_access(idea_id, user_data, self.store)
        return self._shape([idea])[0]

    def update_idea(self, idea_id: str, idea_data: IdeaUpdate, user_id: str) -> IdeaResponse:
        """Update idea fields (creator only). published_at is stamped on the first publish."""
        idea = self.store.get("ideas", idea_id, not_found="Idea not found")
        enforce(access_policy.ideas.can_modify(user_id, idea), "Only the creator can edit this idea")

        update_data: Dict[str, Any] = {"updated_at": datetime.utcnow().isoformat()}
        if idea_data.title is not None:
            update_data["title"] = idea_data.title
        if idea_data.description is not None:
            update_data["description"] = idea_data.description
        if idea_data.status is not None:
            update_data["status"] = idea_data.status
        if idea_data.tags is not None:
            update_data["tags"] = idea_data.tags
        if idea_data.is_published is not None:
            update_data["is_published"] = idea_data.is_published
            if idea_data.is_published and not idea.get("published_at"):
                update_data["published_at"] = update_data["updated_at"]

        row = self.store.update("ideas", idea_id, update_data, not_found="Idea not found")
        return self._shape([row])[0]

    def delete_idea(self, idea_id: str, user_id: str) -> None:
        """Delete idea (creator only). Votes, comments, assignments and checklists cascade in the database."""
        idea = self.store.get("ideas", idea_id, not_found="Idea not found")
        enforce(access_policy.ideas.can_delete(user_id, idea), "Only the creator can delete this idea")
        self.store.delete("ideas", idea_id)

    # Membership

    def assign(self, idea_id: str, user_data: dict) -> AssignResult:
        """Assign the caller to an idea they can see. Assigning twice returns the existing assignment."""
        idea = check_idea_access(idea_id, user_data, self.store)
        user_id = user_data["id"]
        existing = self.store.find_one("idea_assignments", {"idea_id": idea_id, "user_id": user_id})
        if existing:
            return AssignResult(message="User already assigned to this idea", assignment=AssignmentResponse(**existing))
        try:
            row = self.store.insert("idea_assignments", {
                "idea_id": idea_id,
                "user_id": user_id,
                "status": "in_progress",
                "assigned_at": datetime.utcnow().isoformat(),
            })
        except ConflictError:
            # Lost a race with a concurrent assign of the same user
            row = self.store.find_one("idea_assignments", {"idea_id": idea_id, "user_id": user_id})
            if row is None:
                raise
            return AssignResult(message="User already assigned to this idea", assignment=AssignmentResponse(**row))
        self.notifications.notify(
            recipient_id=idea.get("creator_id"),
            sender_id=user_id,
            type="assignment",
            title="Someone joined your idea",
            content=f'A collaborator joined your idea "{idea.get("title", "")}".',
            source_url=f"/ideas/{idea_id}",
        )
        return AssignResult(message="User successfully assigned to idea", assignment=AssignmentResponse(**row))

    def list_assignments(self, idea_id: str, user_data: Optional[dict]) -> List[AssignmentResponse]:
        check_idea_access(idea_id, user_data, self.store)
        rows = self.store.query("idea_assignments", filters={"idea_id": idea_id}, order="assigned_at")
        users = self.users.summaries(r["user_id"] for r in rows)
        return [AssignmentResponse(**r, user=users.get(r["user_id"])) for r in rows]

    def unassign(self, idea_id: str, user_id: str) -> None:
        """Remove the caller's own assignment"""
        self.store.get("ideas", idea_id, not_found="Idea not found")
        self.store.delete_where("idea_assignments", {"idea_id": idea_id, "user_id": user_id})

    # Votes

    def get_vote(self, idea_id: str, user_data: Optional[dict]) -> Optional[int]:
        if user_data is None:
            return None
        check_idea_access(idea_id, user_data, self.store)
        return self.ledger.current_vote(idea_id, user_data["id"])

    def vote(self, idea_id: str, user_data: dict, vote_type: Any) -> VoteResponse:
        vote_type = validate_vote_type(vote_type)
        check_idea_access(idea_id, user_data, self.store)
        result = self.ledger.apply_vote(idea_id, user_data["id"], vote_type)
        return VoteResponse(action=result.action, upvotes=result.upvotes, vote=result.vote)

    def remove_vote(self, idea_id: str, user_data: dict) -> VoteResponse:
        check_idea_access(idea_id, user_data, self.store)
        result = self.ledger.remove_vote(idea_id, user_data["id"])
        return VoteResponse(action=result.action, upvotes=result.upvotes)

    # Comments

    def list_comments(self, idea_id: str, user_data: Optional[dict]) -> List[CommentResponse]:
        check_idea_access(idea_id, user_data, self.store)
        rows = self.store.query("comments", filters={"idea_id": idea_id}, order="created_at")
        users = self.users.summaries(r["user_id"] for r in rows)
        return [CommentResponse(**r, user=users.get(r["user_id"])) for r in rows]

    def add_comment(self, idea_id: str, comment_data: CommentCreate, user_data: dict) -> CommentResponse:
        idea = check_idea_access(idea_id, user_data, self.store)
        user_id = user_data["id"]
        if comment_data.parent_id:
            parent = self.store.find_one("comments", {"id": comment_data.parent_id, "idea_id": idea_id})
            if parent is None:
                raise NotFoundError("Parent comment not found")
        row = self.store.insert("comments", {
            "idea_id": idea_id,
            "user_id": user_id,
            "content": comment_data.content,
            "parent_id": comment_data.parent_id,
        })
        self.notifications.notify(
            recipient_id=idea.get("creator_id"),
            sender_id=user_id,
            type="comment",
            title="New comment on your idea",
            content=f'Someone commented on your idea "{idea.get("title", "")}".',
            source_url=f"/ideas/{idea_id}",
        )
        return CommentResponse(**row, user=self.users.summaries([user_id]).get(user_id))

    def delete_comment(self, idea_id: str, comment_id: str, user_id: str) -> None:
        """Delete a comment (author only)"""
        comment = self.store.find_one("comments", {"id": comment_id, "idea_id": idea_id})
        if comment is None:
            raise NotFoundError("Comment not found")
        enforce(access_policy.comments.can_delete(user_id, comment), "You can only delete your own comments")
        self.store.delete("comments", comment_id)
