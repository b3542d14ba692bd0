from app.database.resource_store import ResourceStore
from app.modules.posts.schemas import PostCreate, PostUpdate, PostResponse, PostWithCommentsResponse
from app.modules.ideas.schemas import VoteResponse, CommentCreate, CommentResponse
from app.modules.notifications.service import NotificationService
from app.modules.users.service import UserService
from app.core import access_policy
from app.core.access_policy import enforce
from app.core.dependencies import check_post_access
from app.core.errors import NotFoundError, UpstreamError
from app.core.vote_ledger import VoteLedger, POST_VOTES, validate_vote_type
from fastapi import HTTPException
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ["title", "description", "content"]


class PostService:
    def __init__(self, store: ResourceStore):
        self.store = store
        self.users = UserService(store)
        self.notifications = NotificationService(store)
        self.ledger = VoteLedger(store, POST_VOTES)

    def _shape(self, posts: List[Dict[str, Any]]) -> List[PostResponse]:
        if not posts:
            return []
        creators = self.users.summaries(p.get("creator_id") for p in posts)
        counts: Dict[str, int] = {}
        for c in self.store.query("post_comments", in_={"post_id": [p["id"] for p in posts]}):
            counts[c["post_id"]] = counts.get(c["post_id"], 0) + 1
        return [
            PostResponse(**{**p, "comment_count": counts.get(p["id"], 0), "creator": creators.get(p.get("creator_id"))})
            for p in posts
        ]

    def list_posts(self, user_data: Optional[dict], only_mine: bool = False, search: Optional[str] = None) -> List[PostResponse]:
        """
        Posts visible to the caller, newest first.

        Anonymous callers see public posts. Signed-in callers see public posts
        plus their own private ones, or only their own with only_mine.
        """
        search_arg = (SEARCH_COLUMNS, search) if search and search.strip() else None
        user_id = user_data["id"] if user_data else None

        if user_id and only_mine:
            rows = self.store.query("posts", filters={"creator_id": user_id}, search=search_arg)
        else:
            rows = self.store.query("posts", filters={"is_public": True}, search=search_arg)
            if user_id:
                seen = {r["id"] for r in rows}
                rows += [
                    r for r in self.store.query(
                        "posts", filters={"creator_id": user_id, "is_public": False}, search=search_arg
                    )
                    if r["id"] not in seen
                ]

        rows.sort(key=lambda r: r.get("created_at") or "", reverse=True)
        return self._shape(rows)

    def create_post(self, post_data: PostCreate, user_id: str) -> PostResponse:
        try:
            now = datetime.utcnow().isoformat()
            row = self.store.insert("posts", {
                "title": post_data.title,
                "description": post_data.description or "",
                "content": post_data.content or "",
                "is_public": post_data.is_public,
                "creator_id": user_id,
                "upvotes": 0,
                "updated_at": now,
            })
            return self._shape([row])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating post: {e}")
            raise UpstreamError("Failed to create post")

    def get_post(self, post_id: str, user_data: Optional[dict]) -> PostResponse:
        return self._shape([check_post_access(post_id, user_data, self.store)])[0]

    def get_post_with_comments(self, post_id: str, user_data: Optional[dict]) -> PostWithCommentsResponse:
        """Post and its comments in one response"""
        post = self.get_post(post_id, user_data)
        return PostWithCommentsResponse(post=post, comments=self._comments(post_id))

    def update_post(self, post_id: str, post_data: PostUpdate, user_id: str) -> PostResponse:
        post = self.store.get("posts", post_id, not_found="Post not found")
        enforce(access_policy.posts.can_modify(user_id, post), "You can only update your own posts")

        update_data = post_data.model_dump(exclude_none=True)
        update_data["updated_at"] = datetime.utcnow().isoformat()
        row = self.store.update("posts", post_id, update_data, not_found="Post not found")
        return self._shape([row])[0]

    def delete_post(self, post_id: str, user_id: str) -> None:
        post = self.store.get("posts", post_id, not_found="Post not found")
        enforce(access_policy.posts.can_delete(user_id, post), "You can only delete your own posts")
        self.store.delete("posts", post_id)

    # Votes

    def get_vote(self, post_id: str, user_data: Optional[dict]) -> Optional[int]:
        if user_data is None:
            return None
        check_post_access(post_id, user_data, self.store)
        return self.ledger.current_vote(post_id, user_data["id"])

    def vote(self, post_id: str, user_data: dict, vote_type: Any) -> VoteResponse:
        vote_type = validate_vote_type(vote_type)
        check_post_access(post_id, user_data, self.store)
        result = self.ledger.apply_vote(post_id, user_data["id"], vote_type)
        return VoteResponse(action=result.action, upvotes=result.upvotes, vote=result.vote)

    # Comments

    def _comments(self, post_id: str) -> List[CommentResponse]:
        rows = self.store.query("post_comments", filters={"post_id": post_id}, order="created_at")
        users = self.users.summaries(r["user_id"] for r in rows)
        return [CommentResponse(**r, user=users.get(r["user_id"])) for r in rows]

    def list_comments(self, post_id: str, user_data: Optional[dict]) -> List[CommentResponse]:
        check_post_access(post_id, user_data, self.store)
        return self._comments(post_id)

    def add_comment(self, post_id: str, comment_data: CommentCreate, user_data: dict) -> CommentResponse:
        post = check_post_access(post_id, user_data, self.store)
        user_id = user_data["id"]
        row = self.store.insert("post_comments", {
            "post_id": post_id,
            "user_id": user_id,
            "content": comment_data.content,
        })
        self.notifications.notify(
            recipient_id=post.get("creator_id"),
            sender_id=user_id,
            type="comment",
            title="New comment on your post",
            content=f'Someone commented on your post "{post.get("title", "")}".',
            source_url=f"/posts/{post_id}",
        )
        return CommentResponse(**row, user=self.users.summaries([user_id]).get(user_id))

    def delete_comment(self, post_id: str, comment_id: str, user_id: str) -> None:
        """Delete a comment (author only)"""
        comment = self.store.find_one("post_comments", {"id": comment_id, "post_id": post_id})
        if comment is None:
            raise NotFoundError("Comment not found")
        enforce(access_policy.comments.can_delete(user_id, comment), "You can only delete your own comments")
        self.store.delete("post_comments", comment_id)
