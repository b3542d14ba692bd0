from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any, Dict, Literal
from datetime import datetime
from app.core.vote_ledger import DOWNVOTE, INVALID_VOTE_TYPE, UPVOTE
from app.modules.users.schemas import UserSummary

IdeaStatus = Literal["draft", "in_progress", "completed", "archived"]


class IdeaCreate(BaseModel):
    title: str
    description: Optional[str] = ""
    is_published: bool = False
    status: IdeaStatus = "draft"
    tags: List[str] = []

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class IdeaUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[IdeaStatus] = None
    is_published: Optional[bool] = None
    tags: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip() if v is not None else v


class IdeaResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = ""
    creator_id: str
    status: str = "draft"
    is_published: bool = False
    published_at: Optional[datetime] = None
    upvotes: int = 0
    tags: List[str] = []
    comment_count: int = 0
    creator: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicIdeasResponse(BaseModel):
    ideas: List[IdeaResponse]


class UserIdeasResponse(BaseModel):
    my_ideas: List[IdeaResponse]
    collaborated_ideas: List[IdeaResponse]


class AssignmentResponse(BaseModel):
    id: str
    idea_id: str
    user_id: str
    status: Optional[str] = None
    assigned_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class AssignResult(BaseModel):
    message: str
    assignment: AssignmentResponse


class AssignmentsResponse(BaseModel):
    assignments: List[AssignmentResponse]


class VoteRequest(BaseModel):
    # Rejected while parsing the body, before the route loads the subject
    vote_type: Any = Field(default=None, validate_default=True)

    @field_validator("vote_type", mode="before")
    @classmethod
    def vote_type_is_up_or_down(cls, v: Any) -> int:
        if isinstance(v, bool) or v not in (UPVOTE, DOWNVOTE):
            raise ValueError(INVALID_VOTE_TYPE)
        return int(v)


class VoteResponse(BaseModel):
    action: str
    upvotes: int
    vote: Optional[Dict[str, Any]] = None


class CurrentVoteResponse(BaseModel):
    vote: Optional[int] = None


class CommentCreate(BaseModel):
    content: str
    parent_id: Optional[str] = None

    @field_validator("content")
    @classmethod
    def content_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Comment content is required")
        return v.strip()


class CommentResponse(BaseModel):
    id: str
    user_id: str
    content: str
    idea_id: Optional[str] = None
    post_id: Optional[str] = None
    feature_request_id: Optional[str] = None
    parent_id: Optional[str] = None
    user: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
