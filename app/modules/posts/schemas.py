from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime
from app.modules.users.schemas import UserSummary
from app.modules.ideas.schemas import CommentResponse


class PostCreate(BaseModel):
    title: str
    description: Optional[str] = ""
    content: Optional[str] = ""
    is_public: bool = True

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class PostUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip() if v is not None else v


class PostResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = ""
    content: Optional[str] = ""
    is_public: bool = True
    creator_id: str
    upvotes: int = 0
    comment_count: int = 0
    creator: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PostsResponse(BaseModel):
    posts: List[PostResponse]


class PostWithCommentsResponse(BaseModel):
    post: PostResponse
    comments: List[CommentResponse]
