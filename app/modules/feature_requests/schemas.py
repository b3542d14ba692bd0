from pydantic import BaseModel, field_validator
from typing import Optional, List, Literal
from datetime import datetime
from app.modules.users.schemas import UserSummary
from app.modules.ideas.schemas import CommentResponse

FeatureRequestStatus = Literal["active", "in_progress", "completed"]


class FeatureRequestCreate(BaseModel):
    title: str
    description: str
    category: str
    is_public: bool = True

    @field_validator("title", "description", "category")
    @classmethod
    def required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Title, description, and category are required")
        return v.strip()


class FeatureRequestStatusUpdate(BaseModel):
    status: FeatureRequestStatus


class FeatureRequestResponse(BaseModel):
    id: str
    title: str
    description: str
    category: str
    status: str = "active"
    is_public: bool = True
    creator_id: str
    upvotes: int = 0
    comment_count: int = 0
    creator: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FeatureRequestDetailResponse(FeatureRequestResponse):
    comments: List[CommentResponse] = []


class UpvoteResponse(BaseModel):
    action: str
    upvotes: int
