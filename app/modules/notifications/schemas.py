from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
from app.modules.users.schemas import UserSummary


class NotificationCreate(BaseModel):
    type: str
    title: str
    content: str
    recipient_id: str
    source_url: Optional[str] = None

    @field_validator("type", "title", "content", "recipient_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Missing required fields")
        return v.strip()


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    content: str
    source_url: Optional[str] = None
    recipient_id: str
    sender_id: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
    sender: Optional[UserSummary] = None

    class Config:
        from_attributes = True
