from pydantic import BaseModel, field_validator
from typing import Optional, List, Union
from datetime import datetime
from app.modules.users.schemas import UserSummary


class ChecklistItemSeed(BaseModel):
    text: str


class ChecklistCreate(BaseModel):
    title: str
    is_shared: bool = False
    items: List[Union[str, ChecklistItemSeed]] = []

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    def item_texts(self) -> List[str]:
        texts = [i if isinstance(i, str) else i.text for i in self.items]
        return [t.strip() for t in texts if t and t.strip()]


class ChecklistItemCreate(BaseModel):
    text: str
    position: Optional[int] = None

    @field_validator("text")
    @classmethod
    def text_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Item text is required")
        return v.strip()


class ChecklistItemUpdate(BaseModel):
    text: Optional[str] = None
    position: Optional[int] = None
    completed: Optional[bool] = None

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Item text cannot be empty")
        return v.strip() if v is not None else v


class ChecklistItemPut(ChecklistItemUpdate):
    """Item update addressed through its checklist"""
    item_id: str


class ChecklistItemResponse(BaseModel):
    id: str
    checklist_id: str
    text: str
    completed: bool = False
    position: int = 0
    created_by: Optional[str] = None
    completed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by_user: Optional[UserSummary] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChecklistResponse(BaseModel):
    id: str
    idea_id: str
    creator_id: str
    title: str
    is_shared: bool = False
    progress: int = 0
    checklist_items: List[ChecklistItemResponse] = []
    owner: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class IdeaChecklistsResponse(BaseModel):
    personal_checklists: List[ChecklistResponse]
    shared_checklists: List[ChecklistResponse]


class ItemMutationResponse(BaseModel):
    item: ChecklistItemResponse
    progress: int


class ItemDeleteResponse(BaseModel):
    success: bool = True
    progress: int
