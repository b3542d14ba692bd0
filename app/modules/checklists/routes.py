from fastapi import APIRouter, Depends
from app.database.resource_store import ResourceStore, get_resource_store
from app.modules.checklists.schemas import (
    ChecklistCreate, ChecklistItemCreate, ChecklistItemUpdate, ChecklistItemPut,
    ChecklistResponse, IdeaChecklistsResponse, ItemMutationResponse, ItemDeleteResponse
)
from app.modules.checklists.service import ChecklistService
from app.core.dependencies import get_current_user_id
from typing import Dict

router = APIRouter(tags=["checklists"])


def get_checklist_service(store: ResourceStore = Depends(get_resource_store)) -> ChecklistService:
    return ChecklistService(store)


@router.get("/ideas/{idea_id}/checklists", response_model=IdeaChecklistsResponse)
def list_idea_checklists(
    idea_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    """Personal and shared checklists of an idea, each with its progress"""
    return service.list_for_idea(idea_id, user_data)


@router.post("/ideas/{idea_id}/checklists", response_model=ChecklistResponse, status_code=201)
def create_checklist(
    idea_id: str,
    checklist_data: ChecklistCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    """Create a checklist on an idea"""
    return service.create_checklist(idea_id, checklist_data, user_data)


@router.get("/checklists/{checklist_id}", response_model=ChecklistResponse)
def get_checklist(
    checklist_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    return service.get_checklist(checklist_id, user_data["id"])


@router.delete("/checklists/{checklist_id}")
def delete_checklist(
    checklist_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    """Delete checklist (creator only)"""
    service.delete_checklist(checklist_id, user_data["id"])
    return {"success": True}


@router.post("/checklists/{checklist_id}/items", response_model=ItemMutationResponse, status_code=201)
def add_item(
    checklist_id: str,
    item_data: ChecklistItemCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    """Add an item to a checklist"""
    return service.add_item(checklist_id, item_data, user_data["id"])


@router.put("/checklists/{checklist_id}/items", response_model=ItemMutationResponse)
def update_item(
    checklist_id: str,
    item_data: ChecklistItemPut,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    """Toggle completion, edit text or move an item"""
    return service.update_item(checklist_id, item_data.item_id, item_data, user_data["id"])


@router.delete("/checklists/{checklist_id}/items/{item_id}", response_model=ItemDeleteResponse)
def delete_item(
    checklist_id: str,
    item_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    return service.delete_item(checklist_id, item_id, user_data["id"])


@router.patch("/checklist-items/{item_id}", response_model=ItemMutationResponse)
def update_item_by_id(
    item_id: str,
    item_data: ChecklistItemUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    """Update a checklist item addressed directly"""
    return service.update_item_by_id(item_id, item_data, user_data["id"])


@router.delete("/checklist-items/{item_id}", response_model=ItemDeleteResponse)
def delete_item_by_id(
    item_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ChecklistService = Depends(get_checklist_service)
):
    return service.delete_item_by_id(item_id, user_data["id"])
