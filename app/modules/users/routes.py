from fastapi import APIRouter, Depends
from app.database.resource_store import ResourceStore, get_resource_store
from app.modules.users.schemas import UserUpdate, UserResponse
from app.modules.users.service import UserService
from app.core.dependencies import get_current_user_id
from typing import Dict

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(store: ResourceStore = Depends(get_resource_store)) -> UserService:
    return UserService(store)


@router.get("/me", response_model=UserResponse)
def get_me(
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    """Get the caller's profile"""
    return service.get_user_by_id(user_data["id"])


@router.put("/me", response_model=UserResponse)
def update_me(
    user_data_body: UserUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    """Update the caller's profile (only your own profile can be edited)"""
    return service.update_user(user_data["id"], user_data_body)


@router.get("/{user_id}", response_model=UserResponse, response_model_exclude={"email"})
def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    """Get a public user profile"""
    return service.get_user_by_id(user_id)
