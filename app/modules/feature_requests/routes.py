from fastapi import APIRouter, Depends
from app.database.resource_store import ResourceStore, get_resource_store
from app.modules.feature_requests.schemas import (
    FeatureRequestCreate, FeatureRequestStatusUpdate, FeatureRequestResponse,
    FeatureRequestDetailResponse, UpvoteResponse
)
from app.modules.ideas.schemas import CommentCreate, CommentResponse
from app.modules.feature_requests.service import FeatureRequestService
from app.core.dependencies import get_current_user_id, get_optional_user
from typing import List, Optional, Dict

router = APIRouter(prefix="/feature-requests", tags=["feature-requests"])


def get_feature_request_service(store: ResourceStore = Depends(get_resource_store)) -> FeatureRequestService:
    return FeatureRequestService(store)


@router.get("", response_model=List[FeatureRequestResponse])
def list_feature_requests(
    status: Optional[str] = None,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: FeatureRequestService = Depends(get_feature_request_service)
):
    """List feature requests (status: all, popular or a status value)"""
    return service.list_feature_requests(user_data, status=status)


@router.post("", response_model=FeatureRequestResponse, status_code=201)
def create_feature_request(
    request_data: FeatureRequestCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: FeatureRequestService = Depends(get_feature_request_service)
):
    return service.create_feature_request(request_data, user_data["id"])


@router.get("/{request_id}", response_model=FeatureRequestDetailResponse)
def get_feature_request(
    request_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: FeatureRequestService = Depends(get_feature_request_service)
):
    """Get a feature request with its comments"""
    return service.get_feature_request(request_id, user_data)


@router.patch("/{request_id}", response_model=FeatureRequestResponse)
def update_feature_request_status(
    request_id: str,
    status_data: FeatureRequestStatusUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: FeatureRequestService = Depends(get_feature_request_service)
):
    """Update status (creator only)"""
    return service.update_status(request_id, status_data, user_data["id"])


@router.post("/{request_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(
    request_id: str,
    comment_data: CommentCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: FeatureRequestService = Depends(get_feature_request_service)
):
    return service.add_comment(request_id, comment_data, user_data)


@router.post("/{request_id}/upvote", response_model=UpvoteResponse)
def upvote(
    request_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: FeatureRequestService = Depends(get_feature_request_service)
):
    """Upvote; upvoting again removes the upvote"""
    return service.upvote(request_id, user_data)
