from fastapi import APIRouter, Depends
from app.database.resource_store import ResourceStore, get_resource_store
from app.modules.ideas.schemas import (
    IdeaCreate, IdeaUpdate, IdeaResponse, PublicIdeasResponse, UserIdeasResponse,
    AssignResult, AssignmentsResponse, VoteRequest, VoteResponse, CurrentVoteResponse,
    CommentCreate, CommentResponse
)
from app.modules.ideas.service import IdeaService
from app.core.dependencies import get_current_user_id, get_optional_user
from app.core.errors import AuthenticationError
from typing import List, Optional, Dict, Union

router = APIRouter(prefix="/ideas", tags=["ideas"])


def get_idea_service(store: ResourceStore = Depends(get_resource_store)) -> IdeaService:
    return IdeaService(store)


@router.get("", response_model=Union[PublicIdeasResponse, UserIdeasResponse])
def list_ideas(
    public: bool = False,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: IdeaService = Depends(get_idea_service)
):
    """Published ideas with public=true; otherwise the caller's own and collaborated ideas"""
    if public:
        return PublicIdeasResponse(ideas=service.list_public_ideas())
    if user_data is None:
        raise AuthenticationError()
    return service.list_user_ideas(user_data["id"])


@router.post("", response_model=IdeaResponse, status_code=201)
def create_idea(
    idea_data: IdeaCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Create a new idea"""
    return service.create_idea(idea_data, user_data["id"])


@router.get("/{idea_id}", response_model=IdeaResponse)
def get_idea(
    idea_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: IdeaService = Depends(get_idea_service)
):
    """Get idea by ID (published, or caller is creator or member)"""
    return service.get_idea(idea_id, user_data)


@router.patch("/{idea_id}", response_model=IdeaResponse)
def update_idea(
    idea_id: str,
    idea_data: IdeaUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Update idea (creator only)"""
    return service.update_idea(idea_id, idea_data, user_data["id"])


@router.delete("/{idea_id}")
def delete_idea(
    idea_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Delete idea (creator only)"""
    service.delete_idea(idea_id, user_data["id"])
    return {"success": True}


@router.post("/{idea_id}/assign", response_model=AssignResult)
def assign_to_idea(
    idea_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Assign the caller to the idea"""
    return service.assign(idea_id, user_data)


@router.get("/{idea_id}/assign", response_model=AssignmentsResponse)
def list_assignments(
    idea_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: IdeaService = Depends(get_idea_service)
):
    """List everyone assigned to the idea"""
    return AssignmentsResponse(assignments=service.list_assignments(idea_id, user_data))


@router.delete("/{idea_id}/assign")
def unassign_from_idea(
    idea_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Remove the caller's assignment"""
    service.unassign(idea_id, user_data["id"])
    return {"message": "Assignment successfully removed"}


@router.get("/{idea_id}/vote", response_model=CurrentVoteResponse)
def get_vote(
    idea_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: IdeaService = Depends(get_idea_service)
):
    """The caller's current vote (null when anonymous or not voted)"""
    return CurrentVoteResponse(vote=service.get_vote(idea_id, user_data))


@router.post("/{idea_id}/vote", response_model=VoteResponse)
def vote(
    idea_id: str,
    vote_data: VoteRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Vote 1 / -1; repeating the same vote removes it"""
    return service.vote(idea_id, user_data, vote_data.vote_type)


@router.delete("/{idea_id}/vote", response_model=VoteResponse)
def remove_vote(
    idea_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Remove the caller's vote"""
    return service.remove_vote(idea_id, user_data)


@router.get("/{idea_id}/comments", response_model=List[CommentResponse])
def list_comments(
    idea_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: IdeaService = Depends(get_idea_service)
):
    """Comments on the idea, oldest first"""
    return service.list_comments(idea_id, user_data)


@router.post("/{idea_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(
    idea_id: str,
    comment_data: CommentCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Comment on the idea"""
    return service.add_comment(idea_id, comment_data, user_data)


@router.delete("/{idea_id}/comments/{comment_id}")
def delete_comment(
    idea_id: str,
    comment_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service)
):
    """Delete your own comment"""
    service.delete_comment(idea_id, comment_id, user_data["id"])
    return {"success": True}
