from fastapi import APIRouter, Depends
from app.database.resource_store import ResourceStore, get_resource_store
from app.modules.posts.schemas import PostCreate, PostUpdate, PostResponse, PostsResponse, PostWithCommentsResponse
from app.modules.ideas.schemas import VoteRequest, VoteResponse, CurrentVoteResponse, CommentCreate, CommentResponse
from app.modules.posts.service import PostService
from app.core.dependencies import get_current_user_id, get_optional_user
from typing import List, Optional, Dict

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(store: ResourceStore = Depends(get_resource_store)) -> PostService:
    return PostService(store)


@router.get("", response_model=PostsResponse)
def list_posts(
    only_mine: bool = False,
    search: Optional[str] = None,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: PostService = Depends(get_post_service)
):
    """List posts visible to the caller, optionally filtered by a search term"""
    return PostsResponse(posts=service.list_posts(user_data, only_mine=only_mine, search=search))


@router.post("", response_model=PostResponse, status_code=201)
def create_post(
    post_data: PostCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    return service.create_post(post_data, user_data["id"])


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: PostService = Depends(get_post_service)
):
    """Get post by ID (public, or caller is the creator)"""
    return service.get_post(post_id, user_data)


@router.get("/{post_id}/with-comments", response_model=PostWithCommentsResponse)
def get_post_with_comments(
    post_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: PostService = Depends(get_post_service)
):
    return service.get_post_with_comments(post_id, user_data)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: str,
    post_data: PostUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    """Update post (creator only)"""
    return service.update_post(post_id, post_data, user_data["id"])


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    """Delete post (creator only)"""
    service.delete_post(post_id, user_data["id"])
    return {"success": True}


@router.get("/{post_id}/vote", response_model=CurrentVoteResponse)
def get_vote(
    post_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: PostService = Depends(get_post_service)
):
    return CurrentVoteResponse(vote=service.get_vote(post_id, user_data))


@router.post("/{post_id}/vote", response_model=VoteResponse)
def vote(
    post_id: str,
    vote_data: VoteRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    """Vote 1 / -1; repeating the same vote removes it"""
    return service.vote(post_id, user_data, vote_data.vote_type)


@router.get("/{post_id}/comments", response_model=List[CommentResponse])
def list_comments(
    post_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: PostService = Depends(get_post_service)
):
    return service.list_comments(post_id, user_data)


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    return service.add_comment(post_id, comment_data, user_data)


@router.delete("/{post_id}/comments/{comment_id}")
def delete_comment(
    post_id: str,
    comment_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    """Delete your own comment"""
    service.delete_comment(post_id, comment_id, user_data["id"])
    return {"success": True}
