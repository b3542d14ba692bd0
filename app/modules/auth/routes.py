from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPAuthorizationCredentials
from app.core.dependencies import get_auth_service, get_current_user_id, security
from app.modules.auth.schemas import LoginRequest, RegisterRequest, RegisteredUser, SessionToken
from app.modules.auth.service import AuthService
from typing import Dict, Optional

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisteredUser, status_code=201)
def register(
    payload: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    return service.register(payload)


@router.post("/login", response_model=SessionToken)
def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Exchange email and password for a bearer session"""
    return service.login(payload)


@router.post("/logout")
def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    identity: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """End the session and forget the cached identity for this token"""
    service.logout(credentials.credentials)
    return {"success": True}


@router.get("/me")
def whoami(identity: Dict = Depends(get_current_user_id)):
    return identity
