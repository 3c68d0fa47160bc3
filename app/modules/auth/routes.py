from fastapi import APIRouter, Depends, Request

from app.core.dependencies import get_auth_service, get_current_user
from app.core.rate_limit import limiter
from app.config import settings
from app.modules.auth.schemas import (
    Identity, LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
)
from app.modules.auth.service import AuthService

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def register(
    request: Request,
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get a session token"""
    return service.login(login_data)


@router.get("/me", response_model=Identity)
async def get_me(current_user: Identity = Depends(get_current_user)):
    """Identity carried by the current token"""
    return current_user
