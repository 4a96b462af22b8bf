"""
Authentication Routes

POST /auth/login - Login and get JWT token
POST /auth/register - Register new user (students get their record too)
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user
from app.schemas.schemas import (
    RegisterRequest, LoginRequest, LoginResponse, RegisterResponse, ProfileResponse
)
from app.services.auth_service import AuthService, get_auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    return auth.login(request)


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(request: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new user account.

    With role "student", age and course are required and the student
    record is created together with the account.
    """
    return auth.register(request)


@router.get("/me", response_model=ProfileResponse)
def get_me(
    user: ProfileResponse = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Get current authenticated user's info."""
    return auth.get_current_identity(user.id)
