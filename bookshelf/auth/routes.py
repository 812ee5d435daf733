"""Authentication API routes."""

from fastapi import APIRouter, Depends, status

from .dependencies import get_auth_service, get_current_user_id
from .schemas import LoginRequest, RegisterRequest, Session, UserResponse
from .service import AuthService

router = APIRouter(prefix="/v1/auth", tags=["auth"])


@router.post("/register", response_model=Session, status_code=status.HTTP_201_CREATED)
async def register(
    request_body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Session:
    """
    Register a new user with username, email and password.

    The new user is signed in straight away: the response carries a token.
    """
    result = await auth_service.register(
        request_body.username, request_body.email, request_body.password
    )
    return result.session


@router.post("/login", response_model=Session)
async def login(
    request_body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Session:
    """
    Login with email and password.

    Unknown emails and wrong passwords get the same 401 response.
    """
    return await auth_service.login(request_body.email, request_body.password)


@router.get("/me", response_model=UserResponse)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Get the current user's profile. Requires a valid token."""
    return await auth_service.get_current_user(user_id)
