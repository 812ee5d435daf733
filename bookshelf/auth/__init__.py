"""Authentication module for bookshelf."""

from .dependencies import (
    get_auth_service,
    get_book_service,
    get_current_user_id,
)
from .jwt_handler import JWTHandler
from .middleware import AuthMiddleware, SessionGate, extract_bearer_token
from .password import hash_password, verify_password
from .routes import router as auth_router
from .schemas import (
    AuthResult,
    LoginRequest,
    RegisterRequest,
    Session,
    UserResponse,
)
from .service import AuthService

__all__ = [
    # Router
    "auth_router",
    # Schemas
    "RegisterRequest",
    "LoginRequest",
    "Session",
    "AuthResult",
    "UserResponse",
    # Core
    "JWTHandler",
    "hash_password",
    "verify_password",
    "AuthService",
    "AuthMiddleware",
    "SessionGate",
    "extract_bearer_token",
    # Dependencies
    "get_auth_service",
    "get_book_service",
    "get_current_user_id",
]
