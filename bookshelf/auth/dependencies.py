from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from bookshelf.books.service import BookService

from .middleware import SessionGate
from .service import AuthService

# Bearer scheme mainly for Swagger UI; AuthMiddleware does the real gating
bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    """AuthService built at startup (see bookshelf.api.app.lifespan)."""
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        logger.error("Auth service not initialized")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Auth service not initialized",
        )
    return service


def get_book_service(request: Request) -> BookService:
    """BookService built at startup (see bookshelf.api.app.lifespan)."""
    service = getattr(request.app.state, "book_service", None)
    if service is None:
        logger.error("Book service not initialized")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Book service not initialized",
        )
    return service


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    """
    The authenticated user's id.

    Uses the identity AuthMiddleware resolved for this request. Routers
    mounted without the middleware verify the bearer token here instead.
    Failures raise bookshelf.errors.Unauthenticated (rendered as 401).
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return user_id

    header = f"Bearer {credentials.credentials}" if credentials else None
    return await SessionGate(auth_service).authenticate(header)
