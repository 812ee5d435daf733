"""Global session middleware.

Every request outside the public whitelist must carry
`Authorization: Bearer <token>`. The token is verified on each request
(nothing is cached between requests) and the resolved user id is stored in
request.state.user_id for the route handlers.
"""
from typing import List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from bookshelf.errors import BookshelfError, Unauthenticated, public_error

from .service import AuthService

# Endpoints that need no authentication
PUBLIC_PATHS: List[str] = [
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/v1/auth/register",
    "/v1/auth/login",
]

# Swagger UI assets
PUBLIC_PREFIXES: List[str] = [
    "/docs/",
]

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header value.

    Raises:
        Unauthenticated: Header missing, not a Bearer credential, or empty
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthenticated("Not authenticated")
    token = authorization.removeprefix(BEARER_PREFIX).strip()
    if not token:
        raise Unauthenticated("Not authenticated")
    return token


class SessionGate:
    """Turns an Authorization header into a verified user id."""

    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service

    async def authenticate(self, authorization: Optional[str]) -> str:
        """
        Raises:
            Unauthenticated: No usable bearer credential
            InvalidToken: Token rejected by the signer
            UserNotFound: Token's user no longer exists
        """
        token = extract_bearer_token(authorization)
        return await self.auth_service.verify(token)


def _error_response(exc: BookshelfError) -> JSONResponse:
    status_code, body = public_error(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


class AuthMiddleware(BaseHTTPMiddleware):
    """Bearer-token gate in front of every protected endpoint."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # CORS preflight
        if request.method == "OPTIONS":
            return await call_next(request)

        if self._is_public(request.url.path):
            return await call_next(request)

        auth_service = getattr(request.app.state, "auth_service", None)
        if auth_service is None:
            logger.error("Auth service not initialized")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"detail": "Authentication service unavailable", "code": "INTERNAL_ERROR"},
            )

        try:
            user_id = await SessionGate(auth_service).authenticate(
                request.headers.get("Authorization")
            )
        except Unauthenticated as e:
            # InvalidToken and UserNotFound land here too; the client sees one generic 401
            logger.info(f"Rejected request to {request.url.path}: {type(e).__name__}")
            return _error_response(e)
        except BookshelfError as e:
            logger.error(f"Token verification failed: {type(e).__name__}")
            return _error_response(e)

        request.state.user_id = user_id
        return await call_next(request)

    @staticmethod
    def _is_public(path: str) -> bool:
        if path in PUBLIC_PATHS:
            return True
        return any(path.startswith(prefix) for prefix in PUBLIC_PREFIXES)
