"""FastAPI application"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from bookshelf.auth.jwt_handler import JWTHandler
from bookshelf.auth.middleware import AuthMiddleware
from bookshelf.auth.routes import router as auth_router
from bookshelf.auth.service import AuthService
from bookshelf.books.service import BookService
from bookshelf.config import config
from bookshelf.log import setup_logging
from bookshelf.storage.factory import create_stores

from .books import router as books_router
from .errors import register_exception_handlers
from .schemas import HealthResponse


def build_services() -> tuple[AuthService, BookService]:
    """Wire the services to the stores selected by STORAGE_BACKEND."""
    if not config.JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY is required to sign session tokens.")

    credential_store, book_store = create_stores(
        config.STORAGE_BACKEND,
        storage_path=config.STORAGE_PATH,
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_KEY,
    )
    return AuthService(credential_store, JWTHandler()), BookService(book_store)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Builds the services at startup unless they were injected via create_app().
    """
    setup_logging(config.LOG_LEVEL)

    if getattr(app.state, "auth_service", None) is None:
        try:
            app.state.auth_service, app.state.book_service = build_services()
            app.state.storage = config.STORAGE_BACKEND
        except RuntimeError as e:
            logger.error(
                f"Startup failed: {e} | "
                f"JWT_SECRET_KEY={'set' if config.JWT_SECRET_KEY else 'MISSING'}, "
                f"STORAGE_BACKEND={config.STORAGE_BACKEND}"
            )
            raise

    logger.info(f"Bookshelf API ready (storage={app.state.storage})")
    yield
    logger.info("Bookshelf API shutting down")


def create_app(
    auth_service: Optional[AuthService] = None,
    book_service: Optional[BookService] = None,
    storage: str = "custom",
) -> FastAPI:
    """
    Build the application.

    Pass both services to skip building them from configuration (tests,
    embedding in another process).
    """
    app = FastAPI(
        title="Bookshelf",
        description="Personal book catalog",
        version="1.0.0",
        lifespan=lifespan,
    )

    if auth_service is not None and book_service is not None:
        app.state.auth_service = auth_service
        app.state.book_service = book_service
        app.state.storage = storage

    register_exception_handlers(app)

    # Order matters: the last middleware added runs first, so CORS wraps auth
    app.add_middleware(AuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(books_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check"""
        return HealthResponse(status="ok", storage=getattr(request.app.state, "storage", "unknown"))

    return app


app = create_app()
