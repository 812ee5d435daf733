"""Pick the store implementations named by configuration."""
from typing import Optional, Tuple

from loguru import logger
from supabase import create_client

from .base import BookStore, CredentialStore
from .in_memory import InMemoryBookStore, InMemoryCredentialStore
from .json_store import JsonBookStore, JsonCredentialStore
from .supabase_store import SupabaseBookStore, SupabaseCredentialStore

BACKENDS = ("memory", "json", "supabase")


def create_stores(
    backend: str,
    storage_path: Optional[str] = None,
    supabase_url: Optional[str] = None,
    supabase_key: Optional[str] = None,
) -> Tuple[CredentialStore, BookStore]:
    """
    Build the credential and book stores for a backend.

    Args:
        backend: "memory", "json" or "supabase"
        storage_path: Directory for the json backend
        supabase_url: Project URL for the supabase backend
        supabase_key: API key for the supabase backend

    Raises:
        RuntimeError: Unknown backend or missing connection target
    """
    backend = (backend or "").lower()

    if backend == "memory":
        logger.warning("Using in-memory storage - data is lost on restart")
        return InMemoryCredentialStore(), InMemoryBookStore()

    if backend == "json":
        if not storage_path:
            raise RuntimeError("STORAGE_PATH is required for the json storage backend")
        logger.info(f"Using JSON storage at {storage_path}")
        return JsonCredentialStore(storage_path), JsonBookStore(storage_path)

    if backend == "supabase":
        if not supabase_url or not supabase_key:
            raise RuntimeError(
                "Supabase configuration missing. Set SUPABASE_URL and SUPABASE_KEY."
            )
        logger.info(f"Using Supabase storage: {supabase_url}")
        client = create_client(supabase_url, supabase_key)
        return SupabaseCredentialStore(client), SupabaseBookStore(client)

    raise RuntimeError(f"Unknown STORAGE_BACKEND '{backend}', expected one of {', '.join(BACKENDS)}")
