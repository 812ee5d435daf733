"""Credential, book and session stores."""

from .base import BookStore, CredentialStore, SessionStore
from .in_memory import InMemoryBookStore, InMemoryCredentialStore, InMemorySessionStore
from .json_store import JsonBookStore, JsonCredentialStore, JsonSessionStore
from .models import BookRecord, SessionRecord, UserRecord
from .supabase_store import SupabaseBookStore, SupabaseCredentialStore

__all__ = [
    # Interfaces
    "CredentialStore",
    "BookStore",
    "SessionStore",
    # Records
    "UserRecord",
    "BookRecord",
    "SessionRecord",
    # Implementations
    "InMemoryCredentialStore",
    "InMemoryBookStore",
    "InMemorySessionStore",
    "JsonCredentialStore",
    "JsonBookStore",
    "JsonSessionStore",
    "SupabaseCredentialStore",
    "SupabaseBookStore",
]
