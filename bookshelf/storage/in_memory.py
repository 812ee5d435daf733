"""In-memory stores.

For development and tests. Everything is lost when the process exits.
Use the JSON or Supabase stores for anything that must survive a restart.
"""
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from bookshelf.errors import DuplicateEmail, DuplicateUsername

from .base import BookStore, CredentialStore, SessionStore
from .models import BookRecord, SessionRecord, UserRecord


class InMemoryCredentialStore(CredentialStore):
    """Dictionary-backed user store.

    Example:
        store = InMemoryCredentialStore()
        user = await store.create_user("reader", "reader@example.com", digest)
        await store.get_user_by_email("READER@example.com")  # same user
    """

    def __init__(self):
        self._users: Dict[str, UserRecord] = {}

    async def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        if await self.get_user_by_email(email):
            raise DuplicateEmail()
        if await self.get_user_by_username(username):
            raise DuplicateUsername()

        user = UserRecord(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        self._users[user.id] = user
        return user.model_copy()

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return user.model_copy()
        return None

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.username == username:
                return user.model_copy()
        return None

    async def delete_user(self, user_id: str) -> bool:
        return self._users.pop(user_id, None) is not None


class InMemoryBookStore(BookStore):
    """Dictionary-backed book store."""

    def __init__(self):
        self._books: Dict[str, BookRecord] = {}

    async def list_books(self, user_id: str) -> List[BookRecord]:
        return [b.model_copy() for b in self._books.values() if b.user_id == user_id]

    async def get_book(self, book_id: str) -> Optional[BookRecord]:
        book = self._books.get(book_id)
        return book.model_copy() if book else None

    async def insert_book(self, book: BookRecord) -> BookRecord:
        self._books[book.id] = book.model_copy()
        return book.model_copy()

    async def replace_book(self, book: BookRecord) -> BookRecord:
        self._books[book.id] = book.model_copy()
        return book.model_copy()

    async def delete_book(self, book_id: str) -> bool:
        return self._books.pop(book_id, None) is not None

    def count(self) -> int:
        """Number of stored books across all users."""
        return len(self._books)


class InMemorySessionStore(SessionStore):
    """Single-slot session holder."""

    def __init__(self):
        self._session: Optional[SessionRecord] = None

    async def load(self) -> Optional[SessionRecord]:
        return self._session

    async def save(self, session: SessionRecord) -> None:
        self._session = session

    async def clear(self) -> None:
        self._session = None
