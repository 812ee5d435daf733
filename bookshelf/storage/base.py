"""Store interfaces.

Swap the backend by implementing these interfaces:

    from bookshelf.storage import JsonBookStore

    store = JsonBookStore("./data")
    service = BookService(store)
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from .models import BookRecord, SessionRecord, UserRecord


class CredentialStore(ABC):
    """User identity persistence.

    Emails are compared case-insensitively. Implementations raise
    DuplicateEmail / DuplicateUsername from create_user when a unique
    field is already taken.
    """

    @abstractmethod
    async def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        """Create a user with a fresh id and creation timestamp.

        Args:
            username: Unique username
            email: Unique email address (already normalised by the caller)
            password_hash: Digest produced by hash_password, never a raw password

        Returns:
            The stored record
        """

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Look a user up by id, None if absent."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Look a user up by email (case-insensitive), None if absent."""

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        """Look a user up by username, None if absent."""

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool:
        """Remove a user. Returns False if there was nothing to remove."""


class BookStore(ABC):
    """Book persistence keyed by book id.

    Stores do not check ownership; BookService does.
    """

    @abstractmethod
    async def list_books(self, user_id: str) -> List[BookRecord]:
        """All books owned by user_id, in no particular order."""

    @abstractmethod
    async def get_book(self, book_id: str) -> Optional[BookRecord]:
        """A book by id regardless of owner, None if absent."""

    @abstractmethod
    async def insert_book(self, book: BookRecord) -> BookRecord:
        """Persist a new book."""

    @abstractmethod
    async def replace_book(self, book: BookRecord) -> BookRecord:
        """Overwrite the stored book with the same id."""

    @abstractmethod
    async def delete_book(self, book_id: str) -> bool:
        """Remove a book. Returns False if there was nothing to remove."""


class SessionStore(ABC):
    """The client's current-session slot."""

    @abstractmethod
    async def load(self) -> Optional[SessionRecord]:
        pass

    @abstractmethod
    async def save(self, session: SessionRecord) -> None:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass
