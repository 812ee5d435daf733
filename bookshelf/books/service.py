"""Book service - ownership-checked CRUD over a BookStore."""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping

from loguru import logger

from bookshelf.errors import Forbidden, NotFound, ValidationError
from bookshelf.storage import BookRecord, BookStore

from .validation import validate_book

EDITABLE_FIELDS = (
    "title",
    "author",
    "cover",
    "description",
    "category",
    "isbn",
    "published_year",
)
OPTIONAL_TEXT_FIELDS = ("cover", "isbn")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _editable(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only caller-editable fields; id, owner and timestamps are dropped."""
    picked = {name: fields[name] for name in EDITABLE_FIELDS if name in fields}
    for name in OPTIONAL_TEXT_FIELDS:
        if name in picked and picked[name] is None:
            picked[name] = ""
    return picked


class BookService:
    """CRUD on books, restricted to the owning user."""

    def __init__(self, store: BookStore, clock: Callable[[], datetime] = utcnow):
        """
        Args:
            store: BookStore holding the books
            clock: Source of "now" for timestamps
        """
        self.store = store
        self.clock = clock

    async def _get_owned(self, user_id: str, book_id: str) -> BookRecord:
        book = await self.store.get_book(book_id)
        if book is None:
            raise NotFound()
        if book.user_id != user_id:
            logger.warning(f"User {user_id} tried to access book {book_id} owned by another user")
            raise Forbidden()
        return book

    async def list(self, user_id: str) -> List[BookRecord]:
        """All books owned by user_id."""
        books = await self.store.list_books(user_id)
        logger.info(f"Retrieved {len(books)} books for user {user_id}")
        return books

    async def create(self, user_id: str, fields: Mapping[str, Any]) -> BookRecord:
        """
        Create a book owned by user_id.

        Raises:
            ValidationError: Listing every invalid field
        """
        data = {"cover": "", "isbn": "", **_editable(fields)}
        errors = validate_book(data)
        if errors:
            raise ValidationError(errors)

        now = self.clock()
        book = BookRecord.model_validate({
            **data,
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        })
        created = await self.store.insert_book(book)
        logger.info(f"Created book {created.id} for user {user_id}")
        return created

    async def get(self, user_id: str, book_id: str) -> BookRecord:
        """
        Raises:
            NotFound: No book with that id
            Forbidden: The book belongs to someone else
        """
        return await self._get_owned(user_id, book_id)

    async def update(self, user_id: str, book_id: str, partial_fields: Mapping[str, Any]) -> BookRecord:
        """
        Apply the supplied fields, re-validate the whole record and bump updated_at.

        id, owner and created_at are never taken from the input.

        Raises:
            NotFound, Forbidden: As for get
            ValidationError: If the merged record is invalid; nothing is stored
        """
        book = await self._get_owned(user_id, book_id)
        changes = _editable(partial_fields)

        merged = {**book.model_dump(), **changes}
        errors = validate_book(merged)
        if errors:
            raise ValidationError(errors)

        merged["updated_at"] = max(self.clock(), book.created_at)
        updated = await self.store.replace_book(BookRecord.model_validate(merged))
        logger.info(f"Updated book {book_id} for user {user_id}: {sorted(changes)}")
        return updated

    async def delete(self, user_id: str, book_id: str) -> None:
        """
        Delete a book. A second delete of the same id raises NotFound.

        Raises:
            NotFound, Forbidden: As for get
        """
        await self._get_owned(user_id, book_id)
        if not await self.store.delete_book(book_id):
            raise NotFound()
        logger.info(f"Deleted book {book_id} for user {user_id}")
