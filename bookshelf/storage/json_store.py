"""JSON file stores.

Three independent blobs live under one directory:

    <root>/session.json   current signed-in session (or absent)
    <root>/users.json     every registered user
    <root>/books.json     every book of every user

Each mutation reads the whole blob, changes it, and writes it back in full
(temp file + rename). A per-blob lock serialises the read-modify-write
within one process.
"""
import os
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

import anyio
from loguru import logger
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from bookshelf.errors import DuplicateEmail, DuplicateUsername, StoreError

from .base import BookStore, CredentialStore, SessionStore
from .models import BookRecord, SessionRecord, UserRecord

SESSION_FILE = "session.json"
USERS_FILE = "users.json"
BOOKS_FILE = "books.json"


class JsonBlob:
    """One JSON file holding a value of a fixed schema."""

    def __init__(self, path: Union[str, Path], schema: Any, empty: Any = None):
        self.path = Path(path)
        self._adapter = TypeAdapter(schema)
        self._empty = empty
        self._lock = threading.Lock()

    def _read_sync(self) -> Any:
        try:
            raw = self.path.read_bytes() if self.path.exists() else b""
        except OSError as e:
            logger.error(f"Failed to read {self.path.name}: {type(e).__name__}")
            raise StoreError(f"Could not read {self.path.name}") from e

        if not raw.strip():
            return self._fresh()
        try:
            return self._adapter.validate_json(raw)
        except SchemaError as e:
            logger.error(f"Malformed blob {self.path.name}: {e.error_count()} error(s)")
            raise StoreError(f"Malformed data in {self.path.name}") from e

    def _write_sync(self, value: Any) -> None:
        data = self._adapter.dump_json(value, indent=2)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error(f"Failed to write {self.path.name}: {type(e).__name__}")
            raise StoreError(f"Could not write {self.path.name}") from e

    def _fresh(self) -> Any:
        return list(self._empty) if isinstance(self._empty, list) else self._empty

    async def read(self) -> Any:
        def _locked_read():
            with self._lock:
                return self._read_sync()

        return await anyio.to_thread.run_sync(_locked_read)

    async def update(self, mutate: Callable[[Any], Tuple[Any, Any]]) -> Any:
        """Apply mutate(current) -> (new_value, result) and persist new_value.

        If mutate raises, nothing is written.
        """
        def _locked_update():
            with self._lock:
                new_value, result = mutate(self._read_sync())
                self._write_sync(new_value)
                return result

        return await anyio.to_thread.run_sync(_locked_update)

    async def remove(self) -> None:
        def _locked_remove():
            with self._lock:
                try:
                    self.path.unlink(missing_ok=True)
                except OSError as e:
                    raise StoreError(f"Could not remove {self.path.name}") from e

        await anyio.to_thread.run_sync(_locked_remove)


class JsonCredentialStore(CredentialStore):
    """Users kept in <root>/users.json."""

    def __init__(self, root: Union[str, Path]):
        self._blob = JsonBlob(Path(root) / USERS_FILE, List[UserRecord], empty=[])

    async def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        def _append(users: List[UserRecord]):
            if any(u.email.lower() == email.lower() for u in users):
                raise DuplicateEmail()
            if any(u.username == username for u in users):
                raise DuplicateUsername()
            user = UserRecord(
                id=str(uuid.uuid4()),
                username=username,
                email=email,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
            )
            return users + [user], user

        user = await self._blob.update(_append)
        logger.info(f"User created: {user.id}")
        return user

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        users = await self._blob.read()
        return next((u for u in users if u.id == user_id), None)

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        wanted = email.strip().lower()
        users = await self._blob.read()
        return next((u for u in users if u.email.lower() == wanted), None)

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        users = await self._blob.read()
        return next((u for u in users if u.username == username), None)

    async def delete_user(self, user_id: str) -> bool:
        def _drop(users: List[UserRecord]):
            kept = [u for u in users if u.id != user_id]
            return kept, len(kept) != len(users)

        return await self._blob.update(_drop)


class JsonBookStore(BookStore):
    """Books of all users kept in <root>/books.json."""

    def __init__(self, root: Union[str, Path]):
        self._blob = JsonBlob(Path(root) / BOOKS_FILE, List[BookRecord], empty=[])

    async def list_books(self, user_id: str) -> List[BookRecord]:
        books = await self._blob.read()
        return [b for b in books if b.user_id == user_id]

    async def get_book(self, book_id: str) -> Optional[BookRecord]:
        books = await self._blob.read()
        return next((b for b in books if b.id == book_id), None)

    async def insert_book(self, book: BookRecord) -> BookRecord:
        def _append(books: List[BookRecord]):
            if any(b.id == book.id for b in books):
                raise StoreError(f"Book id collision: {book.id}")
            return books + [book], book

        return await self._blob.update(_append)

    async def replace_book(self, book: BookRecord) -> BookRecord:
        def _replace(books: List[BookRecord]):
            if not any(b.id == book.id for b in books):
                raise StoreError(f"Book vanished during update: {book.id}")
            return [book if b.id == book.id else b for b in books], book

        return await self._blob.update(_replace)

    async def delete_book(self, book_id: str) -> bool:
        def _drop(books: List[BookRecord]):
            kept = [b for b in books if b.id != book_id]
            return kept, len(kept) != len(books)

        return await self._blob.update(_drop)


class JsonSessionStore(SessionStore):
    """The current session kept in <root>/session.json."""

    def __init__(self, root: Union[str, Path]):
        self._blob = JsonBlob(Path(root) / SESSION_FILE, Optional[SessionRecord], empty=None)

    async def load(self) -> Optional[SessionRecord]:
        return await self._blob.read()

    async def save(self, session: SessionRecord) -> None:
        await self._blob.update(lambda _current: (session, None))

    async def clear(self) -> None:
        await self._blob.remove()
