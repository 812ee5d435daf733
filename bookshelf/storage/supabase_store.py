"""Supabase (PostgREST) stores.

Expected tables:

    users(id uuid pk, username text unique, email text unique,
          password_hash text, created_at timestamptz)
    books(id uuid pk, user_id uuid references users(id), title text,
          author text, cover text, description text, category text,
          isbn text, published_year int, created_at timestamptz,
          updated_at timestamptz)

Emails are stored lowercased so equality lookups are case-insensitive.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

import anyio
from loguru import logger
from pydantic import ValidationError as SchemaError
from supabase import Client

from bookshelf.errors import DuplicateEmail, DuplicateUsername, StoreError

from .base import BookStore, CredentialStore
from .models import BookRecord, UserRecord

# PostgREST: no rows for maybe_single()
NO_ROWS = "PGRST116"
# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


def _is_uuid(value: str) -> bool:
    """Ids are uuid columns; anything else can never match a row."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _parse(model, row: dict):
    try:
        return model.model_validate(row)
    except SchemaError as e:
        logger.error(f"Unexpected row shape for {model.__name__}: {e.error_count()} error(s)")
        raise StoreError() from e


class SupabaseCredentialStore(CredentialStore):
    """Users kept in the Supabase `users` table."""

    def __init__(self, client: Client, table: str = "users"):
        """
        Args:
            client: Supabase client instance
            table: Name of the users table
        """
        self.client = client
        self.users_table = table

    async def _maybe_single(self, column: str, value: str) -> Optional[UserRecord]:
        def _get():
            return (
                self.client.table(self.users_table)
                .select("*")
                .eq(column, value)
                .maybe_single()
                .execute()
            )

        try:
            result = await anyio.to_thread.run_sync(_get)
        except Exception as e:
            if NO_ROWS in str(e):
                return None
            logger.error(f"Failed to get user by {column}: {type(e).__name__}")
            raise StoreError() from e

        # maybe_single() returns None (or empty data) when no row matches
        if not result or not result.data:
            return None
        return _parse(UserRecord, result.data)

    async def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        row = {
            "id": str(uuid.uuid4()),
            "username": username,
            "email": email.lower(),
            "password_hash": password_hash,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        def _insert():
            return self.client.table(self.users_table).insert(row).execute()

        try:
            result = await anyio.to_thread.run_sync(_insert)
        except Exception as e:
            message = str(e)
            if UNIQUE_VIOLATION in message:
                if "username" in message:
                    raise DuplicateUsername() from e
                raise DuplicateEmail() from e
            logger.error(f"Failed to create user: {type(e).__name__}")
            raise StoreError() from e

        if not result.data:
            logger.error("Failed to create user: no row returned")
            raise StoreError()

        logger.info(f"User created: {row['id']}")
        return _parse(UserRecord, result.data[0])

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        if not _is_uuid(user_id):
            return None
        return await self._maybe_single("id", user_id)

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        return await self._maybe_single("email", email.strip().lower())

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        return await self._maybe_single("username", username)

    async def delete_user(self, user_id: str) -> bool:
        def _delete():
            return self.client.table(self.users_table).delete().eq("id", user_id).execute()

        try:
            result = await anyio.to_thread.run_sync(_delete)
        except Exception as e:
            logger.error(f"Failed to delete user: {type(e).__name__}")
            raise StoreError() from e
        return bool(result.data)


class SupabaseBookStore(BookStore):
    """Books kept in the Supabase `books` table."""

    def __init__(self, client: Client, table: str = "books"):
        self.client = client
        self.books_table = table

    @staticmethod
    def _to_row(book: BookRecord) -> dict:
        return book.model_dump(mode="json")

    async def _run(self, action: str, query):
        try:
            return await anyio.to_thread.run_sync(query)
        except Exception as e:
            logger.error(f"Failed to {action}: {type(e).__name__}")
            raise StoreError() from e

    async def list_books(self, user_id: str) -> List[BookRecord]:
        result = await self._run(
            "list books",
            lambda: self.client.table(self.books_table).select("*").eq("user_id", user_id).execute(),
        )
        if result.data is None:
            raise StoreError()
        return [_parse(BookRecord, row) for row in result.data]

    async def get_book(self, book_id: str) -> Optional[BookRecord]:
        if not _is_uuid(book_id):
            return None
        result = await self._run(
            "get book",
            lambda: self.client.table(self.books_table).select("*").eq("id", book_id).execute(),
        )
        if not result.data:
            return None
        return _parse(BookRecord, result.data[0])

    async def insert_book(self, book: BookRecord) -> BookRecord:
        row = self._to_row(book)
        result = await self._run(
            "create book",
            lambda: self.client.table(self.books_table).insert(row).execute(),
        )
        if not result.data:
            logger.error("Failed to create book: no row returned")
            raise StoreError()
        return _parse(BookRecord, result.data[0])

    async def replace_book(self, book: BookRecord) -> BookRecord:
        if not _is_uuid(book.id):
            raise StoreError(f"Book id is not a uuid: {book.id}")
        row = self._to_row(book)
        # owner, id and created_at never change after insert
        for column in ("id", "user_id", "created_at"):
            row.pop(column)
        result = await self._run(
            "update book",
            lambda: self.client.table(self.books_table).update(row).eq("id", book.id).execute(),
        )
        if not result.data:
            logger.error(f"Failed to update book {book.id}: no row returned")
            raise StoreError()
        return _parse(BookRecord, result.data[0])

    async def delete_book(self, book_id: str) -> bool:
        if not _is_uuid(book_id):
            return False
        result = await self._run(
            "delete book",
            lambda: self.client.table(self.books_table).delete().eq("id", book_id).execute(),
        )
        return bool(result.data)
