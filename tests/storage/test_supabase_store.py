"""Tests for the Supabase stores with a mocked client."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from bookshelf.errors import DuplicateEmail, DuplicateUsername, StoreError
from bookshelf.storage import SupabaseBookStore, SupabaseCredentialStore

from .test_in_memory import make_book


pytestmark = pytest.mark.asyncio

USER_ID = "6f1c2d3e-4b5a-4c7d-8e9f-0a1b2c3d4e5f"
BOOK_ID = "0b7e9c1a-2d3f-4e5a-9b6c-7d8e9f0a1b2c"

USER_ROW = {
    "id": USER_ID,
    "username": "reader",
    "email": "reader@example.com",
    "password_hash": "digest",
    "created_at": "2024-01-01T00:00:00+00:00",
}


def result(data):
    response = MagicMock()
    response.data = data
    return response


@pytest.fixture
def mock_client():
    return MagicMock()


class TestSupabaseCredentialStore:

    @pytest.fixture
    def store(self, mock_client):
        return SupabaseCredentialStore(mock_client)

    def _lookup(self, mock_client):
        return mock_client.table.return_value.select.return_value.eq.return_value.maybe_single.return_value.execute

    async def test_get_user_by_email_lowercases(self, store, mock_client):
        self._lookup(mock_client).return_value = result(USER_ROW)

        user = await store.get_user_by_email(" Reader@Example.COM ")

        assert user.id == USER_ID
        mock_client.table.assert_called_with("users")
        mock_client.table.return_value.select.return_value.eq.assert_called_with("email", "reader@example.com")

    async def test_lookup_without_rows(self, store, mock_client):
        self._lookup(mock_client).return_value = None
        assert await store.get_user_by_id(USER_ID) is None

    async def test_lookup_pgrst116_is_none(self, store, mock_client):
        self._lookup(mock_client).side_effect = Exception("PGRST116: no rows returned")
        assert await store.get_user_by_username("reader") is None

    async def test_lookup_failure(self, store, mock_client):
        self._lookup(mock_client).side_effect = Exception("connection reset")

        with pytest.raises(StoreError):
            await store.get_user_by_id(USER_ID)

    async def test_non_uuid_user_id_is_missing(self, store, mock_client):
        self._lookup(mock_client).side_effect = Exception("invalid input syntax for type uuid (22P02)")

        assert await store.get_user_by_id("not-a-uuid") is None
        mock_client.table.assert_not_called()

    async def test_malformed_row(self, store, mock_client):
        self._lookup(mock_client).return_value = result({"id": USER_ID})

        with pytest.raises(StoreError):
            await store.get_user_by_id(USER_ID)

    async def test_create_user(self, store, mock_client):
        insert = mock_client.table.return_value.insert
        insert.return_value.execute.return_value = result([USER_ROW])

        user = await store.create_user("reader", "Reader@Example.com", "digest")

        assert user.username == "reader"
        row = insert.call_args[0][0]
        assert row["email"] == "reader@example.com"
        assert row["password_hash"] == "digest"

    async def test_create_user_duplicate_email(self, store, mock_client):
        mock_client.table.return_value.insert.return_value.execute.side_effect = Exception(
            'duplicate key value violates unique constraint "users_email_key" (23505)'
        )

        with pytest.raises(DuplicateEmail):
            await store.create_user("reader", "reader@example.com", "digest")

    async def test_create_user_duplicate_username(self, store, mock_client):
        mock_client.table.return_value.insert.return_value.execute.side_effect = Exception(
            'duplicate key value violates unique constraint "users_username_key" (23505)'
        )

        with pytest.raises(DuplicateUsername):
            await store.create_user("reader", "reader@example.com", "digest")

    async def test_create_user_no_row(self, store, mock_client):
        mock_client.table.return_value.insert.return_value.execute.return_value = result([])

        with pytest.raises(StoreError):
            await store.create_user("reader", "reader@example.com", "digest")


class TestSupabaseBookStore:

    @pytest.fixture
    def store(self, mock_client):
        return SupabaseBookStore(mock_client)

    async def test_list_books(self, store, mock_client):
        row = make_book(BOOK_ID).model_dump(mode="json")
        mock_client.table.return_value.select.return_value.eq.return_value.execute.return_value = result([row])

        books = await store.list_books("user-1")

        assert [b.id for b in books] == [BOOK_ID]
        mock_client.table.assert_called_with("books")
        mock_client.table.return_value.select.return_value.eq.assert_called_with("user_id", "user-1")

    async def test_get_book_missing(self, store, mock_client):
        mock_client.table.return_value.select.return_value.eq.return_value.execute.return_value = result([])
        assert await store.get_book(BOOK_ID) is None

    async def test_insert_book(self, store, mock_client):
        book = make_book(BOOK_ID)
        insert = mock_client.table.return_value.insert
        insert.return_value.execute.return_value = result([book.model_dump(mode="json")])

        assert await store.insert_book(book) == book
        assert insert.call_args[0][0]["user_id"] == "user-1"

    async def test_replace_book_never_writes_identity(self, store, mock_client):
        book = make_book(BOOK_ID, title="Persuasion", updated_at=datetime(2024, 2, 1, tzinfo=timezone.utc))
        update = mock_client.table.return_value.update
        update.return_value.eq.return_value.execute.return_value = result([book.model_dump(mode="json")])

        replaced = await store.replace_book(book)

        row = update.call_args[0][0]
        assert "id" not in row
        assert "user_id" not in row
        assert "created_at" not in row
        assert row["title"] == "Persuasion"
        update.return_value.eq.assert_called_with("id", BOOK_ID)
        assert replaced.title == "Persuasion"

    async def test_delete_book(self, store, mock_client):
        delete = mock_client.table.return_value.delete.return_value.eq.return_value.execute
        delete.return_value = result([{"id": BOOK_ID}])
        assert await store.delete_book(BOOK_ID) is True

        delete.return_value = result([])
        assert await store.delete_book(BOOK_ID) is False

    @pytest.mark.parametrize("book_id", ["abc", "book-1", ""])
    async def test_non_uuid_id_is_missing(self, store, mock_client, book_id):
        """An id that cannot be a uuid matches no row instead of failing the query."""
        mock_client.table.return_value.select.return_value.eq.return_value.execute.side_effect = Exception(
            'invalid input syntax for type uuid: "abc" (22P02)'
        )
        mock_client.table.return_value.delete.return_value.eq.return_value.execute.side_effect = Exception(
            'invalid input syntax for type uuid: "abc" (22P02)'
        )

        assert await store.get_book(book_id) is None
        assert await store.delete_book(book_id) is False

    async def test_replace_non_uuid_id(self, store, mock_client):
        with pytest.raises(StoreError):
            await store.replace_book(make_book("abc"))
        mock_client.table.return_value.update.assert_not_called()

    async def test_query_failure(self, store, mock_client):
        mock_client.table.return_value.select.return_value.eq.return_value.execute.side_effect = Exception("timeout")

        with pytest.raises(StoreError):
            await store.list_books("user-1")
