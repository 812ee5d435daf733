"""Tests for BookService."""

from datetime import datetime, timedelta, timezone

import pytest

from bookshelf.books.service import BookService
from bookshelf.errors import Forbidden, NotFound, ValidationError


pytestmark = pytest.mark.asyncio

OWNER = "owner-1"
INTRUDER = "intruder-2"


class FakeClock:
    """Advances by one minute on every call."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def service(book_store, clock):
    return BookService(book_store, clock=clock)


class TestCreate:

    async def test_create_assigns_id_owner_and_timestamps(self, service, book_fields):
        book = await service.create(OWNER, book_fields)

        assert book.id
        assert book.user_id == OWNER
        assert book.created_at == book.updated_at
        assert book.title == "Dune"

    async def test_create_ignores_caller_supplied_identity(self, service, book_fields):
        book = await service.create(
            OWNER,
            {**book_fields, "id": "forged", "user_id": INTRUDER, "created_at": "1999-01-01T00:00:00Z"},
        )

        assert book.id != "forged"
        assert book.user_id == OWNER
        assert book.created_at.year == 2024

    async def test_create_ids_are_unique(self, service, book_fields):
        first = await service.create(OWNER, book_fields)
        second = await service.create(OWNER, book_fields)
        assert first.id != second.id

    async def test_create_invalid_stores_nothing(self, service, book_store, book_fields):
        with pytest.raises(ValidationError) as exc_info:
            await service.create(OWNER, {**book_fields, "title": "", "isbn": "12345"})

        assert exc_info.value.fields == ["title", "isbn"]
        assert book_store.count() == 0

    async def test_create_defaults_optional_fields(self, service, book_fields):
        fields = {k: v for k, v in book_fields.items() if k != "isbn"}
        book = await service.create(OWNER, fields)

        assert book.isbn == ""
        assert book.cover == ""
        assert book.cover_url == "https://picsum.photos/seed/d/300/400"

    async def test_cover_url_uses_http_cover(self, service, book_fields):
        book = await service.create(OWNER, {**book_fields, "cover": "https://img.example.com/dune.jpg"})
        assert book.cover_url == "https://img.example.com/dune.jpg"


class TestRead:

    async def test_list_only_own_books(self, service, book_fields):
        mine = await service.create(OWNER, book_fields)
        await service.create(INTRUDER, {**book_fields, "title": "Emma"})

        books = await service.list(OWNER)
        assert [b.id for b in books] == [mine.id]

    async def test_list_empty(self, service):
        assert await service.list(OWNER) == []

    async def test_get_own_book(self, service, book_fields):
        book = await service.create(OWNER, book_fields)
        assert await service.get(OWNER, book.id) == book

    async def test_get_missing(self, service):
        with pytest.raises(NotFound):
            await service.get(OWNER, "missing")

    async def test_get_foreign_book(self, service, book_fields):
        book = await service.create(OWNER, book_fields)
        with pytest.raises(Forbidden):
            await service.get(INTRUDER, book.id)


class TestUpdate:

    async def test_update_merges_fields(self, service, book_fields):
        book = await service.create(OWNER, book_fields)

        updated = await service.update(OWNER, book.id, {"title": "Dune Messiah", "published_year": 1969})

        assert updated.title == "Dune Messiah"
        assert updated.published_year == 1969
        assert updated.author == book.author

    async def test_update_keeps_identity_and_advances_updated_at(self, service, book_fields):
        book = await service.create(OWNER, book_fields)

        updated = await service.update(
            OWNER,
            book.id,
            {"title": "Children of Dune", "id": "forged", "user_id": INTRUDER, "created_at": "2000-01-01"},
        )

        assert updated.id == book.id
        assert updated.user_id == OWNER
        assert updated.created_at == book.created_at
        assert updated.updated_at > book.updated_at

    async def test_update_updated_at_never_before_created_at(self, book_store, book_fields):
        times = iter([
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2023, 1, 1, tzinfo=timezone.utc),
        ])
        service = BookService(book_store, clock=lambda: next(times))
        book = await service.create(OWNER, book_fields)

        updated = await service.update(OWNER, book.id, {"title": "Heretics of Dune"})
        assert updated.updated_at == book.created_at

    async def test_update_invalid_leaves_record_unchanged(self, service, book_fields):
        book = await service.create(OWNER, book_fields)

        with pytest.raises(ValidationError) as exc_info:
            await service.update(OWNER, book.id, {"category": "Cookbooks", "author": ""})

        assert exc_info.value.fields == ["author", "category"]
        assert await service.get(OWNER, book.id) == book

    async def test_update_foreign_book_changes_nothing(self, service, book_fields):
        book = await service.create(OWNER, book_fields)

        with pytest.raises(Forbidden):
            await service.update(INTRUDER, book.id, {"title": "Stolen"})

        assert (await service.get(OWNER, book.id)).title == "Dune"

    async def test_update_missing(self, service):
        with pytest.raises(NotFound):
            await service.update(OWNER, "missing", {"title": "x"})

    async def test_update_clears_isbn_with_none(self, service, book_fields):
        book = await service.create(OWNER, book_fields)
        updated = await service.update(OWNER, book.id, {"isbn": None})
        assert updated.isbn == ""


class TestDelete:

    async def test_delete(self, service, book_store, book_fields):
        book = await service.create(OWNER, book_fields)

        await service.delete(OWNER, book.id)

        assert book_store.count() == 0
        with pytest.raises(NotFound):
            await service.get(OWNER, book.id)

    async def test_delete_twice(self, service, book_fields):
        book = await service.create(OWNER, book_fields)
        await service.delete(OWNER, book.id)

        with pytest.raises(NotFound):
            await service.delete(OWNER, book.id)

    async def test_delete_foreign_book_keeps_it(self, service, book_store, book_fields):
        book = await service.create(OWNER, book_fields)

        with pytest.raises(Forbidden):
            await service.delete(INTRUDER, book.id)

        assert book_store.count() == 1
