"""Tests for the pure collection and auth reducers."""

from datetime import datetime, timezone

import pytest

from bookshelf.auth.schemas import UserResponse
from bookshelf.client.state import (
    AuthFailed,
    AuthRequested,
    AuthState,
    AuthSucceeded,
    BookAdded,
    BookDeleted,
    BookUpdated,
    CollectionState,
    FetchRequested,
    FetchSucceeded,
    LoggedOut,
    MutationRequested,
    RequestFailed,
    SelectBook,
    SetCategoryFilter,
    SetSearchTerm,
    derive,
    get_categories,
    reduce,
    reduce_auth,
)

from ..storage.test_in_memory import make_book


@pytest.fixture
def books():
    return (
        make_book("b1", title="Dune", author="Frank Herbert", category="Science-Fiction",
                  description="Desert planet"),
        make_book("b2", title="Emma", author="Jane Austen", category="Romance",
                  description="Matchmaking"),
        make_book("b3", title="Gone Girl", author="Gillian Flynn", category="Thriller",
                  description="A marriage gone wrong"),
        make_book("b4", title="Persuasion", author="Jane Austen", category="Romance",
                  description="Second chances"),
    )


class TestDerive:

    def test_no_filters_returns_everything(self, books):
        assert derive(books, "", "") == books

    @pytest.mark.parametrize("term, expected", [
        ("dune", ["b1"]),
        ("AUSTEN", ["b2", "b4"]),
        ("gone", ["b3"]),
        ("chances", ["b4"]),
        ("zzz", []),
    ])
    def test_search_matches_title_author_description(self, books, term, expected):
        assert [b.id for b in derive(books, term, "")] == expected

    def test_category_is_exact(self, books):
        assert [b.id for b in derive(books, "", "Romance")] == ["b2", "b4"]
        assert derive(books, "", "romance") == ()

    def test_search_and_category_combine(self, books):
        assert [b.id for b in derive(books, "persuasion", "Romance")] == ["b4"]
        assert derive(books, "dune", "Romance") == ()

    def test_get_categories_first_occurrence_order(self, books):
        assert get_categories(books) == ["Science-Fiction", "Romance", "Thriller"]

    def test_get_categories_empty(self):
        assert get_categories(()) == []


class TestReduce:

    def test_fetch_cycle(self, books):
        state = reduce(CollectionState(), FetchRequested())
        assert state.loading is True

        state = reduce(state, FetchSucceeded(books))
        assert state.loading is False
        assert state.books == books
        assert state.filtered == books

    def test_failure_keeps_books(self, books):
        state = reduce(CollectionState(), FetchSucceeded(books))
        state = reduce(state, MutationRequested())
        state = reduce(state, RequestFailed("Storage failure"))

        assert state.error == "Storage failure"
        assert state.loading is False
        assert state.books == books

    def test_request_clears_previous_error(self):
        state = reduce(CollectionState(), RequestFailed("boom"))
        assert reduce(state, FetchRequested()).error is None

    def test_add_respects_active_filter(self, books):
        state = reduce(CollectionState(), FetchSucceeded(books[:2]))
        state = reduce(state, SetCategoryFilter("Romance"))

        state = reduce(state, BookAdded(books[2]))
        assert [b.id for b in state.books] == ["b1", "b2", "b3"]
        assert [b.id for b in state.filtered] == ["b2"]

        state = reduce(state, BookAdded(books[3]))
        assert [b.id for b in state.filtered] == ["b2", "b4"]

    def test_update_replaces_in_place_and_refreshes_selection(self, books):
        state = reduce(CollectionState(), FetchSucceeded(books))
        state = reduce(state, SelectBook(books[1]))

        renamed = books[1].model_copy(update={"title": "Emma (annotated)"})
        state = reduce(state, BookUpdated(renamed))

        assert [b.id for b in state.books] == ["b1", "b2", "b3", "b4"]
        assert state.books[1].title == "Emma (annotated)"
        assert state.selected.title == "Emma (annotated)"

    def test_update_can_drop_book_from_view(self, books):
        state = reduce(CollectionState(), FetchSucceeded(books))
        state = reduce(state, SetCategoryFilter("Romance"))

        moved = books[1].model_copy(update={"category": "Fiction"})
        state = reduce(state, BookUpdated(moved))

        assert [b.id for b in state.filtered] == ["b4"]

    def test_delete_clears_selection(self, books):
        state = reduce(CollectionState(), FetchSucceeded(books))
        state = reduce(state, SelectBook(books[0]))

        state = reduce(state, BookDeleted("b1"))

        assert state.selected is None
        assert "b1" not in [b.id for b in state.books]
        assert "b1" not in [b.id for b in state.filtered]

    def test_delete_keeps_other_selection(self, books):
        state = reduce(CollectionState(), FetchSucceeded(books))
        state = reduce(state, SelectBook(books[0]))

        assert reduce(state, BookDeleted("b2")).selected == books[0]

    def test_search_term_rederives(self, books):
        state = reduce(CollectionState(), FetchSucceeded(books))

        state = reduce(state, SetSearchTerm("austen"))
        assert [b.id for b in state.filtered] == ["b2", "b4"]

        state = reduce(state, SetSearchTerm(""))
        assert state.filtered == books

    def test_reduce_does_not_mutate_input(self, books):
        before = reduce(CollectionState(), FetchSucceeded(books))
        after = reduce(before, BookDeleted("b1"))

        assert len(before.books) == 4
        assert after is not before

    def test_unknown_action(self):
        with pytest.raises(TypeError):
            reduce(CollectionState(), object())


class TestReduceAuth:

    @pytest.fixture
    def user(self):
        return UserResponse(
            id="user-1",
            username="reader",
            email="reader@example.com",
            created_at=datetime.now(timezone.utc),
        )

    def test_sign_in_and_out(self, user):
        state = reduce_auth(AuthState(), AuthRequested())
        assert state.loading is True

        state = reduce_auth(state, AuthSucceeded(user, "token"))
        assert state.is_authenticated
        assert state.loading is False

        state = reduce_auth(state, LoggedOut())
        assert not state.is_authenticated

    def test_failure(self):
        state = reduce_auth(AuthState(), AuthFailed("Invalid email or password"))

        assert state.error == "Invalid email or password"
        assert not state.is_authenticated
