"""
Client-side collection state.

The state is immutable; `reduce(state, action)` is a pure transition
function. Every transition that touches the book list, the search term or
the category filter recomputes `filtered` before returning, so a reader
never sees a stale view.

Example:
    state = CollectionState()
    state = reduce(state, FetchSucceeded(books))
    state = reduce(state, SetSearchTerm("dune"))
    state.filtered  # books whose title/author/description mention "dune"
"""

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple, Union

from bookshelf.auth.schemas import UserResponse
from bookshelf.storage.models import BookRecord

Books = Tuple[BookRecord, ...]


# =============================================================================
# Derivation
# =============================================================================


def matches_search(book: BookRecord, search_term: str) -> bool:
    if not search_term:
        return True
    term = search_term.lower()
    return (
        term in book.title.lower()
        or term in book.author.lower()
        or term in book.description.lower()
    )


def derive(books: Iterable[BookRecord], search_term: str, category_filter: str) -> Books:
    """Books matching the search term (substring, case-insensitive) and the exact category."""
    return tuple(
        book
        for book in books
        if matches_search(book, search_term)
        and (not category_filter or book.category == category_filter)
    )


def get_categories(books: Iterable[BookRecord]) -> List[str]:
    """Distinct categories present in books, first occurrence first."""
    return list(dict.fromkeys(book.category for book in books))


# =============================================================================
# Book collection
# =============================================================================


@dataclass(frozen=True)
class CollectionState:
    books: Books = ()
    filtered: Books = ()
    search_term: str = ""
    category_filter: str = ""
    selected: Optional[BookRecord] = None
    loading: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class FetchRequested:
    pass


@dataclass(frozen=True)
class MutationRequested:
    pass


@dataclass(frozen=True)
class FetchSucceeded:
    books: Books


@dataclass(frozen=True)
class RequestFailed:
    message: str


@dataclass(frozen=True)
class BookAdded:
    book: BookRecord


@dataclass(frozen=True)
class BookUpdated:
    book: BookRecord


@dataclass(frozen=True)
class BookDeleted:
    book_id: str


@dataclass(frozen=True)
class SelectBook:
    book: Optional[BookRecord]


@dataclass(frozen=True)
class SetSearchTerm:
    term: str


@dataclass(frozen=True)
class SetCategoryFilter:
    category: str


CollectionAction = Union[
    FetchRequested,
    MutationRequested,
    FetchSucceeded,
    RequestFailed,
    BookAdded,
    BookUpdated,
    BookDeleted,
    SelectBook,
    SetSearchTerm,
    SetCategoryFilter,
]


def _with_books(state: CollectionState, books: Books, **changes) -> CollectionState:
    """Replace the book list (and any other fields) and re-derive the view."""
    next_state = replace(state, books=books, **changes)
    return replace(
        next_state,
        filtered=derive(next_state.books, next_state.search_term, next_state.category_filter),
    )


def reduce(state: CollectionState, action: CollectionAction) -> CollectionState:
    """Pure transition: returns the state after applying action."""
    if isinstance(action, (FetchRequested, MutationRequested)):
        return replace(state, loading=True, error=None)

    if isinstance(action, RequestFailed):
        return replace(state, loading=False, error=action.message)

    if isinstance(action, FetchSucceeded):
        return _with_books(state, tuple(action.books), loading=False, error=None)

    if isinstance(action, BookAdded):
        return _with_books(state, state.books + (action.book,), loading=False, error=None)

    if isinstance(action, BookUpdated):
        updated = action.book
        books = tuple(updated if b.id == updated.id else b for b in state.books)
        selected = state.selected
        if selected is not None and selected.id == updated.id:
            selected = updated
        return _with_books(state, books, selected=selected, loading=False, error=None)

    if isinstance(action, BookDeleted):
        books = tuple(b for b in state.books if b.id != action.book_id)
        selected = state.selected
        if selected is not None and selected.id == action.book_id:
            selected = None
        return _with_books(state, books, selected=selected, loading=False, error=None)

    if isinstance(action, SelectBook):
        return replace(state, selected=action.book)

    if isinstance(action, SetSearchTerm):
        return _with_books(state, state.books, search_term=action.term)

    if isinstance(action, SetCategoryFilter):
        return _with_books(state, state.books, category_filter=action.category)

    raise TypeError(f"Unknown action: {type(action).__name__}")


# =============================================================================
# Auth
# =============================================================================


@dataclass(frozen=True)
class AuthState:
    user: Optional[UserResponse] = None
    token: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None


@dataclass(frozen=True)
class AuthRequested:
    pass


@dataclass(frozen=True)
class AuthSucceeded:
    user: UserResponse
    token: str


@dataclass(frozen=True)
class AuthFailed:
    message: str


@dataclass(frozen=True)
class LoggedOut:
    pass


AuthAction = Union[AuthRequested, AuthSucceeded, AuthFailed, LoggedOut]


def reduce_auth(state: AuthState, action: AuthAction) -> AuthState:
    """Pure transition for the signed-in user."""
    if isinstance(action, AuthRequested):
        return replace(state, loading=True, error=None)
    if isinstance(action, AuthSucceeded):
        return AuthState(user=action.user, token=action.token)
    if isinstance(action, AuthFailed):
        return AuthState(error=action.message)
    if isinstance(action, LoggedOut):
        return AuthState()
    raise TypeError(f"Unknown action: {type(action).__name__}")
