"""
State containers for a client.

Each container is the single writer of its state: operations call the
backend, then feed the outcome to the pure reducer through dispatch().
A failed operation records its message in state.error and leaves the rest
of the state as it was. Nothing is retried.
"""
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Protocol

from loguru import logger

from bookshelf.auth.schemas import AuthResult, Session, UserResponse
from bookshelf.books.validation import validate_registration_form
from bookshelf.errors import BookshelfError, ValidationError
from bookshelf.storage.base import SessionStore
from bookshelf.storage.models import BookRecord, SessionRecord

from .backends import BookBackend
from .state import (
    AuthAction,
    AuthFailed,
    AuthRequested,
    AuthState,
    AuthSucceeded,
    BookAdded,
    BookDeleted,
    BookUpdated,
    CollectionAction,
    CollectionState,
    FetchRequested,
    FetchSucceeded,
    LoggedOut,
    MutationRequested,
    RequestFailed,
    SelectBook,
    SetCategoryFilter,
    SetSearchTerm,
    get_categories,
    reduce,
    reduce_auth,
)


class BookCollection:
    """The signed-in user's books plus the derived, filtered view.

    Example:
        collection = BookCollection(ServiceBookBackend(book_service, user_id))
        await collection.fetch_books()
        collection.search("dune")
        collection.state.filtered
    """

    def __init__(self, backend: BookBackend, state: Optional[CollectionState] = None):
        self.backend = backend
        self.state = state or CollectionState()

    def dispatch(self, action: CollectionAction) -> CollectionState:
        self.state = reduce(self.state, action)
        return self.state

    async def fetch_books(self) -> bool:
        """Load every book of the user. Returns False on failure."""
        self.dispatch(FetchRequested())
        try:
            books = await self.backend.list_books()
        except BookshelfError as e:
            logger.warning(f"Failed to fetch books: {e.code}")
            self.dispatch(RequestFailed(e.message))
            return False
        self.dispatch(FetchSucceeded(tuple(books)))
        return True

    async def add_book(self, fields: Mapping[str, Any]) -> Optional[BookRecord]:
        self.dispatch(MutationRequested())
        try:
            book = await self.backend.create_book(fields)
        except BookshelfError as e:
            logger.warning(f"Failed to add book: {e.code}")
            self.dispatch(RequestFailed(str(e)))
            return None
        self.dispatch(BookAdded(book))
        return book

    async def update_book(self, book_id: str, fields: Mapping[str, Any]) -> Optional[BookRecord]:
        self.dispatch(MutationRequested())
        try:
            book = await self.backend.update_book(book_id, fields)
        except BookshelfError as e:
            logger.warning(f"Failed to update book {book_id}: {e.code}")
            self.dispatch(RequestFailed(str(e)))
            return None
        self.dispatch(BookUpdated(book))
        return book

    async def delete_book(self, book_id: str) -> bool:
        self.dispatch(MutationRequested())
        try:
            await self.backend.delete_book(book_id)
        except BookshelfError as e:
            logger.warning(f"Failed to delete book {book_id}: {e.code}")
            self.dispatch(RequestFailed(e.message))
            return False
        self.dispatch(BookDeleted(book_id))
        return True

    def select(self, book: Optional[BookRecord]) -> None:
        self.dispatch(SelectBook(book))

    def search(self, term: str) -> None:
        self.dispatch(SetSearchTerm(term))

    def filter_by_category(self, category: str) -> None:
        self.dispatch(SetCategoryFilter(category))

    def get_categories(self) -> List[str]:
        return get_categories(self.state.books)


class AuthBackend(Protocol):
    async def register(self, username: str, email: str, password: str) -> AuthResult: ...

    async def login(self, email: str, password: str) -> Session: ...


class ClientSession:
    """The signed-in user of a client, mirrored into a SessionStore.

    Registering signs the new user in, exactly like logging in.
    """

    def __init__(self, auth: AuthBackend, store: SessionStore):
        self.auth = auth
        self.store = store
        self.state = AuthState()

    def dispatch(self, action: AuthAction) -> AuthState:
        self.state = reduce_auth(self.state, action)
        return self.state

    async def _remember(self, session: Session) -> None:
        await self.store.save(SessionRecord(
            token=session.access_token,
            expires_at=session.expires_at,
            user_id=session.user.id,
            username=session.user.username,
            email=session.user.email,
            created_at=session.user.created_at,
        ))
        self.dispatch(AuthSucceeded(session.user, session.access_token))

    async def restore(self) -> bool:
        """Sign back in from the stored session if it has not expired."""
        record = await self.store.load()
        if record is None:
            return False
        if record.expires_at <= datetime.now(timezone.utc):
            logger.info("Stored session expired")
            await self.store.clear()
            return False

        user = UserResponse(
            id=record.user_id,
            username=record.username,
            email=record.email,
            created_at=record.created_at,
        )
        self.dispatch(AuthSucceeded(user, record.token))
        return True

    async def login(self, email: str, password: str) -> bool:
        self.dispatch(AuthRequested())
        try:
            session = await self.auth.login(email, password)
        except BookshelfError as e:
            self.dispatch(AuthFailed(e.message))
            return False
        await self._remember(session)
        return True

    async def register(self, username: str, email: str, password: str) -> bool:
        """Sign up and sign in. The form checks run before the backend is called."""
        self.dispatch(AuthRequested())
        errors = validate_registration_form(username, email, password)
        if errors:
            self.dispatch(AuthFailed(str(ValidationError(errors))))
            return False
        try:
            result = await self.auth.register(username, email, password)
        except BookshelfError as e:
            self.dispatch(AuthFailed(str(e)))
            return False
        await self._remember(result.session)
        return True

    async def logout(self) -> None:
        await self.store.clear()
        self.dispatch(LoggedOut())
