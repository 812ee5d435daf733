"""Client-side collection state and the backends it talks to."""

from .backends import (
    BookBackend,
    HttpAuthBackend,
    HttpBookBackend,
    ServiceAuthBackend,
    ServiceBookBackend,
)
from .state import AuthState, CollectionState, derive, get_categories, reduce, reduce_auth
from .store import BookCollection, ClientSession

__all__ = [
    "BookCollection",
    "ClientSession",
    "CollectionState",
    "AuthState",
    "derive",
    "get_categories",
    "reduce",
    "reduce_auth",
    "BookBackend",
    "ServiceBookBackend",
    "ServiceAuthBackend",
    "HttpBookBackend",
    "HttpAuthBackend",
]
