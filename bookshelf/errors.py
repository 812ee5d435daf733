"""
Error taxonomy for bookshelf.

Services raise these exceptions; the HTTP layer (bookshelf.api.errors)
translates them into responses. Some errors are deliberately collapsed at
the boundary: InvalidToken/UserNotFound render as Unauthenticated, and
Forbidden renders as NotFound so other users' records are not revealed.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class FieldError:
    """A single failing field with a human readable reason."""

    field: str
    reason: str

    def to_dict(self) -> dict:
        return {"field": self.field, "reason": self.reason}


class BookshelfError(Exception):
    """Base exception for bookshelf errors."""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookshelfError):
    """One or more fields failed validation. Lists every failing field."""

    code = "VALIDATION_ERROR"
    status_code = 422
    default_message = "Validation failed"

    def __init__(self, errors: List[FieldError], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message)

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]

    def __str__(self) -> str:
        details = ", ".join(f"{e.field}: {e.reason}" for e in self.errors)
        return f"{self.message} ({details})" if details else self.message


class DuplicateEmail(BookshelfError):
    code = "DUPLICATE_EMAIL"
    status_code = 409
    default_message = "Email already registered"


class DuplicateUsername(BookshelfError):
    code = "DUPLICATE_USERNAME"
    status_code = 409
    default_message = "Username already taken"


class InvalidCredentials(BookshelfError):
    """Login failed. Never says whether the email or the password was wrong."""

    code = "INVALID_CREDENTIALS"
    status_code = 401
    default_message = "Invalid email or password"


class Unauthenticated(BookshelfError):
    code = "UNAUTHENTICATED"
    status_code = 401
    default_message = "Could not validate credentials"


class InvalidToken(Unauthenticated):
    """Token is malformed, expired, of the wrong type or signed with another key."""

    default_message = "Invalid or expired token"


class UserNotFound(Unauthenticated):
    """Token verified but its subject no longer exists."""

    default_message = "User not found"


class NotFound(BookshelfError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Book not found"


class Forbidden(BookshelfError):
    """The record exists but belongs to another user."""

    code = "FORBIDDEN"
    status_code = 403
    default_message = "Not allowed to access this book"


class StoreError(BookshelfError):
    """The backing store failed or returned data of the wrong shape."""

    default_message = "Storage failure"


GENERIC_UNAUTHENTICATED = Unauthenticated.default_message
GENERIC_NOT_FOUND = NotFound.default_message


def public_error(exc: BookshelfError) -> Tuple[int, dict]:
    """Status code and response body shown to clients for an error.

    Token problems collapse into one Unauthenticated body, ownership
    failures collapse into NotFound, and store failures hide their detail.
    """
    if isinstance(exc, Unauthenticated):
        return 401, {"detail": GENERIC_UNAUTHENTICATED, "code": Unauthenticated.code}
    if isinstance(exc, (NotFound, Forbidden)):
        return 404, {"detail": GENERIC_NOT_FOUND, "code": NotFound.code}
    if isinstance(exc, ValidationError):
        return exc.status_code, {
            "detail": exc.message,
            "code": exc.code,
            "errors": [e.to_dict() for e in exc.errors],
        }
    if isinstance(exc, StoreError) or exc.status_code >= 500:
        return 500, {"detail": BookshelfError.default_message, "code": BookshelfError.code}
    return exc.status_code, {"detail": exc.message, "code": exc.code}
