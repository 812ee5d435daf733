"""Books: validation rules, schemas and the ownership-checked service."""

from .schemas import BookCreateRequest, BookResponse, BooksListResponse, BookUpdateRequest
from .service import BookService
from .validation import (
    CATEGORIES,
    validate_book,
    validate_email,
    validate_isbn,
    validate_password,
    validate_registration_form,
    validate_required,
    validate_username,
    validate_year,
)

__all__ = [
    "BookService",
    "BookCreateRequest",
    "BookUpdateRequest",
    "BookResponse",
    "BooksListResponse",
    "CATEGORIES",
    "validate_book",
    "validate_email",
    "validate_isbn",
    "validate_password",
    "validate_registration_form",
    "validate_required",
    "validate_username",
    "validate_year",
]
