"""Field validators for books and registration input."""

import re
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from bookshelf.errors import FieldError

CATEGORIES = [
    "Fiction",
    "Non-Fiction",
    "Mystery",
    "Science-Fiction",
    "Fantasy",
    "Romance",
    "Thriller",
    "Biography",
    "History",
    "Self-Help",
    "Business",
    "Other",
]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
LETTER_PATTERN = re.compile(r"[A-Za-z]")
DIGIT_PATTERN = re.compile(r"\d")
ISBN_PATTERN = re.compile(r"^(\d{10}|\d{13})$")

REQUIRED_BOOK_FIELDS = ("title", "author", "description", "category")

USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 8


def current_year() -> int:
    return datetime.now(timezone.utc).year


def validate_required(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def validate_username(username: str) -> bool:
    return len(username.strip()) >= USERNAME_MIN_LENGTH


def validate_password(password: str) -> bool:
    """At least 8 characters with at least one letter and one digit."""
    return (
        len(password) >= PASSWORD_MIN_LENGTH
        and bool(LETTER_PATTERN.search(password))
        and bool(DIGIT_PATTERN.search(password))
    )


def validate_isbn(isbn: str) -> bool:
    """True when the ISBN is exactly 10 or 13 digits once hyphens are removed."""
    return bool(ISBN_PATTERN.match(isbn.replace("-", "")))


def validate_year(year: int, this_year: Optional[int] = None) -> bool:
    """True for a positive year that is not in the future."""
    if isinstance(year, bool) or not isinstance(year, int):
        return False
    return 0 < year <= (this_year or current_year())


def validate_book(fields: Mapping[str, Any]) -> List[FieldError]:
    """
    Check a complete book record.

    Returns every failing field, in a stable order; an empty list means the
    record is valid.
    """
    errors: List[FieldError] = []

    for name in REQUIRED_BOOK_FIELDS:
        if not validate_required(fields.get(name)):
            errors.append(FieldError(name, f"{name.capitalize()} is required"))

    category = fields.get("category")
    if validate_required(category) and category not in CATEGORIES:
        errors.append(FieldError("category", f"Unknown category: {category}"))

    cover = fields.get("cover") or ""
    if not isinstance(cover, str):
        errors.append(FieldError("cover", "Cover must be a URL or empty"))

    isbn = fields.get("isbn") or ""
    if not isinstance(isbn, str):
        errors.append(FieldError("isbn", "ISBN must be text"))
    elif isbn and not validate_isbn(isbn):
        errors.append(FieldError("isbn", "ISBN must be 10 or 13 digits"))

    year = fields.get("published_year")
    if year is None:
        errors.append(FieldError("published_year", "Published year is required"))
    elif not validate_year(year):
        errors.append(
            FieldError("published_year", f"Published year must be between 1 and {current_year()}")
        )

    return errors


def validate_registration_form(username: str, email: str, password: str) -> List[FieldError]:
    """
    The sign-up form's checks, stricter than the server's: usernames need
    three characters and passwords need a letter and a digit.
    """
    errors: List[FieldError] = []

    if not validate_required(username):
        errors.append(FieldError("username", "Username is required"))
    elif not validate_username(username):
        errors.append(FieldError("username", f"Username must be at least {USERNAME_MIN_LENGTH} characters"))

    if not validate_required(email):
        errors.append(FieldError("email", "Email is required"))
    elif not validate_email(email.strip()):
        errors.append(FieldError("email", "Invalid email format"))

    if not password:
        errors.append(FieldError("password", "Password is required"))
    elif not validate_password(password):
        errors.append(
            FieldError("password", "Password must be at least 8 characters and include letters and numbers")
        )

    return errors
