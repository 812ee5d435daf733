from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class BookCreateRequest(BaseModel):
    """Request schema for creating a book.

    Business rules (required fields, ISBN, year, category) are checked by
    BookService so that every failing field is reported together. The year
    is taken loosely typed for the same reason; a missing or non-integer
    year is reported by the service.
    """
    title: str = Field("", max_length=500, description="Book title")
    author: str = Field("", max_length=300, description="Author name")
    cover: str = Field("", max_length=2000, description="Cover image URL, empty for a placeholder")
    description: str = Field("", max_length=10000, description="Free text description")
    category: str = Field("", description="One of the fixed categories")
    isbn: str = Field("", description="ISBN-10 or ISBN-13, hyphens allowed")
    published_year: Optional[Union[int, str]] = Field(None, description="Year of publication")


class BookUpdateRequest(BaseModel):
    """Request schema for a partial update. Unknown keys (id, user_id, ...) are dropped."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, max_length=500)
    author: Optional[str] = Field(None, max_length=300)
    cover: Optional[str] = Field(None, max_length=2000)
    description: Optional[str] = Field(None, max_length=10000)
    category: Optional[str] = None
    isbn: Optional[str] = None
    published_year: Optional[Union[int, str]] = None


class BookResponse(BaseModel):
    """Response schema for book"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Book ID (UUID)")
    user_id: str = Field(..., description="Owner user ID (UUID)")
    title: str
    author: str
    cover: str
    cover_url: str = Field(..., description="Cover URL or deterministic placeholder")
    description: str
    category: str
    isbn: str
    published_year: int
    created_at: datetime
    updated_at: datetime


class BooksListResponse(BaseModel):
    """Response schema for list of books"""
    books: list[BookResponse] = Field(default_factory=list)
    total: int = Field(..., description="Total number of books")
