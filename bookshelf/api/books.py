from fastapi import APIRouter, Depends, Response, status

from bookshelf.auth.dependencies import get_book_service, get_current_user_id
from bookshelf.books.schemas import (
    BookCreateRequest,
    BookResponse,
    BooksListResponse,
    BookUpdateRequest,
)
from bookshelf.books.service import BookService


router = APIRouter(prefix="/v1/books", tags=["books"])


@router.get("", response_model=BooksListResponse)
async def get_books(
    user_id: str = Depends(get_current_user_id),
    books: BookService = Depends(get_book_service),
) -> BooksListResponse:
    """
    Get all books for the current user.

    Searching and filtering happen client side.
    """
    records = await books.list(user_id)
    return BooksListResponse(
        books=[BookResponse.model_validate(b) for b in records],
        total=len(records),
    )


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    request: BookCreateRequest,
    user_id: str = Depends(get_current_user_id),
    books: BookService = Depends(get_book_service),
) -> BookResponse:
    """Create a new book owned by the current user."""
    record = await books.create(user_id, request.model_dump())
    return BookResponse.model_validate(record)


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: str,
    user_id: str = Depends(get_current_user_id),
    books: BookService = Depends(get_book_service),
) -> BookResponse:
    """
    Get one book.

    Books of other users answer 404 exactly like missing ones.
    """
    record = await books.get(user_id, book_id)
    return BookResponse.model_validate(record)


@router.patch("/{book_id}", response_model=BookResponse)
@router.put("/{book_id}", response_model=BookResponse, include_in_schema=False)
async def update_book(
    book_id: str,
    request: BookUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    books: BookService = Depends(get_book_service),
) -> BookResponse:
    """Update the supplied fields of a book; id, owner and created_at stay put."""
    record = await books.update(user_id, book_id, request.model_dump(exclude_unset=True))
    return BookResponse.model_validate(record)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: str,
    user_id: str = Depends(get_current_user_id),
    books: BookService = Depends(get_book_service),
) -> Response:
    """Delete a book. Deleting it again answers 404."""
    await books.delete(user_id, book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
