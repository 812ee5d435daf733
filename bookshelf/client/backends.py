"""
Where the client collection sends its mutations.

- ServiceBookBackend / ServiceAuthBackend: call the services in-process
  (the local, storage-only variant of the app).
- HttpBookBackend / HttpAuthBackend: call the REST API with httpx.

Both raise bookshelf.errors exceptions, so callers handle one error type
whichever backend is plugged in.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

import httpx
from loguru import logger
from pydantic import ValidationError as SchemaError

from bookshelf.auth.schemas import AuthResult, Session
from bookshelf.auth.service import AuthService
from bookshelf.books.service import BookService
from bookshelf.errors import (
    DuplicateEmail,
    DuplicateUsername,
    FieldError,
    InvalidCredentials,
    NotFound,
    StoreError,
    Unauthenticated,
    ValidationError,
)
from bookshelf.storage.models import BookRecord

DEFAULT_TIMEOUT = 10.0

_ERRORS_BY_CODE = {
    "DUPLICATE_EMAIL": DuplicateEmail,
    "DUPLICATE_USERNAME": DuplicateUsername,
    "INVALID_CREDENTIALS": InvalidCredentials,
    "UNAUTHENTICATED": Unauthenticated,
    "NOT_FOUND": NotFound,
}


class BookBackend(ABC):
    """Book operations on behalf of one signed-in user."""

    @abstractmethod
    async def list_books(self) -> List[BookRecord]:
        pass

    @abstractmethod
    async def create_book(self, fields: Mapping[str, Any]) -> BookRecord:
        pass

    @abstractmethod
    async def update_book(self, book_id: str, fields: Mapping[str, Any]) -> BookRecord:
        pass

    @abstractmethod
    async def delete_book(self, book_id: str) -> None:
        pass


class ServiceBookBackend(BookBackend):
    """Runs book operations directly against a BookService."""

    def __init__(self, service: BookService, user_id: str):
        self.service = service
        self.user_id = user_id

    async def list_books(self) -> List[BookRecord]:
        return await self.service.list(self.user_id)

    async def create_book(self, fields: Mapping[str, Any]) -> BookRecord:
        return await self.service.create(self.user_id, fields)

    async def update_book(self, book_id: str, fields: Mapping[str, Any]) -> BookRecord:
        return await self.service.update(self.user_id, book_id, fields)

    async def delete_book(self, book_id: str) -> None:
        await self.service.delete(self.user_id, book_id)


class ServiceAuthBackend:
    """Registration and login straight through an AuthService."""

    def __init__(self, service: AuthService):
        self.service = service

    async def register(self, username: str, email: str, password: str) -> AuthResult:
        return await self.service.register(username, email, password)

    async def login(self, email: str, password: str) -> Session:
        return await self.service.login(email, password)


# =============================================================================
# HTTP
# =============================================================================


def _raise_for_error(response: httpx.Response) -> None:
    """Translate an error response of the API back into a bookshelf error."""
    if response.is_success:
        return

    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    code = body.get("code")
    detail = body.get("detail")

    if code == ValidationError.code:
        errors = [FieldError(e.get("field", ""), e.get("reason", "")) for e in body.get("errors", [])]
        raise ValidationError(errors, detail)
    error_class = _ERRORS_BY_CODE.get(code)
    if error_class is not None:
        raise error_class(detail)

    logger.error(f"Unexpected API response: {response.status_code}")
    raise StoreError(f"Request failed with status {response.status_code}")


class _HttpBackend:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: API root, e.g. http://localhost:8080
            token: Bearer token of the signed-in user
            client: Shared httpx client (a private one is used if omitted)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = client

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, json: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(method, url, json=json, headers=self._headers())
            else:
                async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
                    response = await client.request(method, url, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {type(e).__name__}")
            raise StoreError("API unreachable") from e

        _raise_for_error(response)
        return response


def _parse(model, data: Any):
    try:
        return model.model_validate(data)
    except SchemaError as e:
        logger.error(f"Unexpected response shape for {model.__name__}: {e.error_count()} error(s)")
        raise StoreError("Malformed API response") from e


class HttpBookBackend(_HttpBackend, BookBackend):
    """Book operations through the REST API."""

    async def list_books(self) -> List[BookRecord]:
        response = await self._request("GET", "/v1/books")
        return [_parse(BookRecord, item) for item in response.json().get("books", [])]

    async def create_book(self, fields: Mapping[str, Any]) -> BookRecord:
        response = await self._request("POST", "/v1/books", json=dict(fields))
        return _parse(BookRecord, response.json())

    async def update_book(self, book_id: str, fields: Mapping[str, Any]) -> BookRecord:
        response = await self._request("PATCH", f"/v1/books/{book_id}", json=dict(fields))
        return _parse(BookRecord, response.json())

    async def delete_book(self, book_id: str) -> None:
        await self._request("DELETE", f"/v1/books/{book_id}")


class HttpAuthBackend(_HttpBackend):
    """Registration and login through the REST API."""

    async def register(self, username: str, email: str, password: str) -> AuthResult:
        response = await self._request(
            "POST",
            "/v1/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        session = _parse(Session, response.json())
        return AuthResult(user=session.user, session=session)

    async def login(self, email: str, password: str) -> Session:
        response = await self._request(
            "POST", "/v1/auth/login", json={"email": email, "password": password}
        )
        return _parse(Session, response.json())

