"""
Exception handlers for the HTTP boundary.

- BookshelfError subclasses -> their public status/body (see errors.public_error)
- Request body validation -> the same VALIDATION_ERROR envelope
- Anything else -> logged with traceback, generic 500
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from bookshelf.errors import BookshelfError, ValidationError, public_error


async def bookshelf_error_handler(request: Request, exc: BookshelfError) -> JSONResponse:
    status_code, body = public_error(exc)
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}")

    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            # drop the leading "body"/"query" segment
            "field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]),
            "reason": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={
            "detail": ValidationError.default_message,
            "code": ValidationError.code,
            "errors": errors,
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": BookshelfError.default_message, "code": BookshelfError.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookshelfError, bookshelf_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
