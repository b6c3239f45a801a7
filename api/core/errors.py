"""Domain exceptions and the JSON error envelope.

Repositories and validators raise these; the handlers registered in main.py
translate them into ``{"error": ..., "message": ...}`` responses where
``message`` is the HTTP reason phrase.
"""

from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logger import get_logger

logger = get_logger(__name__)

# pydantic error types that mean "value absent or empty"
_REQUIRED_ERROR_TYPES = frozenset({"missing", "string_too_short"})

_JSON_ERROR_TYPES = frozenset({"json_invalid", "json_type"})


class DomainError(Exception):
    """Base class for all domain exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} with id {identifier} not found")


class FieldValidationError(DomainError):
    """A request field failed a rule that needs more than the payload itself.

    ``tag`` names the failed rule, e.g. ``exists`` for a uniqueness conflict
    or ``oneof`` for a value outside an allowed set.
    """

    def __init__(self, field: str, tag: str) -> None:
        self.field = field
        self.tag = tag
        super().__init__(f"{field} failed on the '{tag}' rule")


def response_message(status_code: int) -> str:
    """HTTP reason phrase used as the envelope message (e.g. 200 -> "OK")."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown Status"


def error_response(status_code: int, error: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": response_message(status_code)},
    )


def _field_name(loc: tuple[int | str, ...]) -> str:
    """("body", "name") -> "name"; ("query", "fields", 0) -> "fields"."""
    parts = [str(part) for part in loc if isinstance(part, str)]
    if len(parts) > 1 and parts[0] in ("body", "query", "path"):
        return parts[1]
    return parts[-1] if parts else "request"


def format_validation_errors(errors: list[dict[str, Any]]) -> dict[str, str]:
    """Collapse pydantic errors into ``{field: tag}``, first error per field wins."""
    formatted: dict[str, str] = {}
    for err in errors:
        field = _field_name(tuple(err.get("loc", ())))
        err_type = err.get("type", "invalid")
        tag = "required" if err_type in _REQUIRED_ERROR_TYPES else err_type
        formatted.setdefault(field, tag)
    return formatted


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Malformed JSON -> 400, structural validation failure -> 422."""
    if not isinstance(exc, RequestValidationError):
        return error_response(500)

    errors = list(exc.errors())
    logger.warning(
        "request.validation_error",
        path=request.url.path,
        method=request.method,
        error_count=len(errors),
    )

    if any(err.get("type") in _JSON_ERROR_TYPES for err in errors):
        return error_response(400, {"body": "invalid_json"})

    return error_response(422, format_validation_errors(errors))


async def field_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    if not isinstance(exc, FieldValidationError):
        return error_response(500)

    logger.info(
        "request.field_validation_error",
        path=request.url.path,
        field=exc.field,
        tag=exc.tag,
    )
    return error_response(422, {exc.field: exc.tag})


async def not_found_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    if isinstance(exc, NotFoundError):
        logger.info(
            "request.not_found",
            path=request.url.path,
            entity=exc.entity,
            identifier=str(exc.identifier),
        )
    return error_response(404)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Wrap framework HTTP errors (unknown route, 405, 503) in the envelope."""
    if not isinstance(exc, StarletteHTTPException):
        return error_response(500)

    error = {"detail": str(exc.detail)} if exc.detail else None
    response = error_response(exc.status_code, error)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions (database errors included)."""
    logger.exception(
        "unhandled.exception",
        exc_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    return error_response(500)
