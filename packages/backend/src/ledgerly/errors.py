"""Domain error taxonomy and its HTTP rendering.

Every failure that reaches the transport boundary is one of the
LedgerError subclasses below. Each carries its own status code, so the
exception handlers registered here are the only place that turns errors
into responses. All error bodies share one shape: {"error": "<message>"}.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = structlog.get_logger()


class LedgerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class Unauthenticated(LedgerError):
    """No credential, or one that is not a bearer token."""

    status_code = 401
    message = "Authentication required"


class InvalidCredential(LedgerError):
    """Credential present but failed signature, expiry or claim checks."""

    status_code = 401
    message = "Invalid token"


class ValidationError(LedgerError):
    status_code = 422
    message = "Invalid payload"


class NotFound(LedgerError):
    """Record absent, or owned by another tenant. Callers cannot tell which."""

    status_code = 404
    message = "Not found"


class Conflict(LedgerError):
    status_code = 409
    message = "Record already exists"


class StoreUnavailable(LedgerError):
    status_code = 500
    message = "Storage is unavailable"


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=headers
    )


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    headers = None
    if exc.status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    return _error_response(exc.status_code, exc.message, headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), exc.headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return _error_response(ValidationError.status_code, "; ".join(problems))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled_error", path=request.url.path)
    return _error_response(500, LedgerError.message)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the {"error": ...} renderers to an application."""
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
