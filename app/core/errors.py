# app/core/errors.py
"""
Error taxonomy and FastAPI wiring for structured JSON errors.

Every failure leaves the API as:

    {"error": "<message>", "details": "<provider text>", ...extra}

Services raise the ApiError subclasses below. Calls into the Supabase
client are wrapped in `upstream_errors(...)`, which turns PostgREST and
Auth exceptions into UpstreamFailure (or another class chosen by the caller).
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Coroutine, Iterator

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from supabase import AuthError, PostgrestAPIError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors rendered as a JSON envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: str | None = None,
        status_code: int | None = None,
        **extra: Any,
    ):
        self.message = message or self.default_message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "No token provided"


class InvalidToken(Unauthorized):
    default_message = "Invalid or expired token"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UpstreamFailure(ApiError):
    """The record store or identity provider answered with an error."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Upstream request failed"


class InternalFailure(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def error_text(exc: Exception) -> str:
    """Best human-readable message carried by a supabase client exception."""
    return getattr(exc, "message", None) or str(exc)


@contextmanager
def upstream_errors(
    message: str,
    error_cls: type[ApiError] = UpstreamFailure,
) -> Iterator[None]:
    """
    Translate Supabase client errors raised inside the block.

    Usage:

        with upstream_errors("Failed to fetch products"):
            rows = repo.list_all(client)
    """
    try:
        yield
    except (PostgrestAPIError, AuthError) as exc:
        logger.warning("%s: %s", message, error_text(exc))
        raise error_cls(message, details=error_text(exc)) from exc


class BoundaryRoute(APIRoute):
    """
    Route class that makes each endpoint its own failure boundary.

    Anything that is not already an HTTP-level error is logged and turned
    into InternalFailure, which the registered handler renders as JSON.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_route_handler = super().get_route_handler()

        async def boundary_route_handler(request: Request) -> Response:
            try:
                return await original_route_handler(request)
            except (ApiError, HTTPException, RequestValidationError):
                raise
            except Exception as exc:
                logger.exception(
                    "Unhandled error on %s %s", request.method, request.url.path
                )
                raise InternalFailure(details=str(exc)) from exc

        return boundary_route_handler


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Render body validation failures as 400.

    Messages raised from schema validators (ValueError) are returned as-is;
    type errors are reported against the offending field.
    """
    errors = exc.errors()
    if not errors:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body"},
        )

    first = errors[0]
    cause = (first.get("ctx") or {}).get("error")
    if isinstance(cause, Exception):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(cause)},
        )

    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    details = f"{field}: {first.get('msg')}" if field else first.get("msg")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body", "details": details},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
