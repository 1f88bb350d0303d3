# pyright: reportUnusedFunction=false
"""Translation of jsoncms errors into HTTP responses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from jsoncms.exceptions import (
    AuthError,
    ContentValidationError,
    ErrorKind,
    GitError,
    JsoncmsError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI
    from structlog.typing import FilteringBoundLogger

INVALID_REQUEST_CODE: Final = "invalid_request"

STATUS_BY_KIND: Final[dict[ErrorKind, int]] = {
    ErrorKind.INVALID_JSON: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SCHEMA_VIOLATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.EMPTY_MESSAGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH_ERROR: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOTHING_TO_COMMIT: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT_ERROR: status.HTTP_409_CONFLICT,
    ErrorKind.STORAGE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.CONFIG_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.GIT_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.REMOTE_UNAVAILABLE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.TRANSPORT_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def status_for(error: JsoncmsError) -> int:
    return STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_body(error: JsoncmsError) -> dict[str, Any]:
    """Render an error as ``{error, code, details?}``.

    ``details`` carries the validation issues for rejected content, the
    remediation text for credential failures and the underlying message for
    Git failures. It is omitted otherwise.
    """
    body: dict[str, Any] = {"error": error.message, "code": error.kind.value}

    details: Any = None
    if isinstance(error, ContentValidationError):
        details = [issue.to_dict() for issue in error.issues]
    elif isinstance(error, AuthError) and error.remediation:
        details = error.remediation
    elif isinstance(error, GitError) and error.details:
        details = error.details

    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI, logger: FilteringBoundLogger) -> None:
    """Install handlers for jsoncms errors and malformed requests."""

    @app.exception_handler(JsoncmsError)
    async def handle_jsoncms_error(request: Request, exc: JsoncmsError) -> JSONResponse:
        status_code = status_for(exc)
        log = logger.error if status_code >= 500 else logger.info
        log(
            "request_failed",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            kind=exc.kind.value,
            error=exc.message,
        )
        return JSONResponse(status_code=status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "request_invalid", method=request.method, path=request.url.path
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request",
                "code": INVALID_REQUEST_CODE,
                "details": jsonable_encoder(exc.errors()),
            },
        )
