"""
Exception handlers — every failure leaves the API as RFC 9457
`application/problem+json`.

`AppError` is mapped by its `kind` through `PROBLEMS`; there is no
isinstance cascade.  Bodies always carry `kind` so a client (or an
operator reading logs) can tell a denial from a misconfigured route or
a storage outage even when the status code is the same.

Unexpected exceptions become a bare 500 and are logged with traceback;
their message never reaches the client.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import AppError, ErrorKind

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"

# kind → (status, title)
PROBLEMS: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.UNAUTHENTICATED: (status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    ErrorKind.DENIED: (status.HTTP_403_FORBIDDEN, "Forbidden"),
    ErrorKind.NOT_FOUND_INTEGRITY_FAULT: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Data Integrity Fault",
    ),
    ErrorKind.INVALID_FORMAT: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Invalid Permission Configuration",
    ),
    ErrorKind.UPSTREAM_FAILURE: (status.HTTP_503_SERVICE_UNAVAILABLE, "Service Unavailable"),
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Not Found"),
    ErrorKind.CONFLICT: (status.HTTP_409_CONFLICT, "Conflict"),
    ErrorKind.VALIDATION: (status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error"),
}

# Fields that are only useful in server logs.
PRIVATE_FIELDS: dict[ErrorKind, frozenset[str]] = {
    ErrorKind.UPSTREAM_FAILURE: frozenset({"operation"}),
}


def problem_response(
    request: Request,
    *,
    status_code: int,
    title: str,
    detail: str,
    kind: str,
    extra: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "type": f"{settings.API_BASE_URL.rstrip('/')}/errors/{kind.replace('_', '-')}",
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": request.url.path,
        "kind": kind,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        body["request_id"] = request_id
    if extra:
        body.update(extra)
    return JSONResponse(
        body,
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code, title = PROBLEMS[exc.kind]

    hidden = PRIVATE_FIELDS.get(exc.kind, frozenset())
    extra = {k: v for k, v in exc.fields.items() if k not in hidden}
    if exc.reason:
        extra["reason"] = exc.reason

    if status_code >= 500:
        logger.error(
            "%s %s failed: %r fields=%s",
            request.method,
            request.url.path,
            exc,
            exc.fields,
        )
    else:
        logger.info("%s %s rejected: %r", request.method, request.url.path, exc)

    headers = None
    if exc.kind is ErrorKind.UNAUTHENTICATED:
        headers = {"WWW-Authenticate": "Bearer"}

    return problem_response(
        request,
        status_code=status_code,
        title=title,
        detail=exc.detail,
        kind=exc.kind.value,
        extra=extra,
        headers=headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "request", "message": error.get("msg", "Invalid value")})

    return problem_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        title="Validation Error",
        detail="Request validation failed",
        kind=ErrorKind.VALIDATION.value,
        extra={"errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return problem_response(
        request,
        status_code=exc.status_code,
        title=str(exc.detail) if exc.status_code < 500 else "Internal Server Error",
        detail=str(exc.detail),
        kind="http_error",
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return problem_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        title="Internal Server Error",
        detail="An unexpected error occurred",
        kind="internal_error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
