"""Interface layer error mapping.

Domain errors become JSON responses whose status is derived from the
error kind.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from idp.domain.error import ConcurrentLoginError, DomainError
from idp.domain.value import ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.DUPLICATE_CREDENTIAL: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CODE_EXPIRED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CODE_ALREADY_USED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CODE_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorKind.TOO_MANY_ATTEMPTS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.LAST_CREDENTIAL: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DELIVERY_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.MISCONFIGURED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_status_for(kind: ErrorKind | None) -> int:
    """Status code for a failure kind; 400 when unknown."""
    if kind is None:
        return status.HTTP_400_BAD_REQUEST
    return STATUS_BY_KIND.get(kind, status.HTTP_400_BAD_REQUEST)


def http_exception_for(kind: ErrorKind | None, message: str) -> HTTPException:
    return HTTPException(status_code=http_status_for(kind), detail=message)


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = http_status_for(exc.kind)
    if status_code >= 500:
        logger.error(f"{request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": exc.message, "kind": exc.kind.value},
    )


async def _concurrent_login_handler(
    request: Request, exc: ConcurrentLoginError
) -> JSONResponse:
    logger.warning(f"{request.url.path}: concurrent first login")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"success": False, "message": str(exc)},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install handlers for errors that escape the use cases."""
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(ConcurrentLoginError, _concurrent_login_handler)
