"""Maps ledger errors onto HTTP responses of the form ``{"code", "detail"}``."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from qrwallet.core.exceptions import LedgerError
from qrwallet.infrastructure.database.unit_of_work import translate_storage_error

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[str, int] = {
    "validation_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "invalid_token": status.HTTP_404_NOT_FOUND,
    "token_inactive": status.HTTP_403_FORBIDDEN,
    "token_expired": status.HTTP_403_FORBIDDEN,
    "frozen": status.HTTP_409_CONFLICT,
    "insufficient_balance": status.HTTP_409_CONFLICT,
    "account_not_found": status.HTTP_404_NOT_FOUND,
    "movement_not_found": status.HTTP_404_NOT_FOUND,
    "account_exists": status.HTTP_409_CONFLICT,
    "integrity_violation": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "storage_failure": status.HTTP_503_SERVICE_UNAVAILABLE,
    "concurrent_modification": status.HTTP_503_SERVICE_UNAVAILABLE,
    "token_secret": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("%s %s failed with %s: %s", request.method, request.url.path, exc.code, exc.detail)
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "detail": exc.detail},
        headers=headers,
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    return await ledger_error_handler(request, translate_storage_error(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)


__all__ = ["STATUS_BY_CODE", "register_exception_handlers"]
