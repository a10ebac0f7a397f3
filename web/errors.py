"""
Ledger error -> HTTP response

The message is returned verbatim so the dashboard can show it as is.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.domain.errors import (
    LedgerError,
    NotFound,
    StoreError,
    ValidationError,
)
from web.models import ErrorResponse

logger = logging.getLogger(__name__)


def status_code_for(error: LedgerError) -> int:
    """422 validation, 404 not found, 503 store failure, 409 any other rule"""
    if isinstance(error, ValidationError):
        return 422
    if isinstance(error, NotFound):
        return 404
    if isinstance(error, StoreError):
        return 503
    return 409


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content=ErrorResponse(**exc.to_dict()).model_dump())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
