"""Translate domain and storage failures into HTTP error responses"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from vema_gateway.api.dependencies import get_request_id
from vema_gateway.domain.exceptions import DomainException, ErrorKind, StoreError
from vema_gateway.infrastructure.observability.metrics import store_failures_counter

STATUS_BY_KIND = {
    ErrorKind.INVALID_AMOUNT: 422,
    ErrorKind.INVALID_APPLICATION: 422,
    ErrorKind.INVALID_PLAN: 422,
    ErrorKind.MISSING_FAMILY_DETAILS: 422,
    ErrorKind.INSUFFICIENT_BALANCE: 422,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.NOT_ALLOWED: 403,
}


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    logging.warning(
        f"Domain rule rejected request: {exc.message}",
        extra={"request_id": get_request_id(request), "error_kind": exc.kind.value},
    )
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(exc.kind, 400),
        content={"error": exc.kind.value, "detail": exc.message},
    )


async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
    store_failures_counter.inc()
    logging.error(f"Store error: {exc}", extra={"request_id": get_request_id(request)})
    return JSONResponse(
        status_code=503,
        content={"error": "StoreError", "detail": "Storage service unavailable"},
    )
