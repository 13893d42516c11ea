"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from unistellar.api.request_id import get_request_id
from unistellar.domain.common.ids import MalformedIdentifier
from unistellar.domain.network.service import NotFound
from unistellar.domain.search.exceptions import SearchError

logger = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": exc.detail, "request_id": rid}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": "validation_error", "errors": exc.errors(), "request_id": rid}
        return JSONResponse(status_code=422, content=payload)

    @app.exception_handler(SearchError)
    async def search_exc_handler(request: Request, exc: SearchError):  # type: ignore[override]
        rid = get_request_id(request)
        if exc.status_code >= 500:
            logger.error("search_failed reason=%s", exc.reason, exc_info=exc)
        # internal faults never echo store details back to the client
        detail = exc.reason if exc.status_code < 500 else "internal_error"
        return JSONResponse(status_code=exc.status_code, content={"detail": detail, "request_id": rid})

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):  # type: ignore[override]
        rid = get_request_id(request)
        return JSONResponse(status_code=404, content={"detail": f"{exc.entity}_not_found", "request_id": rid})

    @app.exception_handler(MalformedIdentifier)
    async def malformed_id_handler(request: Request, exc: MalformedIdentifier):  # type: ignore[override]
        rid = get_request_id(request)
        logger.error("malformed_identifier reason=%s", exc.reason, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "internal_error", "request_id": rid})
