"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookgroup.api.request_id import get_request_id
from bookgroup.domain.errors import BookgroupError, UpstreamError

logger = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(BookgroupError)
	async def domain_exc_handler(request: Request, exc: BookgroupError):  # type: ignore[override]
		rid = get_request_id(request)
		if exc.status_code >= 500:
			upstream = exc.upstream_status if isinstance(exc, UpstreamError) else None
			logger.error("request failed detail=%s upstream_status=%s", exc.detail, upstream)
		payload = {"detail": exc.detail, "request_id": rid}
		return JSONResponse(status_code=exc.status_code, content=payload)

	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		rid = get_request_id(request)
		payload = {"detail": exc.detail, "request_id": rid}
		return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		rid = get_request_id(request)
		payload = {"detail": "validation_error", "errors": jsonable_encoder(exc.errors()), "request_id": rid}
		return JSONResponse(status_code=422, content=payload)
