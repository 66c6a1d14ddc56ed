"""Per-request metrics and the access log line."""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from bookgroup.infra.auth import member_email_from_request
from bookgroup.obs import logging as obs_logging
from bookgroup.obs import metrics

logger = logging.getLogger("bookgroup.http")


def _route_template(request: Request) -> str:
	# "/api/books/{book_id}" rather than one label per book
	route = request.scope.get("route")
	return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
	"""Runs inside RequestIdMiddleware, so request.state.request_id is already set."""

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		request_id = getattr(request.state, "request_id", None) or "unknown"
		start = time.perf_counter()
		status_code = 500
		client_ip = request.client.host if request.client else None
		with obs_logging.request_context(request_id, request.url.path, member_email_from_request(request), client_ip):
			try:
				response = await call_next(request)
				status_code = response.status_code
				return response
			except Exception:
				logger.exception("http_request_error", extra={"method": request.method})
				raise
			finally:
				elapsed = time.perf_counter() - start
				route = _route_template(request)
				metrics.observe_request(route, request.method, status_code, elapsed)
				logger.info(
					"http_request",
					extra={
						"status": status_code,
						"method": request.method,
						"route": route,
						"latency_ms": round(elapsed * 1000, 3),
					},
				)


def install(app: FastAPI) -> None:
	app.add_middleware(ObservabilityMiddleware)
