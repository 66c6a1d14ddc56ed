"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookgroup.api import auth, books, events, members, messages, ops
from bookgroup.api.errors import install_error_handlers
from bookgroup.api.middleware_request_id import RequestIdMiddleware
from bookgroup.infra import http as http_infra
from bookgroup.obs import init as obs_init
from bookgroup.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	http_infra.set_client(http_infra.build_client())
	try:
		yield
	finally:
		await http_infra.close_client()


app = FastAPI(title=settings.group_name, lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(getattr(settings, "cors_allow_origins", []))
if not allow_origins:
	allow_origins = ["http://localhost:5173"] if settings.is_dev() else [settings.site_url]

# Starlette disallows wildcard '*' with allow_credentials=True. Replace '*' with explicit origins.
if "*" in allow_origins:
	if settings.is_dev():
		allow_origins = [
			"http://localhost:5173",
			"http://127.0.0.1:5173",
			"http://localhost:4321",
			"http://127.0.0.1:4321",
		]
	else:
		allow_origins = [settings.site_url]

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)

# Ensure every request carries an X-Request-Id and make it available on request.state
app.add_middleware(RequestIdMiddleware)


app.include_router(books.router)
app.include_router(members.router)
app.include_router(messages.router)
app.include_router(auth.router)
app.include_router(events.router)
app.include_router(ops.router)
