"""Shared outbound HTTP client."""

from __future__ import annotations

from typing import Optional

import httpx

from bookgroup.settings import settings

_client: Optional[httpx.AsyncClient] = None


def build_client() -> httpx.AsyncClient:
	return httpx.AsyncClient(
		headers={"User-Agent": f"{settings.service_name}/{settings.git_commit}"},
	)


def set_client(client: Optional[httpx.AsyncClient]) -> None:
	global _client
	_client = client


def get_client() -> httpx.AsyncClient:
	global _client
	if _client is None:
		_client = build_client()
	return _client


async def close_client() -> None:
	global _client
	if _client is not None:
		await _client.aclose()
		_client = None
