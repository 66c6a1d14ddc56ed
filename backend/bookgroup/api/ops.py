"""Liveness check for the host and the Prometheus scrape endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from bookgroup.settings import settings

router = APIRouter(tags=["ops"])


async def require_metrics_access(admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token")) -> None:
	"""Metrics are open when OBS_METRICS_PUBLIC is set, otherwise the scraper sends OBS_ADMIN_TOKEN."""
	if settings.obs_metrics_public:
		return
	if not settings.obs_admin_token:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	if admin_token != settings.obs_admin_token:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")


@router.get("/health/live")
async def health_live() -> dict[str, str]:
	return {"status": "ok", "service": settings.service_name, "commit": settings.git_commit}


@router.get("/metrics", dependencies=[Depends(require_metrics_access)])
async def prometheus_metrics() -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
