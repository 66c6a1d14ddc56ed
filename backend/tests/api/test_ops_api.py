import pytest

from bookgroup.settings import settings


@pytest.mark.asyncio
async def test_health_live(api_client):
	response = await api_client.get("/health/live")
	assert response.status_code == 200
	assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_metrics_need_admin_token(api_client):
	assert (await api_client.get("/metrics")).status_code == 403
	assert (await api_client.get("/metrics", headers={"X-Admin-Token": "wrong"})).status_code == 403

	bearer = await api_client.get("/metrics", headers={"Authorization": "Bearer ops-secret"})
	assert bearer.status_code == 403

	response = await api_client.get("/metrics", headers={"X-Admin-Token": "ops-secret"})
	assert response.status_code == 200
	assert "bookgroup_http_requests_total" in response.text


@pytest.mark.asyncio
async def test_metrics_fail_closed_without_token(api_client, monkeypatch):
	monkeypatch.setattr(settings, "obs_admin_token", None)
	response = await api_client.get("/metrics", headers={"X-Admin-Token": "anything"})
	assert response.status_code == 403
	assert response.json()["detail"] == "admin_token_not_configured"


@pytest.mark.asyncio
async def test_public_metrics_need_no_token(api_client, monkeypatch):
	monkeypatch.setattr(settings, "obs_metrics_public", True)
	response = await api_client.get("/metrics")
	assert response.status_code == 200
	assert "bookgroup_cover_lookups_total" in response.text
