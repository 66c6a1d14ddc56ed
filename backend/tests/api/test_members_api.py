import pytest

from bookgroup.settings import settings


@pytest.mark.asyncio
async def test_members_are_admin_only(api_client, member_headers):
	assert (await api_client.get("/api/members")).status_code == 401
	response = await api_client.get("/api/members", headers=member_headers)
	assert response.status_code == 403


@pytest.mark.asyncio
async def test_member_crud(api_client, contents, admin_headers):
	listing = await api_client.get("/api/members", headers=admin_headers)
	assert listing.status_code == 200
	assert [m["givenName"] for m in listing.json()["members"]] == ["Alice", "Bob", "Carol", "Dan"]

	created = await api_client.post(
		"/api/members",
		json={"givenName": "Erin", "email": "erin@example.com", "notifiable": True, "sha": listing.json()["sha"]},
		headers=admin_headers,
	)
	assert created.status_code == 201
	assert created.json()["member"] == {"givenName": "Erin", "email": "erin@example.com", "notifiable": True}

	updated = await api_client.put(
		"/api/members",
		json={"originalGivenName": "Erin", "familyName": "Evans", "sha": created.json()["sha"]},
		headers=admin_headers,
	)
	assert updated.status_code == 200
	assert updated.json()["member"]["familyName"] == "Evans"

	deleted = await api_client.request(
		"DELETE",
		"/api/members",
		json={"givenName": "Erin", "familyName": "Evans", "sha": updated.json()["sha"]},
		headers=admin_headers,
	)
	assert deleted.status_code == 200
	assert deleted.json()["deleted"] == "Erin Evans"
	assert len(contents.records(settings.members_path)) == 4


@pytest.mark.asyncio
async def test_duplicate_member(api_client, contents, admin_headers):
	response = await api_client.post(
		"/api/members",
		json={"givenName": "Bob", "familyName": "Baker", "sha": contents.sha(settings.members_path)},
		headers=admin_headers,
	)
	assert response.status_code == 400
	assert response.json()["detail"] == "member_exists"
