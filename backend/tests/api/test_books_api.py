import pytest

from bookgroup.settings import settings


@pytest.mark.asyncio
async def test_list_books_is_public(api_client, contents):
	response = await api_client.get("/api/books")
	assert response.status_code == 200
	data = response.json()
	assert data["sha"] == contents.sha(settings.books_path)
	assert [b["id"] for b in data["books"]] == ["past00000001", "future000001", "undated00001"]
	assert data["books"][0]["meetingDate"] == "2020-01-21T06:30:00.000Z"
	assert "meetingDate" not in data["books"][2]
	assert response.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_create_book_requires_admin(api_client, contents, member_headers):
	payload = {"title": "Tu", "sha": contents.sha(settings.books_path)}
	anonymous = await api_client.post("/api/books", json=payload)
	assert anonymous.status_code == 401
	assert anonymous.json()["detail"] == "not_authenticated"

	member = await api_client.post("/api/books", json=payload, headers=member_headers)
	assert member.status_code == 403
	assert member.json()["detail"] == "admin_required"

	stranger = await api_client.post(
		"/api/books", json=payload, headers={"Cf-Access-Authenticated-User-Email": "eve@example.com"}
	)
	assert stranger.status_code == 403
	assert stranger.json()["detail"] == "not_a_member"
	assert contents.commits == []


@pytest.mark.asyncio
async def test_create_book(api_client, contents, admin_headers):
	payload = {
		"title": "Tu",
		"author": "Patricia Grace",
		"proposer": "Dan",
		"month": 6,
		"year": 2030,
		"customDate": "2030-06-25T18:00",
		"sha": contents.sha(settings.books_path),
	}
	response = await api_client.post("/api/books", json=payload, headers=admin_headers)
	assert response.status_code == 201
	data = response.json()
	assert data["sha"] == contents.sha(settings.books_path)
	assert data["book"]["coverUrl"] == "https://covers.example/new.jpg"
	assert data["book"]["meetingDate"] == "2030-06-25T06:00:00.000Z"
	assert contents.commits[-1] == (settings.books_path, 'Add "Tu"')


@pytest.mark.asyncio
async def test_stale_sha_is_conflict(api_client, contents, admin_headers):
	response = await api_client.post("/api/books", json={"title": "Tu", "sha": "stale"}, headers=admin_headers)
	assert response.status_code == 409
	assert response.json()["detail"] == "stale_version"
	assert response.json()["request_id"]


@pytest.mark.asyncio
async def test_validation_errors(api_client, contents, admin_headers):
	sha = contents.sha(settings.books_path)
	blank = await api_client.post("/api/books", json={"title": " ", "sha": sha}, headers=admin_headers)
	assert blank.status_code == 400
	assert blank.json()["detail"] == "title_required"

	bad_date = await api_client.post(
		"/api/books",
		json={"title": "Tu", "month": 6, "year": 2030, "customDate": "soon", "sha": sha},
		headers=admin_headers,
	)
	assert bad_date.status_code == 400
	assert bad_date.json()["detail"] == "invalid_custom_date"

	missing_sha = await api_client.post("/api/books", json={"title": "Tu"}, headers=admin_headers)
	assert missing_sha.status_code == 422


@pytest.mark.asyncio
async def test_update_and_delete_book(api_client, contents, admin_headers, cover_source):
	sha = contents.sha(settings.books_path)
	update = await api_client.put(
		"/api/books",
		json={
			"id": "future000001",
			"title": "Potiki",
			"author": "Patricia Grace",
			"proposer": "Alice",
			"month": 3,
			"year": 2099,
			"sha": sha,
		},
		headers=admin_headers,
	)
	assert update.status_code == 200
	assert update.json()["book"]["proposer"] == "Alice"
	assert cover_source.calls == []
	new_sha = update.json()["sha"]

	deleted = await api_client.request(
		"DELETE", "/api/books", json={"id": "future000001", "sha": new_sha}, headers=admin_headers
	)
	assert deleted.status_code == 200
	assert deleted.json()["deleted"] == "future000001"

	missing = await api_client.request(
		"DELETE", "/api/books", json={"id": "future000001", "sha": deleted.json()["sha"]}, headers=admin_headers
	)
	assert missing.status_code == 404
	assert missing.json()["detail"] == "book_not_found"


@pytest.mark.asyncio
async def test_store_failure_is_bad_gateway(api_client, contents):
	del contents.files[settings.books_path]
	response = await api_client.get("/api/books")
	assert response.status_code == 502
