import pytest


@pytest.mark.asyncio
async def test_calendar_feed(api_client):
	response = await api_client.get("/events")
	assert response.status_code == 200
	assert response.headers["content-type"].startswith("text/calendar")
	body = response.text
	assert body.startswith("BEGIN:VCALENDAR\r\n")
	assert body.count("BEGIN:VEVENT") == 1
	assert "UID:future000001" in body
	assert "DTSTART:20990317T063000Z" in body
