"""Public iCalendar feed of upcoming meetings."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from bookgroup.api.deps import get_book_service
from bookgroup.domain.books.calendar import build_calendar
from bookgroup.domain.books.service import BookService
from bookgroup.settings import settings

router = APIRouter(tags=["events"])


@router.get("/events", response_class=Response)
async def calendar_feed_endpoint(service: BookService = Depends(get_book_service)) -> Response:
	books, _ = await service.list_books()
	filename = settings.group_name.lower().replace(" ", "-")
	return Response(
		content=build_calendar(books),
		media_type="text/calendar; charset=utf-8",
		headers={"Content-Disposition": f'inline; filename="{filename}.ics"'},
	)
