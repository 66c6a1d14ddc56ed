from datetime import datetime, timezone

from bookgroup.domain.books.calendar import build_calendar
from bookgroup.domain.books.schemas import Book

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _book(book_id, title, when, author=None, proposer="Alice"):
	return Book(id=book_id, title=title, author=author, proposer=proposer, meeting_date=when, month=when.month, year=when.year)


def test_future_meetings_become_events():
	books = [
		_book("old", "Past Book", datetime(2024, 11, 19, 6, 30, tzinfo=timezone.utc)),
		_book("next", "Potiki", datetime(2025, 1, 21, 6, 30, tzinfo=timezone.utc), author="Patricia Grace", proposer="Bob"),
		Book(id="undated", title="Someday"),
	]
	ics = build_calendar(books, now=NOW)
	lines = ics.split("\r\n")

	assert lines[0] == "BEGIN:VCALENDAR"
	assert ics.endswith("END:VCALENDAR\r\n")
	assert ics.count("BEGIN:VEVENT") == 1
	assert "UID:next" in lines
	assert "DTSTART:20250121T063000Z" in lines
	assert "DTEND:20250121T093000Z" in lines
	assert "DTSTAMP:20250101T000000Z" in lines
	assert "SUMMARY:Bookgroup: Potiki by Patricia Grace\\, proposer Bob" in lines


def test_summary_without_author_and_escaping():
	book = _book("b1", "Salt; Sugar, Fat", datetime(2025, 2, 18, 6, 30, tzinfo=timezone.utc), proposer="Dan")
	ics = build_calendar([book], now=NOW)
	assert "SUMMARY:Bookgroup: Salt\\; Sugar\\, Fat\\, proposer Dan" in ics.split("\r\n")


def test_empty_calendar_is_still_valid():
	ics = build_calendar([], now=NOW)
	assert ics.startswith("BEGIN:VCALENDAR\r\nVERSION:2.0\r\n")
	assert "BEGIN:VEVENT" not in ics


def test_long_lines_are_folded_at_75_octets():
	title = "Ngā Kōrero o te Whenua: " + "a very long subtitle about rivers and mountains " * 3
	book = _book("long", title, datetime(2025, 3, 18, 6, 30, tzinfo=timezone.utc), author="Hēmi Pōtatau")
	ics = build_calendar([book], now=NOW)

	for line in ics.split("\r\n"):
		assert len(line.encode("utf-8")) <= 75
	continuations = [line for line in ics.split("\r\n") if line.startswith(" ")]
	assert len(continuations) >= 2

	unfolded = ics.replace("\r\n ", "").split("\r\n")
	summary = next(line for line in unfolded if line.startswith("SUMMARY:"))
	assert summary == f"SUMMARY:Bookgroup: {title} by Hēmi Pōtatau\\, proposer Alice"
	assert "UID:long" in unfolded
