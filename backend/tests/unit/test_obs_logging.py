import json
import logging

from bookgroup.obs.logging import InfoSampler, JSONLogFormatter, current_request_id, member_tag, request_context


def _record(msg="http_request", level=logging.INFO, **extra):
	record = logging.LogRecord("bookgroup.http", level, __file__, 1, msg, None, None)
	for key, value in extra.items():
		setattr(record, key, value)
	return record


def _format(record):
	return json.loads(JSONLogFormatter().format(record))


def test_request_context_tags_lines_without_leaking_email():
	with request_context("req-1", "/api/books", "Bob@Example.com ", "203.0.113.9") as context:
		assert current_request_id() == "req-1"
		line = _format(_record(status=200, route="/api/books"))
	assert current_request_id() is None
	assert line["request_id"] == "req-1"
	assert line["path"] == "/api/books"
	assert line["member"] == context.member == member_tag("bob@example.com")
	assert line["status"] == 200
	assert line["ip"] == "203.0.113.9"
	assert line["env"] == "test"
	assert "bob@example.com" not in json.dumps(line).lower()


def test_anonymous_request_has_no_member():
	with request_context("req-2", "/health/live"):
		line = _format(_record())
	assert "member" not in line
	assert member_tag("  ") is None


def test_sensitive_extras_redacted_and_long_strings_cut():
	line = _format(_record(admin_token="ops-secret", recipient_email="a@b.c", title="x" * 400))
	assert line["admin_token"] == "[redacted]"
	assert line["recipient_email"] == "[redacted]"
	assert line["title"] == "x" * 256 + "…"


def test_sampler_only_drops_info():
	sampler = InfoSampler(0.0)
	assert sampler.filter(_record(level=logging.INFO)) is False
	assert sampler.filter(_record(level=logging.WARNING)) is True
	assert InfoSampler(5.0).filter(_record()) is True
