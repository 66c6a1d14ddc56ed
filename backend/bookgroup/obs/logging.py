"""JSON log lines for the API and the sheet import script.

Each line carries the deployment identity (service, env, commit) and, while a
request is in flight, its id, path, client address and member tag.
Member addresses never reach the logs.
"""

from __future__ import annotations

import hashlib
import json
import logging
import random
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from bookgroup.settings import settings

_LOGGER_NAME = "bookgroup"

_MAX_STRING_LENGTH = 256

_SENSITIVE_KEYWORDS = ("token", "secret", "password", "authorization", "cookie", "email")

# Attributes every LogRecord has; anything else came in through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "taskName"}


@dataclass(frozen=True)
class RequestContext:
	request_id: str
	path: str
	member: Optional[str] = None
	ip: Optional[str] = None


_CONTEXT: ContextVar[Optional[RequestContext]] = ContextVar("bookgroup_request_context", default=None)


def member_tag(email: Optional[str]) -> Optional[str]:
	"""Short stable digest of an address, enough to follow one member's requests."""
	if not email or not email.strip():
		return None
	return hashlib.sha256(email.strip().lower().encode("utf-8")).hexdigest()[:12]


@contextmanager
def request_context(
	request_id: str,
	path: str,
	member_email: Optional[str] = None,
	client_ip: Optional[str] = None,
) -> Iterator[RequestContext]:
	context = RequestContext(request_id=request_id, path=path, member=member_tag(member_email), ip=client_ip)
	token = _CONTEXT.set(context)
	try:
		yield context
	finally:
		_CONTEXT.reset(token)


def current_request_id() -> Optional[str]:
	context = _CONTEXT.get()
	return context.request_id if context else None


def _clean_extra(key: str, value: Any) -> Any:
	if any(keyword in key.lower() for keyword in _SENSITIVE_KEYWORDS):
		return "[redacted]"
	if isinstance(value, str) and len(value) > _MAX_STRING_LENGTH:
		return f"{value[:_MAX_STRING_LENGTH]}…"
	return value


class JSONLogFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		context = _CONTEXT.get()
		if context is not None:
			payload.update((key, value) for key, value in asdict(context).items() if value is not None)
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in record.__dict__.items():
			if key not in _RECORD_ATTRS:
				payload[key] = _clean_extra(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSampler(logging.Filter):
	"""Keep a fraction of info lines; other levels always pass."""

	def __init__(self, rate: float) -> None:
		super().__init__()
		self.rate = max(0.0, min(1.0, rate))

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO or self.rate >= 1.0:
			return True
		return random.random() < self.rate


def configure_logging() -> logging.Logger:
	root = logging.getLogger()
	root.handlers.clear()
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSampler(settings.obs_log_sampling_rate_info))
	root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
	# httpx logs every catalog and GitHub call at info
	logging.getLogger("httpx").setLevel(logging.WARNING)
	return logging.getLogger(_LOGGER_NAME)
