"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


REQUEST_COUNTER = Counter(
	"bookgroup_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"bookgroup_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)

COVER_LOOKUPS = Counter(
	"bookgroup_cover_lookups_total",
	"Cover lookups per catalog source",
	["source", "outcome"],
)

COLLECTION_COMMITS = Counter(
	"bookgroup_collection_commits_total",
	"Commits of JSON collections to the document store",
	["collection", "outcome"],
)

MESSAGES_SENT = Counter(
	"bookgroup_messages_sent_total",
	"Member broadcast emails accepted by the mail relay",
)

MESSAGE_RECIPIENTS = Counter(
	"bookgroup_message_recipients_total",
	"Recipients addressed by member broadcast emails",
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_cover_lookup(source: str, found: bool) -> None:
	COVER_LOOKUPS.labels(source=source, outcome="hit" if found else "miss").inc()


def inc_collection_commit(collection: str, outcome: str) -> None:
	COLLECTION_COMMITS.labels(collection=collection, outcome=outcome).inc()


def inc_message_sent(recipients: int) -> None:
	MESSAGES_SENT.inc()
	MESSAGE_RECIPIENTS.inc(recipients)
