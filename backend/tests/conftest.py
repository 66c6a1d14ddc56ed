import hashlib
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from bookgroup.api import deps
from bookgroup.domain.covers.finder import CoverFinder
from bookgroup.domain.covers.sources import CoverLookup
from bookgroup.domain.errors import ConflictError, UpstreamError
from bookgroup.domain.messaging.mailer import OutgoingMessage
from bookgroup.infra.github import RemoteFile
from bookgroup.main import app
from bookgroup.settings import settings

ADMIN_EMAIL = "alice@example.com"
MEMBER_EMAIL = "bob@example.com"

MEMBERS = [
	{"givenName": "Alice", "familyName": "Archer", "email": ADMIN_EMAIL, "notifiable": True, "isAdmin": True},
	{"givenName": "Bob", "familyName": "Baker", "email": MEMBER_EMAIL, "notifiable": True},
	{"givenName": "Carol", "email": "carol@example.com", "notifiable": False},
	{"givenName": "Dan", "familyName": "Dunn"},
]

BOOKS = [
	{
		"id": "past00000001",
		"title": "The Luminaries",
		"author": "Eleanor Catton",
		"proposer": "Alice",
		"isbn": "9781847089236",
		"coverUrl": "https://covers.openlibrary.org/b/id/1-M.jpg",
		"meetingDate": "2020-01-21T06:30:00.000Z",
		"month": 1,
		"year": 2020,
	},
	{
		"id": "future000001",
		"title": "Potiki",
		"author": "Patricia Grace",
		"proposer": "Bob",
		"meetingDate": "2099-03-17T06:30:00.000Z",
		"month": 3,
		"year": 2099,
	},
	{"id": "undated00001", "title": "The Bone People", "author": "Keri Hulme", "proposer": "Carol"},
]


class InMemoryContents:
	"""Contents client double that keeps files in memory and enforces SHA matching."""

	def __init__(self) -> None:
		self.files: Dict[str, Tuple[str, str]] = {}
		self.commits: List[Tuple[str, str]] = []
		self.reads = 0

	def seed(self, path: str, records: list) -> str:
		text = json.dumps(records, indent=2) + "\n"
		sha = self._sha(path, text)
		self.files[path] = (text, sha)
		return sha

	def records(self, path: str) -> list:
		return json.loads(self.files[path][0])

	def sha(self, path: str) -> str:
		return self.files[path][1]

	def _sha(self, path: str, text: str) -> str:
		return hashlib.sha1(f"{path}:{len(self.commits)}:{text}".encode("utf-8")).hexdigest()

	async def get_file(self, path: str) -> RemoteFile:
		self.reads += 1
		if path not in self.files:
			raise UpstreamError("github_fetch_failed: 404 Not Found", upstream_status=404)
		text, sha = self.files[path]
		return RemoteFile(text=text, sha=sha)

	async def put_file(self, path: str, text: str, sha: str, message: str) -> str:
		if path in self.files and self.files[path][1] != sha:
			raise ConflictError("stale_version")
		self.commits.append((path, message))
		new_sha = self._sha(path, text)
		self.files[path] = (text, new_sha)
		return new_sha


class StubSource:
	def __init__(self, name: str, lookup: Optional[CoverLookup] = None) -> None:
		self.name = name
		self.lookup = lookup or CoverLookup()
		self.calls: List[Tuple[str, Optional[str], Optional[str]]] = []

	async def attempt(self, title, author=None, isbn=None) -> CoverLookup:
		self.calls.append((title, author, isbn))
		return self.lookup


class RecordingMailer:
	def __init__(self) -> None:
		self.sent: List[OutgoingMessage] = []

	async def send(self, message: OutgoingMessage) -> int:
		self.sent.append(message)
		return len(message.recipients)


def mock_client(handler) -> httpx.AsyncClient:
	return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def force_test_settings(monkeypatch):
	monkeypatch.setattr(settings, "environment", "test")
	monkeypatch.setattr(settings, "dev_user_email", None)
	monkeypatch.setattr(settings, "reference_timezone", "Pacific/Auckland")
	monkeypatch.setattr(settings, "meeting_hour", 19)
	monkeypatch.setattr(settings, "meeting_minute", 30)
	monkeypatch.setattr(settings, "obs_admin_token", "ops-secret")
	monkeypatch.setattr(settings, "obs_metrics_public", False)


@pytest.fixture
def contents() -> InMemoryContents:
	client = InMemoryContents()
	client.seed(settings.books_path, BOOKS)
	client.seed(settings.members_path, MEMBERS)
	return client


@pytest.fixture
def cover_source() -> StubSource:
	return StubSource("openlibrary", CoverLookup(cover_url="https://covers.example/new.jpg", isbn="9780000000001"))


@pytest.fixture
def finder(cover_source) -> CoverFinder:
	return CoverFinder([cover_source])


@pytest.fixture
def mailer() -> RecordingMailer:
	return RecordingMailer()


@pytest_asyncio.fixture
async def api_client(contents, finder, mailer):
	app.dependency_overrides[deps.get_contents_client] = lambda: contents
	app.dependency_overrides[deps.get_cover_finder] = lambda: finder
	app.dependency_overrides[deps.get_mailer_factory] = lambda: (lambda: mailer)
	transport = ASGITransport(app=app)
	try:
		async with AsyncClient(transport=transport, base_url="http://testserver") as client:
			yield client
	finally:
		app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
	return {"Cf-Access-Authenticated-User-Email": ADMIN_EMAIL}


@pytest.fixture
def member_headers() -> dict:
	return {"Cf-Access-Authenticated-User-Email": MEMBER_EMAIL}


@pytest.fixture
def make_source():
	return StubSource


@pytest.fixture
def make_http():
	return mock_client
