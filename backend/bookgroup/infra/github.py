"""Read/write files through the GitHub Contents API.

The repository is the site's database: every change is a commit, and the
blob SHA returned with a file is the version token used for optimistic
locking. GitHub rejects a write whose SHA is no longer current with 409.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import NamedTuple

import httpx

from bookgroup.domain.errors import ConfigurationError, ConflictError, UpstreamError
from bookgroup.settings import Settings

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"


@dataclass(frozen=True)
class GitHubConfig:
    repo: str  # "owner/name"
    token: str
    branch: str = "main"
    api_base: str = "https://api.github.com"

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubConfig":
        if not settings.github_repo:
            raise ConfigurationError("github_repo_not_configured")
        if not settings.github_token:
            raise ConfigurationError("github_token_not_configured")
        return cls(
            repo=settings.github_repo,
            token=settings.github_token,
            branch=settings.github_branch,
            api_base=settings.github_api_base.rstrip("/"),
        )


class RemoteFile(NamedTuple):
    text: str
    sha: str


def _upstream_error(action: str, response: httpx.Response) -> UpstreamError:
    return UpstreamError(
        f"github_{action}_failed: {response.status_code} {response.text[:200]}",
        upstream_status=response.status_code,
    )


def _malformed_error(action: str, response: httpx.Response) -> UpstreamError:
    logger.warning("github %s returned an unexpected body status=%s", action, response.status_code)
    return UpstreamError(f"github_{action}_failed: unexpected response body", upstream_status=response.status_code)


def _require_sha(value: object) -> str:
    if not isinstance(value, str) or not value:
        raise TypeError("sha must be a non-empty string")
    return value


class GitHubContentsClient:
    def __init__(self, config: GitHubConfig, http: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http

    def _url(self, path: str) -> str:
        return f"{self._config.api_base}/repos/{self._config.repo}/contents/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }

    async def get_file(self, path: str) -> RemoteFile:
        try:
            response = await self._http.get(
                self._url(path),
                params={"ref": self._config.branch},
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"github_fetch_failed: {exc}") from exc
        if not response.is_success:
            raise _upstream_error("fetch", response)
        try:
            payload = response.json()
            raw = base64.b64decode(payload["content"].replace("\n", ""))
            remote = RemoteFile(text=raw.decode("utf-8"), sha=_require_sha(payload["sha"]))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise _malformed_error("fetch", response) from exc
        return remote

    async def put_file(self, path: str, text: str, sha: str, message: str) -> str:
        """Commit ``text`` at ``path`` if the file is still at ``sha``; return the new SHA."""
        body = {
            "message": message,
            "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
            "sha": sha,
            "branch": self._config.branch,
        }
        try:
            response = await self._http.put(self._url(path), json=body, headers=self._headers())
        except httpx.HTTPError as exc:
            raise UpstreamError(f"github_commit_failed: {exc}") from exc
        if response.status_code == httpx.codes.CONFLICT:
            logger.info("github commit rejected path=%s stale_sha=%s", path, sha)
            raise ConflictError("stale_version")
        if not response.is_success:
            raise _upstream_error("commit", response)
        try:
            return _require_sha(response.json()["content"]["sha"])
        except (ValueError, KeyError, TypeError) as exc:
            raise _malformed_error("commit", response) from exc
