"""JSON collections persisted as whole documents in a remote file store."""

from __future__ import annotations

import json
import logging
from typing import Generic, List, Protocol, Tuple, Type, TypeVar

import pydantic

from bookgroup.domain.common import CamelModel
from bookgroup.domain.errors import ConflictError, UpstreamError
from bookgroup.infra.github import RemoteFile
from bookgroup.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=CamelModel)


class ContentsClient(Protocol):
    async def get_file(self, path: str) -> RemoteFile:
        ...

    async def put_file(self, path: str, text: str, sha: str, message: str) -> str:
        ...


def encode_document(records: List[CamelModel]) -> str:
    return json.dumps([record.to_document() for record in records], indent=2, ensure_ascii=False) + "\n"


class JsonCollectionStore(Generic[RecordT]):
    """Read-modify-write access to one JSON array with SHA-based locking."""

    def __init__(self, client: ContentsClient, path: str, model: Type[RecordT], *, name: str) -> None:
        self._client = client
        self._path = path
        self._model = model
        self.name = name

    async def fetch(self) -> Tuple[List[RecordT], str]:
        remote = await self._client.get_file(self._path)
        try:
            raw = json.loads(remote.text)
            records = [self._model.model_validate(item) for item in raw]
        except (ValueError, TypeError, pydantic.ValidationError) as exc:
            raise UpstreamError(f"invalid_{self.name}_document") from exc
        return records, remote.sha

    async def fetch_for_update(self, presented_sha: str) -> Tuple[List[RecordT], str]:
        """Fetch current state and reject the caller if it read an older version."""
        records, current_sha = await self.fetch()
        if presented_sha != current_sha:
            obs_metrics.inc_collection_commit(self.name, "stale")
            raise ConflictError("stale_version")
        return records, current_sha

    async def commit(self, records: List[RecordT], sha: str, message: str) -> str:
        try:
            new_sha = await self._client.put_file(self._path, encode_document(list(records)), sha, message)
        except ConflictError:
            obs_metrics.inc_collection_commit(self.name, "conflict")
            raise
        except UpstreamError:
            obs_metrics.inc_collection_commit(self.name, "error")
            raise
        obs_metrics.inc_collection_commit(self.name, "ok")
        logger.info("committed %s records=%s message=%s", self.name, len(records), message)
        return new_sha
