from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from bookgroup.domain.errors import NotFoundError, ValidationError
from bookgroup.domain.members import schemas
from bookgroup.domain.store import JsonCollectionStore

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("given_name", "family_name", "email", "notifiable", "is_admin")


def sort_members(members: List[schemas.Member]) -> List[schemas.Member]:
    return sorted(members, key=lambda m: (m.given_name.casefold(), (m.family_name or "").casefold()))


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _find_index(members: List[schemas.Member], key: Tuple[str, str]) -> int:
    for index, member in enumerate(members):
        if member.key == key:
            return index
    raise NotFoundError("member_not_found")


class MemberService:
    """Member list CRUD keyed by the (given name, family name) pair."""

    def __init__(self, store: JsonCollectionStore[schemas.Member]) -> None:
        self._store = store

    async def list_members(self) -> Tuple[List[schemas.Member], str]:
        members, sha = await self._store.fetch()
        return sort_members(members), sha

    async def find_by_email(self, email: str) -> Optional[schemas.Member]:
        wanted = email.strip().lower()
        if not wanted:
            return None
        members, _ = await self._store.fetch()
        return next((m for m in members if m.email and m.email.strip().lower() == wanted), None)

    async def notifiable_members(self) -> List[schemas.Member]:
        members, _ = await self._store.fetch()
        return sort_members([m for m in members if m.notifiable and m.email])

    async def create_member(self, payload: schemas.MemberCreateRequest, sha: str) -> Tuple[schemas.Member, str]:
        given_name = _clean(payload.given_name)
        if not given_name:
            raise ValidationError("given_name_required")
        member = schemas.Member(
            given_name=given_name,
            family_name=_clean(payload.family_name),
            email=_clean(payload.email),
            notifiable=payload.notifiable,
            is_admin=payload.is_admin,
        )
        members, current_sha = await self._store.fetch_for_update(sha)
        if any(existing.key == member.key for existing in members):
            raise ValidationError("member_exists")
        members = sort_members([*members, member])
        new_sha = await self._store.commit(members, current_sha, f'Add member "{member.given_name}"')
        return member, new_sha

    async def update_member(self, payload: schemas.MemberUpdateRequest, sha: str) -> Tuple[schemas.Member, str]:
        members, current_sha = await self._store.fetch_for_update(sha)
        original_key = schemas.member_key(payload.original_given_name, payload.original_family_name)
        index = _find_index(members, original_key)

        changes = {}
        for field in _UPDATABLE_FIELDS:
            if field not in payload.model_fields_set:
                continue
            value = getattr(payload, field)
            changes[field] = _clean(value) if isinstance(value, str) else value
        if "given_name" in changes and not changes["given_name"]:
            raise ValidationError("given_name_required")

        updated = members[index].model_copy(update=changes)
        if updated.key != original_key and any(m.key == updated.key for m in members):
            raise ValidationError("member_exists")
        members[index] = updated
        new_sha = await self._store.commit(sort_members(members), current_sha, f'Update member "{updated.given_name}"')
        return updated, new_sha

    async def delete_member(self, given_name: str, family_name: Optional[str], sha: str) -> Tuple[schemas.Member, str]:
        members, current_sha = await self._store.fetch_for_update(sha)
        index = _find_index(members, schemas.member_key(given_name, family_name))
        removed = members.pop(index)
        new_sha = await self._store.commit(members, current_sha, f'Delete member "{removed.given_name}"')
        logger.info("member deleted")
        return removed, new_sha
