from __future__ import annotations

from typing import List, Optional, Tuple

from bookgroup.domain.common import CamelModel


class Member(CamelModel):
    given_name: str
    family_name: Optional[str] = None
    email: Optional[str] = None
    notifiable: Optional[bool] = None
    is_admin: Optional[bool] = None

    @property
    def key(self) -> Tuple[str, str]:
        return member_key(self.given_name, self.family_name)

    @property
    def display_name(self) -> str:
        return f"{self.given_name} {self.family_name or ''}".strip()


def member_key(given_name: Optional[str], family_name: Optional[str]) -> Tuple[str, str]:
    return ((given_name or "").strip(), (family_name or "").strip())


class MemberCreateRequest(CamelModel):
    given_name: str = ""
    family_name: Optional[str] = None
    email: Optional[str] = None
    notifiable: Optional[bool] = None
    is_admin: Optional[bool] = None
    sha: str


class MemberUpdateRequest(CamelModel):
    """Fields left out of the request keep their stored value."""

    original_given_name: str
    original_family_name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    email: Optional[str] = None
    notifiable: Optional[bool] = None
    is_admin: Optional[bool] = None
    sha: str


class MemberDeleteRequest(CamelModel):
    given_name: str
    family_name: Optional[str] = None
    sha: str


class MemberListResponse(CamelModel):
    members: List[Member]
    sha: str


class MemberMutationResponse(CamelModel):
    member: Member
    sha: str


class MemberDeleteResponse(CamelModel):
    deleted: str
    sha: str


class CurrentMemberResponse(CamelModel):
    member: Member
