"""Member list endpoints, restricted to admins."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from bookgroup.api.deps import get_member_service
from bookgroup.api.security_deps import require_admin
from bookgroup.domain.members import schemas
from bookgroup.domain.members.service import MemberService

router = APIRouter(prefix="/api/members", tags=["members"], dependencies=[Depends(require_admin)])


@router.get("", response_model=schemas.MemberListResponse, response_model_exclude_none=True)
async def list_members_endpoint(service: MemberService = Depends(get_member_service)) -> schemas.MemberListResponse:
	members, sha = await service.list_members()
	return schemas.MemberListResponse(members=members, sha=sha)


@router.post(
	"",
	response_model=schemas.MemberMutationResponse,
	response_model_exclude_none=True,
	status_code=status.HTTP_201_CREATED,
)
async def create_member_endpoint(
	payload: schemas.MemberCreateRequest,
	service: MemberService = Depends(get_member_service),
) -> schemas.MemberMutationResponse:
	member, sha = await service.create_member(payload, payload.sha)
	return schemas.MemberMutationResponse(member=member, sha=sha)


@router.put("", response_model=schemas.MemberMutationResponse, response_model_exclude_none=True)
async def update_member_endpoint(
	payload: schemas.MemberUpdateRequest,
	service: MemberService = Depends(get_member_service),
) -> schemas.MemberMutationResponse:
	member, sha = await service.update_member(payload, payload.sha)
	return schemas.MemberMutationResponse(member=member, sha=sha)


@router.delete("", response_model=schemas.MemberDeleteResponse)
async def delete_member_endpoint(
	payload: schemas.MemberDeleteRequest,
	service: MemberService = Depends(get_member_service),
) -> schemas.MemberDeleteResponse:
	removed, sha = await service.delete_member(payload.given_name, payload.family_name, payload.sha)
	return schemas.MemberDeleteResponse(deleted=removed.display_name, sha=sha)
