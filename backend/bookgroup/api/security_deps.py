from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from bookgroup.api.deps import get_member_service
from bookgroup.domain.members.schemas import Member
from bookgroup.domain.members.service import MemberService
from bookgroup.infra.auth import member_email_from_request


async def require_member(
	request: Request,
	members: MemberService = Depends(get_member_service),
) -> Member:
	email = member_email_from_request(request)
	if not email:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="not_authenticated")
	member = await members.find_by_email(email)
	if member is None:
		raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="not_a_member")
	return member


async def require_admin(member: Member = Depends(require_member)) -> Member:
	if member.is_admin:
		return member
	raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin_required")
