"""Session helpers: current member, dev login and logout."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from bookgroup.api.security_deps import require_member
from bookgroup.domain.members.schemas import CurrentMemberResponse, Member
from bookgroup.infra.auth import ACCESS_COOKIE, DEV_EMAIL_COOKIE
from bookgroup.settings import settings

router = APIRouter(prefix="/api/auth", tags=["auth"])

ACCESS_LOGOUT_PATH = "/cdn-cgi/access/logout"


def safe_redirect(target: Optional[str]) -> str:
	"""Only allow same-site relative paths."""
	if not target or not target.startswith("/") or target.startswith("//") or "\\" in target:
		return "/"
	return target


@router.get("/me", response_model=CurrentMemberResponse, response_model_exclude_none=True)
async def me_endpoint(member: Member = Depends(require_member)) -> CurrentMemberResponse:
	return CurrentMemberResponse(member=member)


@router.get("/login")
async def login_endpoint(redirect: Optional[str] = Query(default=None)) -> RedirectResponse:
	if not settings.dev_user_email:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="dev_login_disabled")
	response = RedirectResponse(safe_redirect(redirect), status_code=status.HTTP_302_FOUND)
	response.set_cookie(
		DEV_EMAIL_COOKIE,
		settings.dev_user_email,
		httponly=True,
		samesite="lax",
		secure=settings.is_prod(),
		path="/",
	)
	return response


@router.get("/logout")
async def logout_endpoint(request: Request) -> RedirectResponse:
	target = ACCESS_LOGOUT_PATH if request.cookies.get(ACCESS_COOKIE) else "/"
	response = RedirectResponse(target, status_code=status.HTTP_302_FOUND)
	response.delete_cookie(DEV_EMAIL_COOKIE, path="/")
	return response
