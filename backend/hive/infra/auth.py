"""Authentication helpers for FastAPI endpoints.

`get_current_user` is the required gate: a missing bearer token, a revoked
token, a token that fails verification, an unknown user or a deactivated
account each end the request with a distinct 401. `get_optional_user` runs
the same pipeline but resolves to None instead of rejecting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.errors import PyMongoError

from hive.domain.errors import (
	AccountDeactivated,
	Forbidden,
	Unauthenticated,
	UserNotFound,
	TokenRevoked,
)
from hive.domain.identity.models import User
from hive.domain.identity.repo import UsersRepository
from hive.infra import jwt as token_codec
from hive.infra.revocation import get_registry
from hive.obs import logging as obs_logging
from hive.obs import metrics as obs_metrics
from hive.settings import settings

log = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	email: str
	reputation: int
	token: str
	profile: User

	@property
	def is_moderator(self) -> bool:
		# Reputation stands in for a role system.
		return self.reputation >= settings.moderator_reputation_threshold


bearer_scheme = HTTPBearer(auto_error=False)
_users = UsersRepository()


def bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
	if credentials and credentials.scheme.lower() == "bearer" and credentials.credentials:
		return credentials.credentials.strip() or None
	return None


async def authenticate(token: Optional[str]) -> AuthenticatedUser:
	"""Resolve `token` to an active user or raise the matching Unauthenticated error."""
	if not token:
		raise Unauthenticated()
	if await get_registry().is_revoked(token):
		raise TokenRevoked()
	user_id = token_codec.verify(token)
	user = await _users.get(user_id)
	if user is None:
		raise UserNotFound()
	if not user.is_active:
		raise AccountDeactivated()
	await _users.touch_last_seen(user.id)
	return AuthenticatedUser(
		id=user.id,
		email=user.email,
		reputation=user.reputation,
		token=token,
		profile=user,
	)


def _attach(request: Request, user: AuthenticatedUser) -> None:
	request.state.user = user
	obs_logging.bind_user(user.id)


async def get_current_user(
	request: Request,
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
	try:
		user = await authenticate(bearer_token(credentials))
	except Unauthenticated as exc:
		obs_metrics.inc_auth_failure(exc.code)
		raise
	_attach(request, user)
	return user


async def get_optional_user(
	request: Request,
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AuthenticatedUser]:
	token = bearer_token(credentials)
	if token is None:
		return None
	try:
		user = await authenticate(token)
	except Unauthenticated as exc:
		log.info("optional_auth_ignored", extra={"reason": exc.code})
		return None
	except PyMongoError:
		log.warning("optional_auth_store_unavailable", exc_info=True)
		return None
	_attach(request, user)
	return user


def same_id(left: Any, right: Any) -> bool:
	return left is not None and right is not None and str(left) == str(right)


def ensure_owner(author_id: Any, user: AuthenticatedUser, *, action: str = "perform this action") -> None:
	if not same_id(author_id, user.id):
		raise Forbidden(f"Not authorized to {action}")


def ensure_moderator(user: AuthenticatedUser) -> None:
	if not user.is_moderator:
		raise Forbidden("Insufficient permissions")


async def require_moderator(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
	ensure_moderator(user)
	return user
