"""Account flows: registration, login, profile, passwords and logout."""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from hive.domain.base import now_utc
from hive.domain.errors import (
	AccountDeactivated,
	Unauthenticated,
	UserNotFound,
	TokenRevoked,
	ValidationError,
)
from hive.domain.identity import schemas
from hive.domain.identity.models import User
from hive.domain.identity.repo import UsersRepository
from hive.infra import jwt as token_codec
from hive.infra.auth import AuthenticatedUser
from hive.infra.password import check_needs_rehash, hash_password, verify_password
from hive.infra.revocation import get_registry
from hive.settings import settings

log = logging.getLogger(__name__)

_users = UsersRepository()


class InvalidCredentials(Unauthenticated):
	code = "invalid_credentials"
	message = "Invalid credentials"


def _hash_reset_token(token: str) -> str:
	return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _session_body(user: User, token: str, *, include_last_seen: bool = False) -> Dict[str, Any]:
	public = user.to_public()
	fields = ["id", "email", "firstName", "lastName", "createdAt"]
	if include_last_seen:
		fields.insert(4, "lastSeen")
	return {"user": {key: public.get(key) for key in fields}, "token": token}


async def register(payload: schemas.RegisterRequest) -> Dict[str, Any]:
	user = await _users.create(
		email=str(payload.email),
		password_hash=hash_password(payload.password),
		first_name=payload.first_name,
		last_name=payload.last_name,
	)
	log.info("user_registered", extra={"user_id": user.id})
	return _session_body(user, token_codec.issue(user.id))


async def login(payload: schemas.LoginRequest) -> Dict[str, Any]:
	user = await _users.get_by_email(str(payload.email))
	if user is None:
		raise InvalidCredentials()
	if not user.is_active:
		raise AccountDeactivated()
	if not user.password_hash or not verify_password(user.password_hash, payload.password):
		raise InvalidCredentials()
	if check_needs_rehash(user.password_hash):
		await _users.set_fields(user.id, {"passwordHash": hash_password(payload.password)})
	user = await _users.touch_last_seen(user.id) or user
	return _session_body(user, token_codec.issue(user.id), include_last_seen=True)


async def me(auth_user: AuthenticatedUser) -> Dict[str, Any]:
	user = await _users.get(auth_user.id)
	if user is None:
		raise UserNotFound()
	return user.to_public()


async def update_profile(auth_user: AuthenticatedUser, payload: schemas.ProfileUpdateRequest) -> Dict[str, Any]:
	changes = payload.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
	user = await _users.set_fields(auth_user.id, changes) if changes else await _users.get(auth_user.id)
	if user is None:
		raise UserNotFound()
	return user.to_public()


async def update_avatar(auth_user: AuthenticatedUser, payload: schemas.AvatarUpdateRequest) -> Dict[str, Any]:
	user = await _users.set_fields(auth_user.id, {"avatar": payload.avatar})
	if user is None:
		raise UserNotFound()
	return {"avatar": user.avatar}


async def change_password(auth_user: AuthenticatedUser, payload: schemas.ChangePasswordRequest) -> None:
	user = await _users.get(auth_user.id)
	if user is None:
		raise UserNotFound()
	if not verify_password(user.password_hash, payload.current_password):
		raise ValidationError("Current password is incorrect", code="invalid_password")
	await _users.set_password(user.id, hash_password(payload.new_password))


async def logout(auth_user: AuthenticatedUser) -> None:
	await get_registry().revoke(auth_user.token)
	await _users.touch_last_seen(auth_user.id)


async def refresh(token: Optional[str]) -> Dict[str, Any]:
	"""Exchange a live token for a fresh one and revoke the old token."""
	if not token:
		raise ValidationError.for_field("refreshToken", "Refresh token required")
	registry = get_registry()
	if await registry.is_revoked(token):
		raise TokenRevoked()
	user = await _users.get(token_codec.verify(token))
	if user is None:
		raise UserNotFound()
	if not user.is_active:
		raise AccountDeactivated()
	fresh = token_codec.issue(user.id)
	await registry.revoke(token)
	return {"token": fresh}


async def forgot_password(payload: schemas.ForgotPasswordRequest) -> Dict[str, Any]:
	"""Store a single-use reset token; the answer never reveals whether the email exists."""
	body: Dict[str, Any] = {}
	user = await _users.get_by_email(str(payload.email))
	if user is None or not user.is_active:
		log.info("password_reset_unknown_email")
		return body
	raw = secrets.token_urlsafe(32)
	expires_at = now_utc() + timedelta(seconds=settings.password_reset_ttl_seconds)
	await _users.set_reset_token(user.id, _hash_reset_token(raw), expires_at)
	log.info("password_reset_issued", extra={"user_id": user.id})
	# No mail delivery; local tooling reads the token from the response.
	if settings.is_dev():
		body["resetToken"] = raw
	return body


async def reset_password(token: str, payload: schemas.ResetPasswordRequest) -> None:
	user = await _users.get_by_reset_token(_hash_reset_token(token))
	if user is None:
		raise ValidationError("Invalid or expired reset token", code="invalid_reset_token")
	await _users.set_password(user.id, hash_password(payload.new_password))
	log.info("password_reset_completed", extra={"user_id": user.id})


async def list_revocations() -> Dict[str, Any]:
	registry = get_registry()
	return {"tokens": await registry.list_all(), "size": await registry.size()}


async def remove_revocation(payload: schemas.RevocationRemoveRequest) -> bool:
	return await get_registry().unrevoke(payload.token)


async def clear_revocations() -> bool:
	return await get_registry().clear()
