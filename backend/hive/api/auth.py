"""Authentication and account endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials

from hive.api._errors import to_http_error
from hive.api.responses import ok
from hive.domain.identity import schemas, service
from hive.infra.auth import AuthenticatedUser, bearer_scheme, bearer_token, get_current_user, require_moderator
from hive.infra.rate_limit import auth_limiter, upload_limiter

router = APIRouter(prefix="/auth", tags=["identity"])


@router.post("/register", status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth_limiter)])
async def register(payload: schemas.RegisterRequest) -> dict:
	try:
		return ok(await service.register(payload), "User registered successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/login", dependencies=[Depends(auth_limiter)])
async def login(payload: schemas.LoginRequest) -> dict:
	try:
		return ok(await service.login(payload), "Login successful")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/me")
async def me(auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		return ok({"user": await service.me(auth_user)})
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/profile")
async def update_profile(
	payload: schemas.ProfileUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
	try:
		return ok({"user": await service.update_profile(auth_user, payload)}, "Profile updated successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/avatar")
async def update_avatar(
	payload: schemas.AvatarUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	_limit: None = Depends(upload_limiter),
) -> dict:
	try:
		return ok(await service.update_avatar(auth_user, payload), "Avatar updated successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/change-password")
async def change_password(
	payload: schemas.ChangePasswordRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
	try:
		await service.change_password(auth_user, payload)
		return ok(message="Password changed successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/logout")
async def logout(auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		await service.logout(auth_user)
		return ok(message="Logged out successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/refresh-token")
async def refresh_token(
	payload: Optional[schemas.RefreshRequest] = None,
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
	token = (payload.refresh_token if payload else None) or bearer_token(credentials)
	try:
		return ok(await service.refresh(token), "Token refreshed")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/forgot-password", dependencies=[Depends(auth_limiter)])
async def forgot_password(payload: schemas.ForgotPasswordRequest) -> dict:
	try:
		data = await service.forgot_password(payload)
		return ok(data or None, "If the account exists, a reset link has been sent")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/reset-password/{token}", dependencies=[Depends(auth_limiter)])
async def reset_password(token: str, payload: schemas.ResetPasswordRequest) -> dict:
	try:
		await service.reset_password(token, payload)
		return ok(message="Password reset successful")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/revocations")
async def list_revocations(_: AuthenticatedUser = Depends(require_moderator)) -> dict:
	try:
		return ok(await service.list_revocations())
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/revocations/remove")
async def remove_revocation(
	payload: schemas.RevocationRemoveRequest,
	_: AuthenticatedUser = Depends(require_moderator),
) -> dict:
	try:
		removed = await service.remove_revocation(payload)
		return ok({"removed": removed}, "Token removed from revocation list")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.delete("/revocations")
async def clear_revocations(_: AuthenticatedUser = Depends(require_moderator)) -> dict:
	try:
		cleared = await service.clear_revocations()
		return ok({"cleared": cleared}, "Revocation list cleared")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
