"""Reply routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from hive.api._errors import to_http_error
from hive.api.responses import ok, page_params
from hive.domain.discussions import schemas
from hive.domain.discussions.services import DiscussionsService
from hive.domain.pagination import PageParams
from hive.infra.auth import AuthenticatedUser, get_current_user, get_optional_user, require_moderator
from hive.infra.rate_limit import content_limiter

router = APIRouter(prefix="/replies", tags=["replies"])
_service = DiscussionsService()


@router.get("/post/{post_id}")
async def list_replies(
	post_id: str,
	params: PageParams = Depends(page_params),
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(await _service.list_replies(viewer, post_id, params))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/{reply_id}")
async def get_reply(
	reply_id: str,
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(await _service.get_reply(viewer, reply_id))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_reply(
	payload: schemas.ReplyCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	_limit: None = Depends(content_limiter),
) -> dict:
	try:
		return ok(await _service.create_reply(auth_user, payload), "Reply created successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/{reply_id}")
async def update_reply(
	reply_id: str,
	payload: schemas.ReplyUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
	try:
		return ok(await _service.update_reply(auth_user, reply_id, payload), "Reply updated successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.delete("/{reply_id}")
async def delete_reply(reply_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		await _service.delete_reply(auth_user, reply_id)
		return ok(message="Reply deleted successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{reply_id}/like")
async def like_reply(reply_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		return ok(await _service.react_to_reply(auth_user, reply_id, "like"), "Like toggled")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{reply_id}/dislike")
async def dislike_reply(reply_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		return ok(await _service.react_to_reply(auth_user, reply_id, "dislike"), "Dislike toggled")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{reply_id}/helpful")
async def mark_helpful(reply_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		return ok(await _service.mark_helpful(auth_user, reply_id, True), "Reply marked as helpful")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{reply_id}/unhelpful")
async def unmark_helpful(reply_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		return ok(await _service.mark_helpful(auth_user, reply_id, False), "Reply unmarked as helpful")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{reply_id}/moderate")
async def moderate_reply(
	reply_id: str,
	payload: schemas.ModerationRequest,
	moderator: AuthenticatedUser = Depends(require_moderator),
) -> dict:
	try:
		return ok(await _service.moderate_reply(moderator, reply_id, payload), "Reply moderated")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
