"""Post routes."""

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

router = APIRouter(prefix="/posts", tags=["posts"])
_service = DiscussionsService()


@router.get("/thread/{thread_id}")
async def list_posts(
	thread_id: str,
	params: PageParams = Depends(page_params),
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(await _service.list_posts(viewer, thread_id, params))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/{post_id}")
async def get_post(
	post_id: str,
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(await _service.get_post(viewer, post_id))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
	payload: schemas.PostCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	_limit: None = Depends(content_limiter),
) -> dict:
	try:
		return ok(await _service.create_post(auth_user, payload), "Post created successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/{post_id}")
async def update_post(
	post_id: str,
	payload: schemas.PostUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
	try:
		return ok(await _service.update_post(auth_user, post_id, payload), "Post updated successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.delete("/{post_id}")
async def delete_post(post_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		await _service.delete_post(auth_user, post_id)
		return ok(message="Post deleted successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{post_id}/like")
async def like_post(post_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		return ok(await _service.react_to_post(auth_user, post_id, "like"), "Like toggled")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{post_id}/dislike")
async def dislike_post(post_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		return ok(await _service.react_to_post(auth_user, post_id, "dislike"), "Dislike toggled")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{post_id}/accept")
async def accept_answer(post_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
	try:
		return ok(await _service.accept_answer(auth_user, post_id), "Answer accepted")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{post_id}/moderate")
async def moderate_post(
	post_id: str,
	payload: schemas.ModerationRequest,
	moderator: AuthenticatedUser = Depends(require_moderator),
) -> dict:
	try:
		return ok(await _service.moderate_post(moderator, post_id, payload), "Post moderated")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
