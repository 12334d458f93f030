"""Thread routes. Static paths are declared before `/{thread_id}`."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from hive.api._errors import to_http_error
from hive.api.responses import ok, page_params
from hive.domain.discussions import schemas
from hive.domain.discussions.models import ThreadCategory, ThreadStatus, ThreadType
from hive.domain.discussions.services import DiscussionsService
from hive.domain.pagination import PageParams
from hive.infra.auth import AuthenticatedUser, get_current_user, get_optional_user, require_moderator
from hive.infra.rate_limit import content_limiter, search_limiter

router = APIRouter(prefix="/threads", tags=["threads"])
_service = DiscussionsService()

ThreadSort = Literal["lastActivity", "createdAt", "postsCount", "views"]


@router.get("")
async def list_threads(
	params: PageParams = Depends(page_params),
	category: Optional[ThreadCategory] = Query(default=None),
	type: Optional[ThreadType] = Query(default=None),
	thread_status: Optional[ThreadStatus] = Query(default=None, alias="status"),
	search: Optional[str] = Query(default=None),
	sort_by: ThreadSort = Query(default="lastActivity", alias="sortBy"),
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		data = await _service.list_threads(
			viewer,
			params,
			category=category,
			type=type,
			status=thread_status,
			search=search,
			sort_by=sort_by,
		)
		return ok(data)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/featured")
async def featured_threads(
	limit: int = Query(default=5, ge=1, le=50),
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(await _service.featured_threads(viewer, limit=limit))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/search", dependencies=[Depends(search_limiter)])
async def search_threads(
	params: PageParams = Depends(page_params),
	q: Optional[str] = Query(default=None),
	category: Optional[ThreadCategory] = Query(default=None),
	type: Optional[ThreadType] = Query(default=None),
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(await _service.search_threads(viewer, params, q=q, category=category, type=type))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/category/{category}")
async def threads_by_category(
	category: ThreadCategory,
	params: PageParams = Depends(page_params),
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(await _service.list_by_category(viewer, category, params))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/{thread_id}")
async def get_thread(
	thread_id: str,
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(await _service.get_thread(viewer, thread_id))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_thread(
	payload: schemas.ThreadCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	_limit: None = Depends(content_limiter),
) -> dict:
	try:
		return ok(await _service.create_thread(auth_user, payload), "Thread created successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/{thread_id}")
async def update_thread(
	thread_id: str,
	payload: schemas.ThreadUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
	try:
		return ok(await _service.update_thread(auth_user, thread_id, payload), "Thread updated successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.delete("/{thread_id}")
async def delete_thread(
	thread_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
	try:
		await _service.delete_thread(auth_user, thread_id)
		return ok(message="Thread deleted successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.post("/{thread_id}/feature")
async def feature_thread(
	thread_id: str,
	payload: Optional[schemas.FeatureRequest] = None,
	_: AuthenticatedUser = Depends(require_moderator),
) -> dict:
	try:
		data = await _service.feature_thread(thread_id, payload or schemas.FeatureRequest())
		return ok(data, "Thread feature status updated")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
