"""Member directory routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from hive.api._errors import to_http_error
from hive.api.responses import ok, page_params
from hive.domain.identity import schemas
from hive.domain.identity.directory import DirectoryService
from hive.domain.pagination import PageParams
from hive.infra.auth import AuthenticatedUser, get_current_user, get_optional_user
from hive.infra.rate_limit import search_limiter

router = APIRouter(prefix="/users", tags=["users"])
_service = DirectoryService()


@router.get("")
async def list_users(
	params: PageParams = Depends(page_params),
	search: Optional[str] = Query(default=None),
	is_mentor: Optional[bool] = Query(default=None, alias="isMentor"),
	is_seeking_mentor: Optional[bool] = Query(default=None, alias="isSeekingMentor"),
	expertise: Optional[str] = Query(default=None),
	_viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
	try:
		return ok(
			await _service.list_users(
				params,
				search=search,
				is_mentor=is_mentor,
				is_seeking_mentor=is_seeking_mentor,
				expertise=expertise,
			)
		)
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/search", dependencies=[Depends(search_limiter)])
async def search_users(
	params: PageParams = Depends(page_params),
	q: Optional[str] = Query(default=None),
	expertise: Optional[str] = Query(default=None),
	goals: Optional[str] = Query(default=None),
	interests: Optional[str] = Query(default=None),
) -> dict:
	try:
		return ok(await _service.search_users(params, q=q, expertise=expertise, goals=goals, interests=interests))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/mentors")
async def list_mentors(
	params: PageParams = Depends(page_params),
	expertise: Optional[str] = Query(default=None),
	interests: Optional[str] = Query(default=None),
) -> dict:
	try:
		return ok(await _service.mentors(params, expertise=expertise, interests=interests))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/mentees")
async def list_mentees(
	params: PageParams = Depends(page_params),
	goals: Optional[str] = Query(default=None),
	interests: Optional[str] = Query(default=None),
) -> dict:
	try:
		return ok(await _service.mentees(params, goals=goals, interests=interests))
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/{user_id}")
async def get_user(user_id: str) -> dict:
	try:
		return ok({"user": await _service.get_user(user_id)})
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.get("/{user_id}/stats")
async def get_user_stats(user_id: str) -> dict:
	try:
		return ok({"stats": await _service.stats(user_id)})
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc


@router.put("/{user_id}/reputation")
async def update_reputation(
	user_id: str,
	payload: schemas.ReputationRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
	try:
		return ok(await _service.update_reputation(auth_user, user_id, payload), "Reputation updated successfully")
	except Exception as exc:  # pragma: no cover
		raise to_http_error(exc) from exc
