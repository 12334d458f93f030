"""Public member directory: listings, search, mentors and reputation."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from hive.domain.base import now_utc
from hive.domain.errors import Forbidden, NotFound
from hive.domain.identity import schemas
from hive.domain.identity.models import User
from hive.domain.identity.repo import UsersRepository
from hive.domain.pagination import PageParams, page_payload
from hive.infra.auth import AuthenticatedUser, same_id
from hive.infra.documents import object_id

REPUTATION_POINTS = {
	"upvote": 1,
	"downvote": -1,
	"milestone": 5,
	"helpful": 3,
}

_BY_REPUTATION = [("reputation", -1), ("createdAt", -1)]


def text_match(fields: List[str], term: str) -> Dict[str, Any]:
	"""Case-insensitive substring match of `term` across `fields`."""
	pattern = re.escape(term.strip())
	return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}


def _contains(filter: Dict[str, Any], field: str, value: Optional[str]) -> None:
	if value:
		filter[field] = {"$in": [value]}


class DirectoryService:
	def __init__(self, repository: UsersRepository | None = None) -> None:
		self.repo = repository or UsersRepository()

	async def _page(self, key: str, filter: Dict[str, Any], params: PageParams, sort) -> Dict[str, Any]:
		users, total = await self.repo.page(filter, params, sort=sort)
		return page_payload(key, [user.to_public() for user in users], params, total)

	async def list_users(
		self,
		params: PageParams,
		*,
		search: Optional[str] = None,
		is_mentor: Optional[bool] = None,
		is_seeking_mentor: Optional[bool] = None,
		expertise: Optional[str] = None,
	) -> Dict[str, Any]:
		filter: Dict[str, Any] = {"isActive": True}
		if search and search.strip():
			filter.update(text_match(["firstName", "lastName", "bio"], search))
		if is_mentor:
			filter["isMentor"] = True
		if is_seeking_mentor:
			filter["isSeekingMentor"] = True
		_contains(filter, "expertise", expertise)
		return await self._page("users", filter, params, _BY_REPUTATION)

	async def search_users(
		self,
		params: PageParams,
		*,
		q: Optional[str] = None,
		expertise: Optional[str] = None,
		goals: Optional[str] = None,
		interests: Optional[str] = None,
	) -> Dict[str, Any]:
		filter: Dict[str, Any] = {"isActive": True}
		if q and q.strip():
			filter.update(text_match(["firstName", "lastName", "bio"], q))
		_contains(filter, "expertise", expertise)
		_contains(filter, "goals", goals)
		_contains(filter, "interests", interests)
		return await self._page("users", filter, params, [("reputation", -1)])

	async def mentors(
		self,
		params: PageParams,
		*,
		expertise: Optional[str] = None,
		interests: Optional[str] = None,
	) -> Dict[str, Any]:
		filter: Dict[str, Any] = {"isActive": True, "isMentor": True}
		_contains(filter, "expertise", expertise)
		_contains(filter, "mentorInterests", interests)
		return await self._page("mentors", filter, params, _BY_REPUTATION)

	async def mentees(
		self,
		params: PageParams,
		*,
		goals: Optional[str] = None,
		interests: Optional[str] = None,
	) -> Dict[str, Any]:
		filter: Dict[str, Any] = {"isActive": True, "isSeekingMentor": True}
		_contains(filter, "goals", goals)
		_contains(filter, "interests", interests)
		return await self._page("mentees", filter, params, [("createdAt", -1)])

	async def _require_active(self, user_id: str) -> User:
		user = await self.repo.get(user_id)
		if user is None or not user.is_active:
			raise NotFound("User not found")
		return user

	async def get_user(self, user_id: str) -> Dict[str, Any]:
		user = await self._require_active(user_id)
		return user.to_public()

	async def stats(self, user_id: str) -> Dict[str, Any]:
		user = await self._require_active(user_id)
		joined = user.created_at or now_utc()
		days = max(0, (now_utc() - joined).days)
		average = round(user.reputation / days, 2) if days > 0 else 0
		return {
			"postsCount": user.posts_count,
			"repliesCount": user.replies_count,
			"milestonesCount": user.milestones_count,
			"reputation": user.reputation,
			"daysSinceJoined": days,
			"avgReputationPerDay": average,
		}

	async def update_reputation(
		self,
		auth_user: AuthenticatedUser,
		user_id: str,
		payload: schemas.ReputationRequest,
	) -> Dict[str, Any]:
		if same_id(auth_user.id, user_id):
			raise Forbidden("You cannot change your own reputation")
		await self._require_active(user_id)
		updated = await self.repo.update(
			{"_id": object_id(user_id)},
			{"$inc": {"reputation": REPUTATION_POINTS[payload.action]}},
		)
		if updated is None:
			raise NotFound("User not found")
		return {"reputation": updated.reputation}
