"""Persistence helpers for user accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from hive.domain.base import now_utc
from hive.domain.errors import Conflict
from hive.domain.identity.models import User
from hive.domain.repository import Repository
from hive.infra.documents import USERS, DuplicateDocument


class UsersRepository(Repository[User]):
	collection = USERS
	model = User

	async def get_by_email(self, email: str) -> Optional[User]:
		return await self.find_one({"email": email.strip().lower()})

	async def create(
		self,
		*,
		email: str,
		password_hash: str,
		first_name: str,
		last_name: str,
	) -> User:
		now = now_utc()
		fields: Dict[str, Any] = {
			"email": email.strip().lower(),
			"passwordHash": password_hash,
			"firstName": first_name,
			"lastName": last_name,
			"bio": "",
			"avatar": "",
			"goals": [],
			"interests": [],
			"expertise": [],
			"isMentor": True,
			"isSeekingMentor": False,
			"mentorInterests": [],
			"reputation": 0,
			"postsCount": 0,
			"repliesCount": 0,
			"milestonesCount": 0,
			"isActive": True,
			"isVerified": False,
			"lastSeen": now,
		}
		try:
			return await self.insert(fields)
		except DuplicateDocument as exc:
			raise Conflict("User already exists with this email") from exc

	async def touch_last_seen(self, user_id: str) -> Optional[User]:
		return await self.set_fields(user_id, {"lastSeen": now_utc()})

	async def set_password(self, user_id: str, password_hash: str) -> Optional[User]:
		return await self.set_fields(
			user_id,
			{"passwordHash": password_hash, "resetPasswordToken": None, "resetPasswordExpires": None},
		)

	async def set_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> Optional[User]:
		return await self.set_fields(
			user_id,
			{"resetPasswordToken": token_hash, "resetPasswordExpires": expires_at},
		)

	async def get_by_reset_token(self, token_hash: str) -> Optional[User]:
		return await self.find_one(
			{"resetPasswordToken": token_hash, "resetPasswordExpires": {"$gt": now_utc()}}
		)
