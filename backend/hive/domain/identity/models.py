"""Domain models for accounts and community profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import Field

from hive.domain.base import Document

# Fields exposed when a user is embedded as the author of content.
SUMMARY_FIELDS = ("id", "firstName", "lastName", "avatar", "reputation")


class User(Document):
	email: str
	password_hash: str = ""
	first_name: str
	last_name: str
	bio: str = ""
	avatar: str = ""
	goals: List[str] = Field(default_factory=list)
	interests: List[str] = Field(default_factory=list)
	expertise: List[str] = Field(default_factory=list)
	is_mentor: bool = True
	is_seeking_mentor: bool = False
	mentor_interests: List[str] = Field(default_factory=list)
	reputation: int = 0
	posts_count: int = 0
	replies_count: int = 0
	milestones_count: int = 0
	is_active: bool = True
	is_verified: bool = False
	last_seen: Optional[datetime] = None
	reset_password_token: Optional[str] = None
	reset_password_expires: Optional[datetime] = None

	PRIVATE_FIELDS: ClassVar[frozenset[str]] = frozenset(
		{"password_hash", "reset_password_token", "reset_password_expires"}
	)

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}"

	def summary(self) -> Dict[str, Any]:
		public = self.to_public()
		return {key: public.get(key) for key in SUMMARY_FIELDS}
