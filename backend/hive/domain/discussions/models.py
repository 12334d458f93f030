"""Domain models for threads, posts and replies."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import Field

from hive.domain.base import CamelModel, Document, ObjectIdStr

ThreadCategory = Literal[
	"general",
	"technology",
	"career",
	"education",
	"health",
	"finance",
	"relationships",
	"hobbies",
	"mentorship",
	"milestones",
	"qa",
	"other",
]
THREAD_CATEGORIES = get_args(ThreadCategory)
ThreadType = Literal["discussion", "qa", "milestone", "mentorship"]
ThreadStatus = Literal["active", "closed", "pinned", "archived", "deleted"]
PostType = Literal["discussion", "question", "answer", "milestone", "mentorship"]
ReplyType = Literal["reply", "answer", "comment"]
MilestoneCategory = Literal["career", "education", "health", "personal", "financial", "other"]
# Soft delete is the `deleted` state; only `active` content is visible.
ContentStatus = Literal["active", "hidden", "deleted", "flagged"]

# Threads in these states accept no new posts.
CLOSED_THREAD_STATUSES = frozenset({"closed", "archived"})


class Milestone(CamelModel):
	title: Optional[str] = None
	description: Optional[str] = None
	category: Optional[MilestoneCategory] = None
	date: Optional[datetime] = None
	is_public: bool = True


class MentorshipRequest(CamelModel):
	topic: Optional[str] = None
	description: Optional[str] = None
	preferred_mentor_type: Optional[str] = None
	timeline: Optional[str] = None
	is_open: bool = True


class Thread(Document):
	title: str
	description: str
	category: str = "general"
	type: str = "discussion"
	tags: List[str] = Field(default_factory=list)
	author: ObjectIdStr
	status: str = "active"
	views: int = 0
	posts_count: int = 0
	last_activity: Optional[datetime] = None
	moderators: List[ObjectIdStr] = Field(default_factory=list)
	is_private: bool = False
	allowed_users: List[ObjectIdStr] = Field(default_factory=list)
	is_featured: bool = False
	featured_at: Optional[datetime] = None

	def can_access(self, user_id: Optional[str]) -> bool:
		if not self.is_private:
			return True
		if user_id is None:
			return False
		return user_id == self.author or user_id in self.allowed_users

	def can_edit(self, user_id: str) -> bool:
		return user_id == self.author or user_id in self.moderators


class _Engageable(Document):
	likes: List[ObjectIdStr] = Field(default_factory=list)
	dislikes: List[ObjectIdStr] = Field(default_factory=list)
	status: str = "active"
	is_moderated: bool = False
	moderation_reason: Optional[str] = None
	moderated_by: Optional[ObjectIdStr] = None
	moderated_at: Optional[datetime] = None

	@property
	def is_visible(self) -> bool:
		return self.status == "active"

	def to_public(self) -> Dict[str, Any]:
		body = super().to_public()
		body["likeCount"] = len(self.likes)
		body["dislikeCount"] = len(self.dislikes)
		body["score"] = len(self.likes) - len(self.dislikes)
		return body


class Post(_Engageable):
	content: str
	author: ObjectIdStr
	thread: ObjectIdStr
	type: str = "discussion"
	is_accepted_answer: bool = False
	milestone: Optional[Milestone] = None
	mentorship_request: Optional[MentorshipRequest] = None
	views: int = 0
	replies_count: int = 0
	tags: List[str] = Field(default_factory=list)


class Reply(_Engageable):
	content: str
	author: ObjectIdStr
	post: ObjectIdStr
	parent_reply: Optional[ObjectIdStr] = None
	type: str = "reply"
	is_helpful: bool = False
	helpful_count: int = 0
	helpful_by: List[ObjectIdStr] = Field(default_factory=list)
