"""Request bodies for discussion endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, Field

from hive.domain.base import CamelModel, CleanStr
from hive.domain.discussions.models import MilestoneCategory, PostType, ReplyType, ThreadCategory, ThreadType

Tag = Annotated[CleanStr, Field(min_length=1, max_length=20), AfterValidator(str.lower)]
Tags = Annotated[List[Tag], Field(max_length=10)]
Title = Annotated[CleanStr, Field(min_length=5, max_length=200)]
Description = Annotated[CleanStr, Field(min_length=10, max_length=1000)]
PostContent = Annotated[CleanStr, Field(min_length=1, max_length=10000)]
ReplyContent = Annotated[CleanStr, Field(min_length=1, max_length=5000)]
ShortText = Annotated[CleanStr, Field(min_length=1, max_length=100)]

EditableThreadStatus = Literal["active", "closed", "pinned", "archived"]
ModerationStatus = Literal["active", "hidden", "flagged"]


class ThreadCreateRequest(CamelModel):
	title: Title
	description: Description
	category: ThreadCategory
	type: ThreadType = "discussion"
	tags: Tags = Field(default_factory=list)
	is_private: bool = False
	allowed_users: List[str] = Field(default_factory=list)


class ThreadUpdateRequest(CamelModel):
	title: Optional[Title] = None
	description: Optional[Description] = None
	category: Optional[ThreadCategory] = None
	tags: Optional[Tags] = None
	status: Optional[EditableThreadStatus] = None
	is_private: Optional[bool] = None
	allowed_users: Optional[List[str]] = None
	moderators: Optional[List[str]] = None


class FeatureRequest(CamelModel):
	featured: bool = True


class MilestoneIn(CamelModel):
	title: Optional[ShortText] = None
	description: Optional[Annotated[CleanStr, Field(max_length=1000)]] = None
	category: Optional[MilestoneCategory] = None
	date: Optional[datetime] = None
	is_public: bool = True


class MentorshipRequestIn(CamelModel):
	topic: Optional[ShortText] = None
	description: Optional[Annotated[CleanStr, Field(max_length=1000)]] = None
	preferred_mentor_type: Optional[ShortText] = None
	timeline: Optional[ShortText] = None
	is_open: bool = True


class PostCreateRequest(CamelModel):
	thread: str
	content: PostContent
	type: PostType = "discussion"
	milestone: Optional[MilestoneIn] = None
	mentorship_request: Optional[MentorshipRequestIn] = None
	tags: Tags = Field(default_factory=list)


class PostUpdateRequest(CamelModel):
	content: Optional[PostContent] = None
	milestone: Optional[MilestoneIn] = None
	mentorship_request: Optional[MentorshipRequestIn] = None
	tags: Optional[Tags] = None


class ModerationRequest(CamelModel):
	status: ModerationStatus
	reason: Optional[Annotated[CleanStr, Field(max_length=500)]] = None


class ReplyCreateRequest(CamelModel):
	post: str
	content: ReplyContent
	parent_reply: Optional[str] = None
	type: ReplyType = "reply"


class ReplyUpdateRequest(CamelModel):
	content: ReplyContent
