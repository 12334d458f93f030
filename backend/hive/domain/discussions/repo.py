"""Persistence helpers for threads, posts and replies."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId

from hive.domain.base import now_utc
from hive.domain.discussions import models
from hive.domain.errors import ValidationError
from hive.domain.repository import Repository
from hive.infra.documents import POSTS, REPLIES, THREADS, object_id


def require_object_id(value: Any, field: str) -> ObjectId:
	oid = object_id(value)
	if oid is None:
		raise ValidationError.for_field(field, "Invalid identifier")
	return oid


def object_ids(values: Iterable[Any], field: str) -> List[ObjectId]:
	return [require_object_id(value, field) for value in values]


class _ContentRepository(Repository):
	async def soft_delete(self, entity_id: str) -> Optional[Any]:
		"""Flip an active entity to `deleted`; None when it was not active."""
		return await self.update(
			{"_id": object_id(entity_id), "status": "active"},
			{"$set": {"status": "deleted"}},
		)

	async def set_reactions(self, entity_id: str, likes: List[str], dislikes: List[str]) -> Optional[Any]:
		return await self.update(
			{"_id": object_id(entity_id), "status": "active"},
			{"$set": {"likes": object_ids(likes, "likes"), "dislikes": object_ids(dislikes, "dislikes")}},
		)

	async def moderate(self, entity_id: str, *, status: str, reason: Optional[str], moderator_id: str) -> Optional[Any]:
		return await self.update(
			{"_id": object_id(entity_id), "status": {"$ne": "deleted"}},
			{
				"$set": {
					"status": status,
					"isModerated": True,
					"moderationReason": reason,
					"moderatedBy": object_id(moderator_id),
					"moderatedAt": now_utc(),
				}
			},
		)

	async def add_view(self, entity_id: str) -> Optional[Any]:
		return await self.update({"_id": object_id(entity_id)}, {"$inc": {"views": 1}})


class ThreadsRepository(Repository[models.Thread]):
	collection = THREADS
	model = models.Thread

	async def create(self, *, author_id: str, fields: Dict[str, Any]) -> models.Thread:
		document = {
			**fields,
			"allowedUsers": object_ids(fields.get("allowedUsers", []), "allowedUsers"),
			"author": object_id(author_id),
			"status": "active",
			"views": 0,
			"postsCount": 0,
			"lastActivity": now_utc(),
			"moderators": [],
			"isFeatured": False,
			"featuredAt": None,
		}
		return await self.insert(document)

	async def edit(self, thread_id: str, changes: Dict[str, Any]) -> Optional[models.Thread]:
		if "allowedUsers" in changes:
			changes = {**changes, "allowedUsers": object_ids(changes["allowedUsers"], "allowedUsers")}
		if "moderators" in changes:
			changes = {**changes, "moderators": object_ids(changes["moderators"], "moderators")}
		return await self.update({"_id": object_id(thread_id), "status": {"$ne": "deleted"}}, {"$set": changes})

	async def soft_delete(self, thread_id: str) -> Optional[models.Thread]:
		return await self.update(
			{"_id": object_id(thread_id), "status": {"$ne": "deleted"}},
			{"$set": {"status": "deleted"}},
		)

	async def add_view(self, thread_id: str) -> Optional[models.Thread]:
		return await self.update({"_id": object_id(thread_id)}, {"$inc": {"views": 1}})

	async def record_post(self, thread_id: str) -> Optional[models.Thread]:
		return await self.update(
			{"_id": object_id(thread_id)},
			{"$inc": {"postsCount": 1}, "$set": {"lastActivity": now_utc()}},
		)

	async def set_featured(self, thread_id: str, featured: bool) -> Optional[models.Thread]:
		return await self.edit(thread_id, {"isFeatured": featured, "featuredAt": now_utc() if featured else None})


class PostsRepository(_ContentRepository, Repository[models.Post]):
	collection = POSTS
	model = models.Post

	async def create(self, *, author_id: str, thread_id: str, fields: Dict[str, Any]) -> models.Post:
		document = {
			**fields,
			"author": object_id(author_id),
			"thread": object_id(thread_id),
			"isAcceptedAnswer": False,
			"likes": [],
			"dislikes": [],
			"views": 0,
			"repliesCount": 0,
			"status": "active",
			"isModerated": False,
		}
		return await self.insert(document)

	async def edit(self, post_id: str, changes: Dict[str, Any]) -> Optional[models.Post]:
		return await self.update({"_id": object_id(post_id), "status": "active"}, {"$set": changes})

	async def accept(self, post_id: str) -> Optional[models.Post]:
		return await self.update(
			{"_id": object_id(post_id), "status": "active", "type": "answer"},
			{"$set": {"isAcceptedAnswer": True}},
		)


class RepliesRepository(_ContentRepository, Repository[models.Reply]):
	collection = REPLIES
	model = models.Reply

	async def create(
		self,
		*,
		author_id: str,
		post_id: str,
		parent_id: Optional[str],
		fields: Dict[str, Any],
	) -> models.Reply:
		document = {
			**fields,
			"author": object_id(author_id),
			"post": object_id(post_id),
			"parentReply": object_id(parent_id) if parent_id else None,
			"likes": [],
			"dislikes": [],
			"status": "active",
			"isModerated": False,
			"isHelpful": False,
			"helpfulCount": 0,
			"helpfulBy": [],
		}
		return await self.insert(document)

	async def edit(self, reply_id: str, changes: Dict[str, Any]) -> Optional[models.Reply]:
		return await self.update({"_id": object_id(reply_id), "status": "active"}, {"$set": changes})

	async def mark_helpful(self, reply_id: str, user_id: str) -> Optional[models.Reply]:
		"""Count the user once; None when the user had already marked the reply."""
		voter = object_id(user_id)
		return await self.update(
			{"_id": object_id(reply_id), "status": "active", "helpfulBy": {"$ne": voter}},
			{"$addToSet": {"helpfulBy": voter}, "$inc": {"helpfulCount": 1}, "$set": {"isHelpful": True}},
		)

	async def unmark_helpful(self, reply_id: str, user_id: str) -> Optional[models.Reply]:
		voter = object_id(user_id)
		updated = await self.update(
			{"_id": object_id(reply_id), "status": "active", "helpfulBy": voter, "helpfulCount": {"$gte": 1}},
			{"$pull": {"helpfulBy": voter}, "$inc": {"helpfulCount": -1}},
		)
		if updated is not None and updated.helpful_count == 0 and updated.is_helpful:
			updated = await self.set_fields(reply_id, {"isHelpful": False})
		return updated
