"""Service layer orchestrating threads, posts and replies.

Parent counters (Thread.postsCount, Post.repliesCount and the author's
counters) are adjusted here, as follow-up writes after the child write
succeeds. Soft deletes are conditional on the entity still being active, so
a repeated delete finds nothing and never decrements twice.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from hive.domain.base import Document
from hive.domain.discussions import models, policies, reactions, schemas
from hive.domain.discussions.repo import PostsRepository, RepliesRepository, ThreadsRepository
from hive.domain.errors import NotFound, ValidationError
from hive.domain.identity.directory import text_match
from hive.domain.identity.repo import UsersRepository
from hive.domain.pagination import PageParams, page_payload
from hive.infra.auth import AuthenticatedUser
from hive.infra.documents import object_id
from hive.obs import metrics as obs_metrics

log = logging.getLogger(__name__)

THREAD_SORTS = {
	"lastActivity": [("lastActivity", -1)],
	"createdAt": [("createdAt", -1)],
	"postsCount": [("postsCount", -1)],
	"views": [("views", -1)],
}

_OLDEST_FIRST = [("createdAt", 1)]


def _visible_threads(user: Optional[AuthenticatedUser]) -> Dict[str, Any]:
	"""Private threads only list for their author and allow-list."""
	public = {"isPrivate": {"$ne": True}}
	if user is None:
		return public
	member = object_id(user.id)
	return {"$or": [public, {"author": member}, {"allowedUsers": member}]}


def _combine(*clauses: Dict[str, Any]) -> Dict[str, Any]:
	clauses = tuple(clause for clause in clauses if clause)
	if len(clauses) == 1:
		return clauses[0]
	return {"$and": list(clauses)}


class DiscussionsService:
	"""Implements the business rules for threads, posts and replies."""

	def __init__(
		self,
		threads: ThreadsRepository | None = None,
		posts: PostsRepository | None = None,
		replies: RepliesRepository | None = None,
		users: UsersRepository | None = None,
	) -> None:
		self.threads = threads or ThreadsRepository()
		self.posts = posts or PostsRepository()
		self.replies = replies or RepliesRepository()
		self.users = users or UsersRepository()

	# ------------------------------------------------------------------
	# Helpers

	async def _with_authors(self, entities: Iterable[Document]) -> List[Dict[str, Any]]:
		entities = list(entities)
		authors = await self.users.by_ids(entity.author for entity in entities)  # type: ignore[attr-defined]
		rendered: List[Dict[str, Any]] = []
		for entity in entities:
			body = entity.to_public()
			author = authors.get(body["author"])
			body["author"] = author.summary() if author else {"id": body["author"]}
			rendered.append(body)
		return rendered

	async def _render(self, entity: Document) -> Dict[str, Any]:
		return (await self._with_authors([entity]))[0]

	async def _thread(self, thread_id: str) -> models.Thread:
		return policies.require_thread(await self.threads.get(thread_id))

	async def _readable_thread(self, thread_id: str, user: Optional[AuthenticatedUser]) -> models.Thread:
		return policies.require_thread_access(await self._thread(thread_id), user)

	async def _post(self, post_id: str) -> models.Post:
		return policies.require_visible(await self.posts.get(post_id), "Post")

	async def _readable_post(self, post_id: str, user: Optional[AuthenticatedUser]) -> models.Post:
		post = await self._post(post_id)
		await self._readable_thread(post.thread, user)
		return post

	async def _reply(self, reply_id: str) -> models.Reply:
		return policies.require_visible(await self.replies.get(reply_id), "Reply")

	async def _readable_reply(self, reply_id: str, user: Optional[AuthenticatedUser]) -> models.Reply:
		reply = await self._reply(reply_id)
		await self._readable_post(reply.post, user)
		return reply

	async def _thread_page(self, filter: Dict[str, Any], params: PageParams, sort) -> Dict[str, Any]:
		threads, total = await self.threads.page(filter, params, sort=sort)
		return page_payload("threads", await self._with_authors(threads), params, total)

	# ------------------------------------------------------------------
	# Threads

	async def list_threads(
		self,
		user: Optional[AuthenticatedUser],
		params: PageParams,
		*,
		category: Optional[str] = None,
		type: Optional[str] = None,
		status: Optional[str] = None,
		search: Optional[str] = None,
		sort_by: str = "lastActivity",
	) -> Dict[str, Any]:
		filter: Dict[str, Any] = {"status": {"$ne": "deleted"}}
		if status and status != "deleted":
			filter["status"] = status
		if category:
			filter["category"] = category
		if type:
			filter["type"] = type
		search_clause = text_match(["title", "description", "tags"], search) if search and search.strip() else {}
		sort = THREAD_SORTS.get(sort_by, THREAD_SORTS["lastActivity"])
		return await self._thread_page(_combine(filter, _visible_threads(user), search_clause), params, sort)

	async def list_by_category(
		self,
		user: Optional[AuthenticatedUser],
		category: str,
		params: PageParams,
	) -> Dict[str, Any]:
		filter = {"category": category, "status": {"$ne": "deleted"}}
		return await self._thread_page(_combine(filter, _visible_threads(user)), params, THREAD_SORTS["lastActivity"])

	async def featured_threads(self, user: Optional[AuthenticatedUser], *, limit: int) -> Dict[str, Any]:
		filter = _combine({"isFeatured": True, "status": {"$ne": "deleted"}}, _visible_threads(user))
		threads = await self.threads.find(filter, sort=[("featuredAt", -1)], limit=limit)
		return {"threads": await self._with_authors(threads)}

	async def search_threads(
		self,
		user: Optional[AuthenticatedUser],
		params: PageParams,
		*,
		q: Optional[str] = None,
		category: Optional[str] = None,
		type: Optional[str] = None,
	) -> Dict[str, Any]:
		filter: Dict[str, Any] = {"status": {"$ne": "deleted"}}
		if category:
			filter["category"] = category
		if type:
			filter["type"] = type
		search_clause = text_match(["title", "description", "tags"], q) if q and q.strip() else {}
		return await self._thread_page(
			_combine(filter, _visible_threads(user), search_clause),
			params,
			[("createdAt", -1)],
		)

	async def get_thread(self, user: Optional[AuthenticatedUser], thread_id: str) -> Dict[str, Any]:
		thread = await self._readable_thread(thread_id, user)
		thread = await self.threads.add_view(thread.id) or thread
		return {"thread": await self._render(thread)}

	async def create_thread(self, user: AuthenticatedUser, payload: schemas.ThreadCreateRequest) -> Dict[str, Any]:
		fields = payload.model_dump(by_alias=True)
		thread = await self.threads.create(author_id=user.id, fields=fields)
		obs_metrics.inc_content_created("thread")
		log.info("thread_created", extra={"thread_id": thread.id, "category": thread.category})
		return {"thread": await self._render(thread)}

	async def update_thread(
		self,
		user: AuthenticatedUser,
		thread_id: str,
		payload: schemas.ThreadUpdateRequest,
	) -> Dict[str, Any]:
		thread = await self._thread(thread_id)
		policies.assert_can_edit_thread(thread, user, "update")
		changes = payload.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
		if "moderators" in changes:
			policies.assert_can_appoint_moderators(thread, user)
		if not changes:
			return {"thread": await self._render(thread)}
		updated = await self.threads.edit(thread.id, changes)
		if updated is None:
			raise NotFound("Thread not found")
		return {"thread": await self._render(updated)}

	async def delete_thread(self, user: AuthenticatedUser, thread_id: str) -> None:
		thread = await self._thread(thread_id)
		policies.assert_can_edit_thread(thread, user, "delete")
		if await self.threads.soft_delete(thread.id) is None:
			raise NotFound("Thread not found")

	async def feature_thread(self, thread_id: str, payload: schemas.FeatureRequest) -> Dict[str, Any]:
		thread = await self._thread(thread_id)
		updated = await self.threads.set_featured(thread.id, payload.featured)
		if updated is None:
			raise NotFound("Thread not found")
		return {"thread": await self._render(updated)}

	# ------------------------------------------------------------------
	# Posts

	async def list_posts(
		self,
		user: Optional[AuthenticatedUser],
		thread_id: str,
		params: PageParams,
	) -> Dict[str, Any]:
		thread = await self._readable_thread(thread_id, user)
		filter = {"thread": object_id(thread.id), "status": "active"}
		posts, total = await self.posts.page(filter, params, sort=_OLDEST_FIRST)
		return page_payload("posts", await self._with_authors(posts), params, total)

	async def get_post(self, user: Optional[AuthenticatedUser], post_id: str) -> Dict[str, Any]:
		post = await self._readable_post(post_id, user)
		post = await self.posts.add_view(post.id) or post
		return {"post": await self._render(post)}

	async def create_post(self, user: AuthenticatedUser, payload: schemas.PostCreateRequest) -> Dict[str, Any]:
		if object_id(payload.thread) is None:
			raise ValidationError.for_field("thread", "Invalid identifier")
		thread = await self._readable_thread(payload.thread, user)
		policies.assert_thread_open(thread)
		fields = payload.model_dump(by_alias=True, exclude={"thread"})
		post = await self.posts.create(author_id=user.id, thread_id=thread.id, fields=fields)
		await self.threads.record_post(thread.id)
		counters = {"postsCount": 1}
		if post.type == "milestone":
			counters["milestonesCount"] = 1
		await self.users.increment(user.id, counters)
		obs_metrics.inc_content_created("post")
		log.info("post_created", extra={"post_id": post.id, "thread_id": thread.id})
		return {"post": await self._render(post)}

	async def update_post(
		self,
		user: AuthenticatedUser,
		post_id: str,
		payload: schemas.PostUpdateRequest,
	) -> Dict[str, Any]:
		post = await self._readable_post(post_id, user)
		policies.assert_author(post, user, "update")
		changes = payload.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
		if not changes:
			return {"post": await self._render(post)}
		updated = await self.posts.edit(post.id, changes)
		if updated is None:
			raise NotFound("Post not found")
		return {"post": await self._render(updated)}

	async def delete_post(self, user: AuthenticatedUser, post_id: str) -> None:
		post = await self._post(post_id)
		policies.assert_author(post, user, "delete")
		if await self.posts.soft_delete(post.id) is None:
			raise NotFound("Post not found")
		await self.threads.increment(post.thread, {"postsCount": -1})
		counters = {"postsCount": -1}
		if post.type == "milestone":
			counters["milestonesCount"] = -1
		await self.users.increment(post.author, counters)

	async def react_to_post(self, user: AuthenticatedUser, post_id: str, reaction: reactions.Reaction) -> Dict[str, Any]:
		post = await self._readable_post(post_id, user)
		state = reactions.toggle(post.likes, post.dislikes, user.id, reaction)
		if await self.posts.set_reactions(post.id, state.likes, state.dislikes) is None:
			raise NotFound("Post not found")
		return state.payload(user.id)

	async def accept_answer(self, user: AuthenticatedUser, post_id: str) -> Dict[str, Any]:
		post = await self._post(post_id)
		thread = await self._thread(post.thread)
		policies.assert_can_accept(post, thread, user)
		accepted = await self.posts.accept(post.id)
		if accepted is None:
			raise NotFound("Answer post not found")
		return {"post": await self._render(accepted)}

	async def moderate_post(
		self,
		moderator: AuthenticatedUser,
		post_id: str,
		payload: schemas.ModerationRequest,
	) -> Dict[str, Any]:
		post = await self.posts.moderate(post_id, status=payload.status, reason=payload.reason, moderator_id=moderator.id)
		if post is None:
			raise NotFound("Post not found")
		log.info("post_moderated", extra={"post_id": post.id, "status": payload.status})
		return {"post": await self._render(post)}

	# ------------------------------------------------------------------
	# Replies

	async def list_replies(
		self,
		user: Optional[AuthenticatedUser],
		post_id: str,
		params: PageParams,
	) -> Dict[str, Any]:
		post = await self._readable_post(post_id, user)
		filter = {"post": object_id(post.id), "status": "active"}
		replies, total = await self.replies.page(filter, params, sort=_OLDEST_FIRST)
		return page_payload("replies", await self._with_authors(replies), params, total)

	async def get_reply(self, user: Optional[AuthenticatedUser], reply_id: str) -> Dict[str, Any]:
		reply = await self._readable_reply(reply_id, user)
		return {"reply": await self._render(reply)}

	async def create_reply(self, user: AuthenticatedUser, payload: schemas.ReplyCreateRequest) -> Dict[str, Any]:
		if object_id(payload.post) is None:
			raise ValidationError.for_field("post", "Invalid identifier")
		post = await self._readable_post(payload.post, user)
		if payload.parent_reply:
			parent = await self.replies.get(payload.parent_reply)
			if parent is None or not parent.is_visible or parent.post != post.id:
				raise ValidationError.for_field("parentReply", "Parent reply not found on this post")
		fields = payload.model_dump(by_alias=True, exclude={"post", "parent_reply"})
		reply = await self.replies.create(
			author_id=user.id,
			post_id=post.id,
			parent_id=payload.parent_reply,
			fields=fields,
		)
		await self.posts.increment(post.id, {"repliesCount": 1})
		await self.users.increment(user.id, {"repliesCount": 1})
		obs_metrics.inc_content_created("reply")
		return {"reply": await self._render(reply)}

	async def update_reply(
		self,
		user: AuthenticatedUser,
		reply_id: str,
		payload: schemas.ReplyUpdateRequest,
	) -> Dict[str, Any]:
		reply = await self._readable_reply(reply_id, user)
		policies.assert_author(reply, user, "update")
		updated = await self.replies.edit(reply.id, {"content": payload.content})
		if updated is None:
			raise NotFound("Reply not found")
		return {"reply": await self._render(updated)}

	async def delete_reply(self, user: AuthenticatedUser, reply_id: str) -> None:
		reply = await self._reply(reply_id)
		policies.assert_author(reply, user, "delete")
		if await self.replies.soft_delete(reply.id) is None:
			raise NotFound("Reply not found")
		await self.posts.increment(reply.post, {"repliesCount": -1})
		await self.users.increment(reply.author, {"repliesCount": -1})

	async def react_to_reply(self, user: AuthenticatedUser, reply_id: str, reaction: reactions.Reaction) -> Dict[str, Any]:
		reply = await self._readable_reply(reply_id, user)
		state = reactions.toggle(reply.likes, reply.dislikes, user.id, reaction)
		if await self.replies.set_reactions(reply.id, state.likes, state.dislikes) is None:
			raise NotFound("Reply not found")
		return state.payload(user.id)

	async def mark_helpful(self, user: AuthenticatedUser, reply_id: str, helpful: bool) -> Dict[str, Any]:
		reply = await self._readable_reply(reply_id, user)
		if helpful:
			updated = await self.replies.mark_helpful(reply.id, user.id)
		else:
			updated = await self.replies.unmark_helpful(reply.id, user.id)
		# Repeating the same vote changes nothing.
		current = updated or await self._reply(reply.id)
		return {"isHelpful": current.is_helpful, "helpfulCount": current.helpful_count}

	async def moderate_reply(
		self,
		moderator: AuthenticatedUser,
		reply_id: str,
		payload: schemas.ModerationRequest,
	) -> Dict[str, Any]:
		reply = await self.replies.moderate(reply_id, status=payload.status, reason=payload.reason, moderator_id=moderator.id)
		if reply is None:
			raise NotFound("Reply not found")
		log.info("reply_moderated", extra={"reply_id": reply.id, "status": payload.status})
		return {"reply": await self._render(reply)}

