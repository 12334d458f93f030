"""Authorization and visibility policies for discussions."""

from __future__ import annotations

from typing import Optional, TypeVar

from hive.domain.discussions import models
from hive.domain.errors import Forbidden, NotFound
from hive.infra.auth import AuthenticatedUser, ensure_owner

EntityT = TypeVar("EntityT", models.Post, models.Reply)


def require_thread(thread: Optional[models.Thread]) -> models.Thread:
	if thread is None or thread.status == "deleted":
		raise NotFound("Thread not found")
	return thread


def require_thread_access(thread: models.Thread, user: Optional[AuthenticatedUser]) -> models.Thread:
	if not thread.can_access(user.id if user else None):
		raise Forbidden("Access denied to private thread")
	return thread


def require_visible(entity: Optional[EntityT], label: str) -> EntityT:
	"""Soft-deleted, hidden and flagged content reads as absent."""
	if entity is None or not entity.is_visible:
		raise NotFound(f"{label} not found")
	return entity


def assert_can_edit_thread(thread: models.Thread, user: AuthenticatedUser, action: str) -> None:
	if not thread.can_edit(user.id):
		raise Forbidden(f"Not authorized to {action} this thread")


def assert_can_appoint_moderators(thread: models.Thread, user: AuthenticatedUser) -> None:
	"""Only the thread author manages its moderators."""
	ensure_owner(thread.author, user, action="change moderators of this thread")


def assert_thread_open(thread: models.Thread) -> None:
	if thread.status in models.CLOSED_THREAD_STATUSES:
		raise Forbidden("Thread is closed to new posts")


def assert_author(entity: EntityT, user: AuthenticatedUser, action: str) -> None:
	label = "post" if isinstance(entity, models.Post) else "reply"
	ensure_owner(entity.author, user, action=f"{action} this {label}")


def assert_can_accept(post: models.Post, thread: models.Thread, user: AuthenticatedUser) -> None:
	if post.type != "answer":
		raise NotFound("Answer post not found")
	if thread.author != user.id:
		raise Forbidden("Not authorized to accept answer")

