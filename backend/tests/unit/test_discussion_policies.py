import pytest

from hive.domain.discussions import models, policies
from hive.domain.errors import Forbidden, NotFound
from hive.domain.identity.models import User
from hive.infra.auth import AuthenticatedUser

AUTHOR = "64b7f0c2a1b2c3d4e5f60701"
FRIEND = "64b7f0c2a1b2c3d4e5f60702"
STRANGER = "64b7f0c2a1b2c3d4e5f60703"
THREAD = "64b7f0c2a1b2c3d4e5f60710"
POST = "64b7f0c2a1b2c3d4e5f60720"


def _member(user_id: str, reputation: int = 0) -> AuthenticatedUser:
	profile = User(id=user_id, email=f"{user_id}@example.com", first_name="T", last_name="M", reputation=reputation)
	return AuthenticatedUser(id=user_id, email=profile.email, reputation=reputation, token="t", profile=profile)


def _thread(**overrides) -> models.Thread:
	fields = {
		"_id": THREAD,
		"title": "A thread",
		"description": "Thread description",
		"author": AUTHOR,
	}
	fields.update(overrides)
	return models.Thread.model_validate(fields)


def _post(**overrides) -> models.Post:
	fields = {"_id": POST, "content": "Body", "author": FRIEND, "thread": THREAD, "type": "answer"}
	fields.update(overrides)
	return models.Post.model_validate(fields)


def test_deleted_thread_reads_as_missing():
	with pytest.raises(NotFound):
		policies.require_thread(_thread(status="deleted"))
	with pytest.raises(NotFound):
		policies.require_thread(None)


def test_private_thread_access():
	thread = _thread(isPrivate=True, allowedUsers=[FRIEND])
	policies.require_thread_access(thread, _member(AUTHOR))
	policies.require_thread_access(thread, _member(FRIEND))
	with pytest.raises(Forbidden):
		policies.require_thread_access(thread, _member(STRANGER))
	with pytest.raises(Forbidden):
		policies.require_thread_access(thread, None)


def test_thread_moderators_can_edit():
	thread = _thread(moderators=[FRIEND])
	policies.assert_can_edit_thread(thread, _member(FRIEND), "update")
	with pytest.raises(Forbidden):
		policies.assert_can_edit_thread(thread, _member(STRANGER), "update")


@pytest.mark.parametrize("status", ["closed", "archived"])
def test_closed_threads_reject_posts(status):
	with pytest.raises(Forbidden):
		policies.assert_thread_open(_thread(status=status))


def test_pinned_thread_accepts_posts():
	policies.assert_thread_open(_thread(status="pinned"))


@pytest.mark.parametrize("status", ["deleted", "hidden", "flagged"])
def test_invisible_content_reads_as_missing(status):
	with pytest.raises(NotFound) as excinfo:
		policies.require_visible(_post(status=status), "Post")
	assert excinfo.value.message == "Post not found"


def test_only_author_may_edit():
	post = _post()
	policies.assert_author(post, _member(FRIEND), "update")
	with pytest.raises(Forbidden) as excinfo:
		policies.assert_author(post, _member(STRANGER), "update")
	assert excinfo.value.message == "Not authorized to update this post"


def test_accept_requires_thread_author_and_answer_type():
	thread = _thread()
	policies.assert_can_accept(_post(), thread, _member(AUTHOR))
	with pytest.raises(Forbidden):
		policies.assert_can_accept(_post(), thread, _member(STRANGER))
	with pytest.raises(NotFound):
		policies.assert_can_accept(_post(type="discussion"), thread, _member(AUTHOR))


def test_reputation_threshold_grants_moderation():
	assert _member(AUTHOR, reputation=100).is_moderator
	assert not _member(AUTHOR, reputation=99).is_moderator
