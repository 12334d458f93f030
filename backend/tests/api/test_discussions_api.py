import pytest

QA_THREAD = {
	"title": "How should I learn Python?",
	"description": "Looking for a roadmap from zero to shipping",
	"category": "qa",
	"type": "qa",
	"tags": ["Python", "Learning"],
}


async def _create_thread(api_client, member, **overrides):
	payload = {**QA_THREAD, **overrides}
	response = await api_client.post("/api/threads", json=payload, headers=member["headers"])
	assert response.status_code == 201, response.text
	return response.json()["data"]["thread"]


async def _create_post(api_client, member, thread_id, **overrides):
	payload = {"thread": thread_id, "content": "Start with the official tutorial", **overrides}
	response = await api_client.post("/api/posts", json=payload, headers=member["headers"])
	assert response.status_code == 201, response.text
	return response.json()["data"]["post"]


@pytest.mark.asyncio
async def test_thread_creation_normalises_input(api_client, register):
	owner = await register("u@x.com", first_name="Una")
	thread = await _create_thread(
		api_client,
		owner,
		description="Looking for a roadmap<script>alert(1)</script> from zero",
	)
	assert thread["tags"] == ["python", "learning"]
	assert thread["description"] == "Looking for a roadmap from zero"
	assert thread["author"]["firstName"] == "Una"
	assert thread["postsCount"] == 0
	assert thread["status"] == "active"


@pytest.mark.asyncio
async def test_thread_validation(api_client, register):
	owner = await register("u@x.com")
	response = await api_client.post(
		"/api/threads",
		json={"title": "Hey", "description": "short", "category": "cooking"},
		headers=owner["headers"],
	)
	assert response.status_code == 400
	fields = {error["field"] for error in response.json()["errors"]}
	assert {"title", "description", "category"} <= fields


@pytest.mark.asyncio
async def test_accept_answer_only_by_thread_author(api_client, register):
	owner = await register("u@x.com")
	answerer = await register("v@x.com")
	bystander = await register("w@x.com")
	thread = await _create_thread(api_client, owner)
	answer = await _create_post(api_client, answerer, thread["id"], type="answer")
	comment = await _create_post(api_client, answerer, thread["id"])

	response = await api_client.post(f"/api/posts/{answer['id']}/accept", headers=bystander["headers"])
	assert response.status_code == 403

	response = await api_client.post(f"/api/posts/{comment['id']}/accept", headers=owner["headers"])
	assert response.status_code == 404

	response = await api_client.post(f"/api/posts/{answer['id']}/accept", headers=owner["headers"])
	assert response.status_code == 200
	assert response.json()["data"]["post"]["isAcceptedAnswer"] is True


@pytest.mark.asyncio
async def test_post_counters_and_single_decrement(api_client, register):
	owner = await register("u@x.com")
	author = await register("v@x.com")
	thread = await _create_thread(api_client, owner)
	post = await _create_post(api_client, author, thread["id"], type="milestone", milestone={"title": "First job"})

	fetched = (await api_client.get(f"/api/threads/{thread['id']}")).json()["data"]["thread"]
	assert fetched["postsCount"] == 1
	profile = (await api_client.get(f"/api/users/{author['id']}")).json()["data"]["user"]
	assert profile["postsCount"] == 1
	assert profile["milestonesCount"] == 1

	first = await api_client.delete(f"/api/posts/{post['id']}", headers=author["headers"])
	assert first.status_code == 200
	second = await api_client.delete(f"/api/posts/{post['id']}", headers=author["headers"])
	assert second.status_code == 404

	fetched = (await api_client.get(f"/api/threads/{thread['id']}")).json()["data"]["thread"]
	assert fetched["postsCount"] == 0
	profile = (await api_client.get(f"/api/users/{author['id']}")).json()["data"]["user"]
	assert profile["postsCount"] == 0
	assert profile["milestonesCount"] == 0

	response = await api_client.get(f"/api/posts/{post['id']}")
	assert response.status_code == 404


@pytest.mark.asyncio
async def test_only_author_may_change_post(api_client, register):
	owner = await register("u@x.com")
	author = await register("v@x.com")
	thread = await _create_thread(api_client, owner)
	post = await _create_post(api_client, author, thread["id"])

	response = await api_client.put(f"/api/posts/{post['id']}", json={"content": "Edited"}, headers=owner["headers"])
	assert response.status_code == 403
	response = await api_client.delete(f"/api/posts/{post['id']}", headers=owner["headers"])
	assert response.status_code == 403

	response = await api_client.put(f"/api/posts/{post['id']}", json={"content": "Edited"}, headers=author["headers"])
	assert response.status_code == 200
	assert response.json()["data"]["post"]["content"] == "Edited"


@pytest.mark.asyncio
async def test_private_thread_visibility(api_client, register):
	owner = await register("u@x.com")
	friend = await register("v@x.com")
	stranger = await register("w@x.com")
	thread = await _create_thread(api_client, owner, isPrivate=True, allowedUsers=[friend["id"]])

	assert (await api_client.get(f"/api/threads/{thread['id']}")).status_code == 403
	response = await api_client.get(f"/api/threads/{thread['id']}", headers=stranger["headers"])
	assert response.status_code == 403
	assert response.json()["message"] == "Access denied to private thread"
	response = await api_client.get(f"/api/threads/{thread['id']}", headers=friend["headers"])
	assert response.status_code == 200

	listed = (await api_client.get("/api/threads", headers=stranger["headers"])).json()["data"]
	assert listed["threads"] == []
	assert listed["pagination"]["total"] == 0
	listed = (await api_client.get("/api/threads", headers=friend["headers"])).json()["data"]
	assert [item["id"] for item in listed["threads"]] == [thread["id"]]

	response = await api_client.post(
		"/api/posts",
		json={"thread": thread["id"], "content": "Let me in"},
		headers=stranger["headers"],
	)
	assert response.status_code == 403


@pytest.mark.asyncio
async def test_private_thread_posts_reject_outsider_reactions(api_client, register):
	owner = await register("u@x.com")
	stranger = await register("w@x.com")
	thread = await _create_thread(api_client, owner, isPrivate=True)
	post = await _create_post(api_client, owner, thread["id"])

	assert (await api_client.get(f"/api/posts/{post['id']}", headers=stranger["headers"])).status_code == 403
	for action in ("like", "dislike"):
		response = await api_client.post(f"/api/posts/{post['id']}/{action}", headers=stranger["headers"])
		assert response.status_code == 403

	fetched = (await api_client.get(f"/api/posts/{post['id']}", headers=owner["headers"])).json()["data"]["post"]
	assert fetched["likes"] == []
	assert fetched["dislikes"] == []


@pytest.mark.asyncio
async def test_deleted_thread_freezes_its_posts(api_client, register):
	owner = await register("u@x.com")
	thread = await _create_thread(api_client, owner)
	post = await _create_post(api_client, owner, thread["id"])

	assert (await api_client.delete(f"/api/threads/{thread['id']}", headers=owner["headers"])).status_code == 200

	assert (await api_client.get(f"/api/posts/{post['id']}")).status_code == 404
	response = await api_client.put(f"/api/posts/{post['id']}", json={"content": "Edited"}, headers=owner["headers"])
	assert response.status_code == 404
	assert response.json()["message"] == "Thread not found"
	assert (await api_client.post(f"/api/posts/{post['id']}/like", headers=owner["headers"])).status_code == 404


@pytest.mark.asyncio
async def test_thread_moderators_are_appointed_by_author(api_client, register):
	owner = await register("u@x.com")
	helper = await register("v@x.com")
	other = await register("w@x.com")
	thread = await _create_thread(api_client, owner)

	response = await api_client.put(
		f"/api/threads/{thread['id']}",
		json={"moderators": [helper["id"]]},
		headers=helper["headers"],
	)
	assert response.status_code == 403

	response = await api_client.put(
		f"/api/threads/{thread['id']}",
		json={"moderators": [helper["id"]]},
		headers=owner["headers"],
	)
	assert response.status_code == 200
	assert response.json()["data"]["thread"]["moderators"] == [helper["id"]]

	response = await api_client.put(f"/api/threads/{thread['id']}", json={"status": "closed"}, headers=helper["headers"])
	assert response.status_code == 200
	assert response.json()["data"]["thread"]["status"] == "closed"

	response = await api_client.put(
		f"/api/threads/{thread['id']}",
		json={"moderators": [helper["id"], other["id"]]},
		headers=helper["headers"],
	)
	assert response.status_code == 403
	assert response.json()["message"] == "Not authorized to change moderators of this thread"

	response = await api_client.put(
		f"/api/threads/{thread['id']}",
		json={"moderators": ["not-an-id"]},
		headers=owner["headers"],
	)
	assert response.status_code == 400


@pytest.mark.asyncio
async def test_closed_thread_rejects_posts(api_client, register):
	owner = await register("u@x.com")
	member = await register("v@x.com")
	thread = await _create_thread(api_client, owner)

	response = await api_client.put(f"/api/threads/{thread['id']}", json={"status": "closed"}, headers=member["headers"])
	assert response.status_code == 403
	response = await api_client.put(f"/api/threads/{thread['id']}", json={"status": "closed"}, headers=owner["headers"])
	assert response.status_code == 200

	response = await api_client.post(
		"/api/posts",
		json={"thread": thread["id"], "content": "Too late"},
		headers=member["headers"],
	)
	assert response.status_code == 403
	assert response.json()["message"] == "Thread is closed to new posts"


@pytest.mark.asyncio
async def test_thread_listing_filters_and_pagination(api_client, register):
	owner = await register("u@x.com")
	await _create_thread(api_client, owner)
	await _create_thread(api_client, owner, title="Career switch stories", category="career", type="discussion", tags=[])
	await _create_thread(api_client, owner, title="Interview preparation", category="career", type="discussion", tags=[])

	response = await api_client.get("/api/threads", params={"category": "career", "limit": 1, "page": 2})
	data = response.json()["data"]
	assert len(data["threads"]) == 1
	assert data["pagination"] == {"page": 2, "limit": 1, "total": 2, "pages": 2}

	response = await api_client.get("/api/threads/category/career")
	assert response.json()["data"]["pagination"]["total"] == 2

	response = await api_client.get("/api/threads/search", params={"q": "python"})
	titles = [item["title"] for item in response.json()["data"]["threads"]]
	assert titles == ["How should I learn Python?"]

	response = await api_client.get("/api/threads", params={"limit": 101})
	assert response.status_code == 400


@pytest.mark.asyncio
async def test_thread_delete_is_soft(api_client, register):
	owner = await register("u@x.com")
	thread = await _create_thread(api_client, owner)
	response = await api_client.delete(f"/api/threads/{thread['id']}", headers=owner["headers"])
	assert response.status_code == 200
	assert (await api_client.get(f"/api/threads/{thread['id']}")).status_code == 404
	assert (await api_client.delete(f"/api/threads/{thread['id']}", headers=owner["headers"])).status_code == 404


@pytest.mark.asyncio
async def test_featuring_requires_moderator(api_client, register, set_reputation):
	owner = await register("u@x.com")
	moderator = await register("mod@x.com")
	thread = await _create_thread(api_client, owner)

	response = await api_client.post(f"/api/threads/{thread['id']}/feature", headers=owner["headers"])
	assert response.status_code == 403
	assert response.json()["message"] == "Insufficient permissions"

	await set_reputation(moderator["id"], 150)
	response = await api_client.post(f"/api/threads/{thread['id']}/feature", json={"featured": True}, headers=moderator["headers"])
	assert response.status_code == 200

	featured = (await api_client.get("/api/threads/featured")).json()["data"]["threads"]
	assert [item["id"] for item in featured] == [thread["id"]]


@pytest.mark.asyncio
async def test_post_reactions_toggle(api_client, register):
	owner = await register("u@x.com")
	thread = await _create_thread(api_client, owner)
	post = await _create_post(api_client, owner, thread["id"])

	response = await api_client.post(f"/api/posts/{post['id']}/like", headers=owner["headers"])
	assert response.json()["data"] == {"likeCount": 1, "dislikeCount": 0, "liked": True, "disliked": False}
	response = await api_client.post(f"/api/posts/{post['id']}/dislike", headers=owner["headers"])
	assert response.json()["data"] == {"likeCount": 0, "dislikeCount": 1, "liked": False, "disliked": True}
	response = await api_client.post(f"/api/posts/{post['id']}/dislike", headers=owner["headers"])
	assert response.json()["data"] == {"likeCount": 0, "dislikeCount": 0, "liked": False, "disliked": False}


@pytest.mark.asyncio
async def test_moderated_post_is_hidden(api_client, register, set_reputation):
	owner = await register("u@x.com")
	moderator = await register("mod@x.com")
	thread = await _create_thread(api_client, owner)
	post = await _create_post(api_client, owner, thread["id"])

	payload = {"status": "hidden", "reason": "Off topic"}
	response = await api_client.post(f"/api/posts/{post['id']}/moderate", json=payload, headers=owner["headers"])
	assert response.status_code == 403

	await set_reputation(moderator["id"], 100)
	response = await api_client.post(f"/api/posts/{post['id']}/moderate", json=payload, headers=moderator["headers"])
	assert response.status_code == 200
	assert response.json()["data"]["post"]["moderationReason"] == "Off topic"

	assert (await api_client.get(f"/api/posts/{post['id']}")).status_code == 404
	listed = (await api_client.get(f"/api/posts/thread/{thread['id']}")).json()["data"]
	assert listed["posts"] == []


@pytest.mark.asyncio
async def test_unknown_ids_are_not_found(api_client, register):
	member = await register("u@x.com")
	assert (await api_client.get("/api/threads/not-an-id")).status_code == 404
	assert (await api_client.get("/api/posts/64b7f0c2a1b2c3d4e5f60799")).status_code == 404
	response = await api_client.post("/api/posts", json={"thread": "nope", "content": "Hi"}, headers=member["headers"])
	assert response.status_code == 400


@pytest.mark.asyncio
async def test_content_creation_is_rate_limited_per_user(api_client, register):
	owner = await register("u@x.com")
	other = await register("v@x.com")
	thread = await _create_thread(api_client, owner)
	for _ in range(9):
		await _create_post(api_client, owner, thread["id"])
	response = await api_client.post(
		"/api/posts",
		json={"thread": thread["id"], "content": "One too many"},
		headers=owner["headers"],
	)
	assert response.status_code == 429
	await _create_post(api_client, other, thread["id"])
