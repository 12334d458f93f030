import pytest


@pytest.mark.asyncio
async def test_directory_listing_and_search(api_client, register):
	ada = await register("ada@x.com", first_name="Ada", last_name="Lovelace")
	await register("bob@x.com", first_name="Bob", last_name="Builder")
	await api_client.put(
		"/api/auth/profile",
		headers=ada["headers"],
		json={"expertise": ["math"], "isSeekingMentor": True, "goals": ["publish"]},
	)

	listed = (await api_client.get("/api/users")).json()["data"]
	assert listed["pagination"]["total"] == 2
	assert all("passwordHash" not in user for user in listed["users"])

	found = (await api_client.get("/api/users", params={"search": "love"})).json()["data"]["users"]
	assert [user["firstName"] for user in found] == ["Ada"]

	found = (await api_client.get("/api/users/search", params={"expertise": "math"})).json()["data"]["users"]
	assert [user["firstName"] for user in found] == ["Ada"]

	mentees = (await api_client.get("/api/users/mentees", params={"goals": "publish"})).json()["data"]
	assert [user["firstName"] for user in mentees["mentees"]] == ["Ada"]

	mentors = (await api_client.get("/api/users/mentors")).json()["data"]
	assert mentors["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_user_profile_and_stats(api_client, register):
	member = await register("stats@x.com")
	response = await api_client.get(f"/api/users/{member['id']}")
	assert response.status_code == 200
	assert response.json()["data"]["user"]["email"] == "stats@x.com"

	stats = (await api_client.get(f"/api/users/{member['id']}/stats")).json()["data"]["stats"]
	assert stats == {
		"postsCount": 0,
		"repliesCount": 0,
		"milestonesCount": 0,
		"reputation": 0,
		"daysSinceJoined": 0,
		"avgReputationPerDay": 0,
	}

	assert (await api_client.get("/api/users/64b7f0c2a1b2c3d4e5f60799")).status_code == 404
	assert (await api_client.get("/api/users/not-an-id/stats")).status_code == 404


@pytest.mark.asyncio
async def test_reputation_changes(api_client, register):
	giver = await register("giver@x.com")
	receiver = await register("receiver@x.com")

	response = await api_client.put(
		f"/api/users/{giver['id']}/reputation",
		json={"action": "upvote"},
		headers=giver["headers"],
	)
	assert response.status_code == 403

	response = await api_client.put(
		f"/api/users/{receiver['id']}/reputation",
		json={"action": "helpful"},
		headers=giver["headers"],
	)
	assert response.status_code == 200
	assert response.json()["data"]["reputation"] == 3

	response = await api_client.put(
		f"/api/users/{receiver['id']}/reputation",
		json={"action": "bribe"},
		headers=giver["headers"],
	)
	assert response.status_code == 400

	response = await api_client.put(f"/api/users/{receiver['id']}/reputation", json={"action": "upvote"})
	assert response.status_code == 401
