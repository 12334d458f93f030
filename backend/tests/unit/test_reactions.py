from hive.domain.discussions.reactions import toggle


def test_like_adds_user():
	state = toggle([], [], "u1", "like")
	assert state.likes == ["u1"]
	assert state.payload("u1") == {"likeCount": 1, "dislikeCount": 0, "liked": True, "disliked": False}


def test_second_like_removes_user():
	state = toggle(["u1", "u2"], [], "u1", "like")
	assert state.likes == ["u2"]
	assert state.payload("u1")["liked"] is False


def test_like_and_dislike_are_mutually_exclusive():
	state = toggle(["u1"], ["u2"], "u1", "dislike")
	assert state.likes == []
	assert state.dislikes == ["u2", "u1"]
	state = toggle(state.likes, state.dislikes, "u1", "like")
	assert state.likes == ["u1"]
	assert state.dislikes == ["u2"]


def test_toggle_does_not_mutate_inputs():
	likes, dislikes = ["u1"], []
	toggle(likes, dislikes, "u1", "dislike")
	assert likes == ["u1"]
	assert dislikes == []
