import time

import jwt
import pytest

from hive.domain.errors import InvalidToken
from hive.infra import jwt as token_codec


def test_issue_and_verify_round_trip():
	token = token_codec.issue("64b7f0c2a1b2c3d4e5f60718")
	assert token_codec.verify(token) == "64b7f0c2a1b2c3d4e5f60718"


def test_tokens_issued_together_differ():
	now = time.time()
	assert token_codec.issue("user-1", now=now) != token_codec.issue("user-1", now=now)


def test_expired_token_rejected():
	token = token_codec.issue("user-1", ttl_seconds=60, now=time.time() - 3600)
	with pytest.raises(InvalidToken):
		token_codec.verify(token)


def test_tampered_token_rejected():
	token = token_codec.issue("user-1")
	head, body, signature = token.split(".")
	forged = ".".join([head, body, signature[::-1]])
	with pytest.raises(InvalidToken):
		token_codec.verify(forged)


def test_foreign_secret_rejected():
	token = jwt.encode({"sub": "user-1", "iat": int(time.time()), "exp": int(time.time()) + 60}, "other", algorithm="HS256")
	with pytest.raises(InvalidToken):
		token_codec.verify(token)


def test_garbage_rejected():
	with pytest.raises(InvalidToken):
		token_codec.verify("not.a.token")


def test_read_expiry():
	token = token_codec.issue("user-1", ttl_seconds=120, now=1_000_000)
	assert token_codec.read_expiry(token) == 1_000_120
	assert token_codec.read_expiry("garbage") is None
