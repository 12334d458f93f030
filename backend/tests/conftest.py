import copy
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

# Settings are read at import time.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("OBS_ENABLED", "true")
os.environ.setdefault("PASSWORD_HASH_TIME_COST", "1")
os.environ.setdefault("PASSWORD_HASH_MEMORY_COST", "8")
os.environ.setdefault("PASSWORD_HASH_PARALLELISM", "1")

import pytest
import pytest_asyncio
from bson import ObjectId
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from hive.infra import documents
from hive.infra.documents import DocumentStore, DuplicateDocument
from hive.infra.redis import redis_client, set_redis_client
from hive.infra.revocation import RevocationRegistry, set_registry
from hive.main import app


# Mirrors the MongoDB query rules the repositories rely on: equality against an
# array field matches when the array contains the value, so $ne on an array
# means "does not contain"; $in on an array matches any overlap; a missing
# field compares as None. Dotted paths and positional operators are not
# supported.
def _equals(actual: Any, expected: Any) -> bool:
	if isinstance(actual, list) and not isinstance(expected, list):
		return expected in actual
	return actual == expected


def _match_operators(actual: Any, condition: Mapping[str, Any]) -> bool:
	for op, arg in condition.items():
		if op == "$ne":
			if _equals(actual, arg):
				return False
		elif op == "$in":
			candidates = actual if isinstance(actual, list) else [actual]
			if not any(candidate in arg for candidate in candidates):
				return False
		elif op in ("$gt", "$gte", "$lt", "$lte"):
			if actual is None:
				return False
			if op == "$gt" and not actual > arg:
				return False
			if op == "$gte" and not actual >= arg:
				return False
			if op == "$lt" and not actual < arg:
				return False
			if op == "$lte" and not actual <= arg:
				return False
		elif op == "$regex":
			flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
			values = actual if isinstance(actual, list) else [actual]
			if not any(isinstance(value, str) and re.search(arg, value, flags) for value in values):
				return False
		elif op == "$options":
			continue
		else:
			raise NotImplementedError(op)
	return True


def matches(document: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
	for key, condition in filter.items():
		if key == "$or":
			if not any(matches(document, clause) for clause in condition):
				return False
			continue
		if key == "$and":
			if not all(matches(document, clause) for clause in condition):
				return False
			continue
		actual = document.get(key)
		if isinstance(condition, dict) and condition and all(name.startswith("$") for name in condition):
			if not _match_operators(actual, condition):
				return False
		elif not _equals(actual, condition):
			return False
	return True


def apply_update(document: Dict[str, Any], update: Mapping[str, Any]) -> None:
	for op, changes in update.items():
		if op == "$set":
			document.update(copy.deepcopy(dict(changes)))
		elif op == "$inc":
			for field, step in changes.items():
				document[field] = document.get(field, 0) + step
		elif op == "$addToSet":
			for field, value in changes.items():
				values = document.setdefault(field, [])
				if value not in values:
					values.append(value)
		elif op == "$pull":
			for field, value in changes.items():
				document[field] = [item for item in document.get(field, []) if item != value]
		else:
			raise NotImplementedError(op)


class InMemoryDocumentStore(DocumentStore):
	"""Evaluates the subset of Mongo filters and updates the repositories use."""

	def __init__(self) -> None:
		self.collections: Dict[str, List[Dict[str, Any]]] = {}

	def _rows(self, collection: str) -> List[Dict[str, Any]]:
		return self.collections.setdefault(collection, [])

	async def find_one(self, collection: str, filter):
		for row in self._rows(collection):
			if matches(row, filter):
				return copy.deepcopy(row)
		return None

	async def find(self, collection: str, filter, *, sort=None, skip: int = 0, limit: int = 0):
		rows = [row for row in self._rows(collection) if matches(row, filter)]
		for field, direction in reversed(list(sort or [])):
			rows.sort(key=lambda row: (row.get(field) is not None, row.get(field)), reverse=direction < 0)
		rows = rows[skip:]
		if limit:
			rows = rows[:limit]
		return copy.deepcopy(rows)

	async def count(self, collection: str, filter) -> int:
		return sum(1 for row in self._rows(collection) if matches(row, filter))

	async def insert(self, collection: str, document):
		rows = self._rows(collection)
		if collection == documents.USERS and any(row.get("email") == document.get("email") for row in rows):
			raise DuplicateDocument(document.get("email"))
		stored = copy.deepcopy(document)
		stored.setdefault("_id", ObjectId())
		rows.append(stored)
		return copy.deepcopy(stored)

	async def update(self, collection: str, filter, update) -> Optional[Dict[str, Any]]:
		for row in self._rows(collection):
			if matches(row, filter):
				apply_update(row, update)
				return copy.deepcopy(row)
		return None


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	await client.flushall()
	set_redis_client(client)
	set_registry(RevocationRegistry())
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def memory_store():
	store = InMemoryDocumentStore()
	documents.set_store(store)
	try:
		yield store
	finally:
		documents.set_store(None)


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


@pytest.fixture
def register(api_client):
	"""Register a member and return its id, token and auth headers."""

	async def _register(email: str, first_name: str = "Test", last_name: str = "Member", password: str = "secret1"):
		response = await api_client.post(
			"/api/auth/register",
			json={"email": email, "password": password, "firstName": first_name, "lastName": last_name},
		)
		assert response.status_code == 201, response.text
		data = response.json()["data"]
		return {
			"id": data["user"]["id"],
			"token": data["token"],
			"headers": {"Authorization": f"Bearer {data['token']}"},
		}

	return _register


@pytest.fixture
def set_reputation(memory_store):
	async def _set(user_id: str, reputation: int) -> None:
		await memory_store.update(documents.USERS, {"_id": ObjectId(user_id)}, {"$set": {"reputation": reputation}})

	return _set
