"""Document store handle for the backend.

Mirrors the pool management the rest of the codebase expects: `init_store`
at startup, `get_store` from repositories, `close_store` at shutdown and
`set_store` to swap in another implementation (tests use an in-memory one).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, AsyncMongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from hive.settings import settings

log = logging.getLogger(__name__)

Filter = Mapping[str, Any]
SortSpec = Sequence[tuple[str, int]]

USERS = "users"
THREADS = "threads"
POSTS = "posts"
REPLIES = "replies"


class DuplicateDocument(Exception):
	"""Raised when an insert or update violates a unique index."""


def object_id(value: Any) -> Optional[ObjectId]:
	"""Return an ObjectId for `value`, or None when it is not a valid id."""
	if isinstance(value, ObjectId):
		return value
	if isinstance(value, str) and ObjectId.is_valid(value):
		return ObjectId(value)
	return None


class DocumentStore:
	"""Operations the repositories rely on. Filters and updates use Mongo syntax."""

	async def find_one(self, collection: str, filter: Filter) -> Optional[dict[str, Any]]:
		raise NotImplementedError

	async def find(
		self,
		collection: str,
		filter: Filter,
		*,
		sort: SortSpec | None = None,
		skip: int = 0,
		limit: int = 0,
	) -> list[dict[str, Any]]:
		raise NotImplementedError

	async def count(self, collection: str, filter: Filter) -> int:
		raise NotImplementedError

	async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
		raise NotImplementedError

	async def update(self, collection: str, filter: Filter, update: Mapping[str, Any]) -> Optional[dict[str, Any]]:
		"""Apply `update` to the first match and return the document after the change."""
		raise NotImplementedError

	async def ensure_indexes(self) -> None:
		return None

	async def ping(self) -> None:
		return None

	async def close(self) -> None:
		return None


class MongoDocumentStore(DocumentStore):
	def __init__(self, url: str, db_name: str, *, timeout_ms: int = 5000) -> None:
		self._client: AsyncMongoClient = AsyncMongoClient(
			url,
			tz_aware=True,
			serverSelectionTimeoutMS=timeout_ms,
		)
		self._db = self._client[db_name]

	async def find_one(self, collection: str, filter: Filter) -> Optional[dict[str, Any]]:
		return await self._db[collection].find_one(dict(filter))

	async def find(
		self,
		collection: str,
		filter: Filter,
		*,
		sort: SortSpec | None = None,
		skip: int = 0,
		limit: int = 0,
	) -> list[dict[str, Any]]:
		cursor = self._db[collection].find(dict(filter))
		if sort:
			cursor = cursor.sort(list(sort))
		if skip:
			cursor = cursor.skip(skip)
		if limit:
			cursor = cursor.limit(limit)
		return await cursor.to_list(None)

	async def count(self, collection: str, filter: Filter) -> int:
		return await self._db[collection].count_documents(dict(filter))

	async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
		try:
			result = await self._db[collection].insert_one(document)
		except DuplicateKeyError as exc:
			raise DuplicateDocument(str(exc)) from exc
		document["_id"] = result.inserted_id
		return document

	async def update(self, collection: str, filter: Filter, update: Mapping[str, Any]) -> Optional[dict[str, Any]]:
		try:
			return await self._db[collection].find_one_and_update(
				dict(filter),
				dict(update),
				return_document=ReturnDocument.AFTER,
			)
		except DuplicateKeyError as exc:
			raise DuplicateDocument(str(exc)) from exc

	async def ensure_indexes(self) -> None:
		await self._db[USERS].create_index([("email", ASCENDING)], unique=True)
		await self._db[USERS].create_index([("reputation", DESCENDING), ("createdAt", DESCENDING)])
		await self._db[THREADS].create_index([("category", ASCENDING), ("status", ASCENDING), ("createdAt", DESCENDING)])
		await self._db[THREADS].create_index([("author", ASCENDING), ("createdAt", DESCENDING)])
		await self._db[POSTS].create_index([("thread", ASCENDING), ("createdAt", DESCENDING)])
		await self._db[POSTS].create_index([("author", ASCENDING), ("createdAt", DESCENDING)])
		await self._db[REPLIES].create_index([("post", ASCENDING), ("createdAt", ASCENDING)])
		await self._db[REPLIES].create_index([("parentReply", ASCENDING), ("createdAt", ASCENDING)])

	async def ping(self) -> None:
		await self._client.admin.command("ping")

	async def close(self) -> None:
		await self._client.close()


_store: Optional[DocumentStore] = None


async def init_store() -> DocumentStore:
	global _store
	if _store is None:
		_store = MongoDocumentStore(
			settings.mongo_url,
			settings.mongo_db_name,
			timeout_ms=settings.mongo_timeout_ms,
		)
		try:
			await _store.ensure_indexes()
		except PyMongoError:
			# The store may still be starting; readiness reports it until it is reachable.
			log.warning("document_store_index_setup_failed", exc_info=True)
	return _store


def set_store(store: Optional[DocumentStore]) -> None:
	global _store
	_store = store


async def get_store() -> DocumentStore:
	if _store is None:
		await init_store()
	assert _store is not None
	return _store


async def close_store() -> None:
	global _store
	if _store is not None:
		await _store.close()
		_store = None
