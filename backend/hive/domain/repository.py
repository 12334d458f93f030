"""Base class for the document repositories."""

from __future__ import annotations

from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from hive.domain.base import Document, now_utc
from hive.domain.pagination import PageParams
from hive.infra.documents import DocumentStore, SortSpec, get_store, object_id

ModelT = TypeVar("ModelT", bound=Document)


class Repository(Generic[ModelT]):
	"""Thin data-access layer over one collection of the document store."""

	collection: str
	model: Type[ModelT]

	def __init__(self, store: DocumentStore | None = None) -> None:
		self._store = store

	async def _get_store(self) -> DocumentStore:
		if self._store is not None:
			return self._store
		return await get_store()

	def _load(self, raw: Optional[Mapping[str, Any]]) -> Optional[ModelT]:
		if raw is None:
			return None
		return self.model.model_validate(dict(raw))

	async def get(self, entity_id: Any) -> Optional[ModelT]:
		oid = object_id(entity_id)
		if oid is None:
			return None
		store = await self._get_store()
		return self._load(await store.find_one(self.collection, {"_id": oid}))

	async def find_one(self, filter: Mapping[str, Any]) -> Optional[ModelT]:
		store = await self._get_store()
		return self._load(await store.find_one(self.collection, filter))

	async def find(
		self,
		filter: Mapping[str, Any],
		*,
		sort: SortSpec | None = None,
		skip: int = 0,
		limit: int = 0,
	) -> List[ModelT]:
		store = await self._get_store()
		rows = await store.find(self.collection, filter, sort=sort, skip=skip, limit=limit)
		return [self.model.model_validate(row) for row in rows]

	async def page(
		self,
		filter: Mapping[str, Any],
		params: PageParams,
		*,
		sort: SortSpec,
	) -> Tuple[List[ModelT], int]:
		store = await self._get_store()
		items = await self.find(filter, sort=sort, skip=params.skip, limit=params.limit)
		total = await store.count(self.collection, filter)
		return items, total

	async def insert(self, fields: Dict[str, Any]) -> ModelT:
		store = await self._get_store()
		now = now_utc()
		document = {**fields, "createdAt": now, "updatedAt": now}
		saved = await store.insert(self.collection, document)
		return self.model.model_validate(saved)

	async def update(self, filter: Mapping[str, Any], update: Mapping[str, Any]) -> Optional[ModelT]:
		"""Apply a Mongo update to the first match, stamping `updatedAt`."""
		changes = {key: dict(value) for key, value in update.items()}
		changes.setdefault("$set", {})["updatedAt"] = now_utc()
		store = await self._get_store()
		return self._load(await store.update(self.collection, filter, changes))

	async def set_fields(self, entity_id: Any, fields: Mapping[str, Any]) -> Optional[ModelT]:
		oid = object_id(entity_id)
		if oid is None:
			return None
		return await self.update({"_id": oid}, {"$set": dict(fields)})

	async def increment(self, entity_id: Any, fields: Mapping[str, int]) -> Optional[ModelT]:
		"""Adjust counters; a negative step never takes a counter below zero."""
		oid = object_id(entity_id)
		if oid is None:
			return None
		result: Optional[ModelT] = None
		increments = {field: step for field, step in fields.items() if step > 0}
		if increments:
			result = await self.update({"_id": oid}, {"$inc": increments})
		# Each decrement is floored on its own so one empty counter cannot block the others.
		for field, step in fields.items():
			if step < 0:
				result = await self.update({"_id": oid, field: {"$gte": -step}}, {"$inc": {field: step}}) or result
		return result

	async def by_ids(self, ids: Iterable[Any]) -> Dict[str, ModelT]:
		oids = [oid for oid in (object_id(value) for value in ids) if oid is not None]
		if not oids:
			return {}
		items = await self.find({"_id": {"$in": list(dict.fromkeys(oids))}})
		return {item.id: item for item in items}
