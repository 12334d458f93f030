"""Shared pydantic bases for stored documents and request bodies."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Dict, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hive.infra.sanitize import sanitize_value

# ObjectIds (ids and references) are exposed as plain strings.
ObjectIdStr = Annotated[str, BeforeValidator(lambda value: str(value))]

# User-authored text is cleaned before length checks run.
CleanStr = Annotated[str, BeforeValidator(sanitize_value)]


def now_utc() -> datetime:
	return datetime.now(timezone.utc)


class CamelModel(BaseModel):
	"""Fields are snake_case in Python and camelCase on the wire and in storage."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Document(CamelModel):
	"""A stored document; `_id` is read into `id`."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

	id: ObjectIdStr = Field(validation_alias=AliasChoices("_id", "id"))
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	PRIVATE_FIELDS: ClassVar[frozenset[str]] = frozenset()

	def to_public(self) -> Dict[str, Any]:
		return self.model_dump(mode="json", by_alias=True, exclude=set(self.PRIVATE_FIELDS))
