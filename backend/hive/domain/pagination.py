"""Page/limit pagination shared by every list endpoint."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(slots=True, frozen=True)
class PageParams:
	page: int = DEFAULT_PAGE
	limit: int = DEFAULT_LIMIT

	@property
	def skip(self) -> int:
		return (self.page - 1) * self.limit


def pagination_meta(params: PageParams, total: int) -> Dict[str, Any]:
	return {
		"page": params.page,
		"limit": params.limit,
		"total": total,
		"pages": math.ceil(total / params.limit) if params.limit else 0,
	}


def page_payload(key: str, items: list[Any], params: PageParams, total: int) -> Dict[str, Any]:
	"""Build the `{<key>: items, pagination: {...}}` body of a list response."""
	return {key: items, "pagination": pagination_meta(params, total)}
