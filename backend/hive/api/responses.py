"""Success envelopes and shared query dependencies."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Query

from hive.domain.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, PageParams


def ok(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
	body: Dict[str, Any] = {"success": True}
	if message is not None:
		body["message"] = message
	if data is not None:
		body["data"] = data
	return body


def page_params(
	page: int = Query(default=DEFAULT_PAGE, ge=1),
	limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> PageParams:
	return PageParams(page=page, limit=limit)
