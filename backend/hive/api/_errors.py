"""Error translation helpers for route handlers."""

from __future__ import annotations

import logging

from hive.domain.errors import HiveError, InternalError

log = logging.getLogger(__name__)


def to_http_error(exc: Exception) -> HiveError:
	"""Pass domain errors through; anything else is logged and becomes a generic 500."""
	if isinstance(exc, HiveError):
		return exc
	log.error("unhandled_route_error", exc_info=(type(exc), exc, exc.__traceback__))
	return InternalError()
