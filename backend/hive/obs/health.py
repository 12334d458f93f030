"""Health check helpers for liveness and readiness probes."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Dict, Tuple

from pymongo.errors import PyMongoError
from redis.exceptions import RedisError

from hive.infra import documents
from hive.infra.redis import redis_client
from hive.obs import metrics

LOGGER = logging.getLogger(__name__)


async def _redis_status(timeout: float = 0.2) -> Dict[str, Any]:
	start = perf_counter()
	try:
		await asyncio.wait_for(redis_client.ping(), timeout=timeout)
	except (RedisError, OSError, asyncio.TimeoutError) as exc:
		metrics.mark_redis(False)
		LOGGER.warning("Redis readiness check failed", exc_info=True)
		return {"ok": False, "error": str(exc) or exc.__class__.__name__}
	metrics.mark_redis(True)
	return {"ok": True, "latency_ms": round((perf_counter() - start) * 1000, 2)}


async def _store_status(timeout: float = 0.5) -> Dict[str, Any]:
	start = perf_counter()
	try:
		store = await documents.get_store()
		await asyncio.wait_for(store.ping(), timeout=timeout)
	except (PyMongoError, OSError, asyncio.TimeoutError) as exc:
		metrics.mark_store(False)
		LOGGER.warning("Document store readiness check failed", exc_info=True)
		return {"ok": False, "error": str(exc) or exc.__class__.__name__}
	metrics.mark_store(True)
	return {"ok": True, "latency_ms": round((perf_counter() - start) * 1000, 2)}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	redis_state, store_state = await asyncio.gather(_redis_status(), _store_status())
	ok = bool(redis_state.get("ok") and store_state.get("ok"))
	return (
		200 if ok else 503,
		{
			"status": "ok" if ok else "degraded",
			"checks": {"redis": redis_state, "documents": store_state},
		},
	)
