"""Redis connection management.

Provides a stable proxy object so imports like `from hive.infra.redis import redis_client`
always reference the same proxy instance. The underlying client can be swapped at
runtime (e.g., to fakeredis in tests) without breaking previously imported references.
"""

from __future__ import annotations

import logging

import redis.asyncio as redis

from hive.settings import settings

log = logging.getLogger(__name__)


class RedisProxy:
	"""Lightweight proxy that forwards attribute access to an underlying Redis client."""

	def __init__(self, client: redis.Redis):
		self._client: redis.Redis = client

	def set_client(self, client: redis.Redis) -> None:
		self._client = client

	@property
	def client(self) -> redis.Redis:
		return self._client

	def __getattr__(self, item):
		return getattr(self._client, item)


def _build_client() -> redis.Redis:
	return redis.from_url(settings.resolved_redis_url(), decode_responses=True)


# Connections are opened lazily on first command.
redis_client: RedisProxy = RedisProxy(_build_client())


def set_redis_client(client: redis.Redis) -> None:
	redis_client.set_client(client)


async def close_redis() -> None:
	try:
		await redis_client.client.aclose()
	except redis.RedisError:
		log.warning("redis_close_failed", exc_info=True)
