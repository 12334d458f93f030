"""Server-side revocation registry for bearer tokens.

Revoked tokens live in one Redis sorted set whose score is the instant each
token stops needing to be remembered. Every token therefore keeps its own
expiry; the key TTL only ever grows to cover the latest entry, so a
short-lived token can no longer drop earlier revocations with it.

Store failures fail open: `is_revoked` answers False and `revoke` reports
False, both logged and counted.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from redis.exceptions import RedisError

from hive.infra import jwt as token_codec
from hive.infra.redis import redis_client
from hive.obs import metrics as obs_metrics
from hive.settings import settings

log = logging.getLogger(__name__)

REGISTRY_KEY = "jwt_blacklist"


class RevocationRegistry:
	def __init__(
		self,
		client=None,
		*,
		key: str = REGISTRY_KEY,
		fallback_ttl_seconds: Optional[int] = None,
		clock: Callable[[], float] = time.time,
	) -> None:
		self._client = client
		self._key = key
		self._fallback_ttl = fallback_ttl_seconds
		self._clock = clock

	@property
	def client(self):
		return self._client if self._client is not None else redis_client

	def _ttl_for(self, token: str, ttl: Optional[int], now: float) -> int:
		if ttl is not None:
			return int(ttl)
		exp = token_codec.read_expiry(token)
		if exp is not None:
			return int(exp - now)
		if self._fallback_ttl is not None:
			return self._fallback_ttl
		return settings.revocation_fallback_ttl_seconds

	async def revoke(self, token: str, ttl: Optional[int] = None) -> bool:
		now = self._clock()
		ttl_seconds = self._ttl_for(token, ttl, now)
		if ttl_seconds <= 0:
			# Already expired; verification rejects it without our help.
			return True
		try:
			await self.client.zremrangebyscore(self._key, "-inf", now)
			await self.client.zadd(self._key, {token: now + ttl_seconds})
			current = await self.client.ttl(self._key)
			if current < ttl_seconds:
				await self.client.expire(self._key, ttl_seconds)
		except RedisError:
			log.warning("revocation_store_unavailable", extra={"op": "revoke"}, exc_info=True)
			obs_metrics.inc_revocation_store_failure("revoke")
			return False
		obs_metrics.inc_token_revoked()
		return True

	async def is_revoked(self, token: str) -> bool:
		try:
			score = await self.client.zscore(self._key, token)
		except RedisError:
			log.warning("revocation_store_unavailable", extra={"op": "is_revoked"}, exc_info=True)
			obs_metrics.inc_revocation_store_failure("is_revoked")
			return False
		return score is not None and float(score) > self._clock()

	async def unrevoke(self, token: str) -> bool:
		try:
			await self.client.zrem(self._key, token)
		except RedisError:
			log.warning("revocation_store_unavailable", extra={"op": "unrevoke"}, exc_info=True)
			return False
		return True

	async def list_all(self) -> List[str]:
		try:
			members = await self.client.zrangebyscore(self._key, f"({self._clock()}", "+inf")
		except RedisError:
			log.warning("revocation_store_unavailable", extra={"op": "list_all"}, exc_info=True)
			return []
		return [str(member) for member in members]

	async def clear(self) -> bool:
		try:
			await self.client.delete(self._key)
		except RedisError:
			log.warning("revocation_store_unavailable", extra={"op": "clear"}, exc_info=True)
			return False
		return True

	async def size(self) -> int:
		try:
			return int(await self.client.zcount(self._key, f"({self._clock()}", "+inf"))
		except RedisError:
			log.warning("revocation_store_unavailable", extra={"op": "size"}, exc_info=True)
			return 0


_registry = RevocationRegistry()


def get_registry() -> RevocationRegistry:
	return _registry


def set_registry(registry: RevocationRegistry) -> None:
	global _registry
	_registry = registry
