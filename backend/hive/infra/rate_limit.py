"""Redis-backed sliding-window rate limiting.

Each key stores the JSON list of request timestamps (milliseconds) seen in
the current window. A check prunes timestamps older than `now - window`,
rejects when the remainder already reaches the budget, and otherwise appends
`now` and writes the list back with a TTL equal to the window.

The read-then-write is not atomic: concurrent requests on the same key can
under- or over-count within a window. That is acceptable for throttling.

When Redis is unreachable the request is allowed (fail-open).
"""

import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from fastapi import Request, Response
from redis.exceptions import RedisError

from hive.domain.errors import RateLimited
from hive.infra.redis import redis_client
from hive.obs import metrics as obs_metrics
from hive.settings import settings

log = logging.getLogger(__name__)

KeyFunc = Callable[[Request], str]


@dataclass(slots=True)
class RateLimitDecision:
	allowed: bool
	limit: int
	remaining: int
	reset_at: int
	retry_after: int = 0

	def headers(self) -> Dict[str, str]:
		return {
			"X-RateLimit-Limit": str(self.limit),
			"X-RateLimit-Remaining": str(self.remaining),
			"X-RateLimit-Reset": str(self.reset_at),
		}


def client_ip(request: Request) -> str:
	client = request.client
	return client.host if client else "unknown"


def by_ip(prefix: str) -> KeyFunc:
	def _key(request: Request) -> str:
		return f"{prefix}:{client_ip(request)}"

	return _key


def by_user_or_ip(prefix: str) -> KeyFunc:
	"""Key on the authenticated user when the auth gate resolved one."""

	def _key(request: Request) -> str:
		user = getattr(request.state, "user", None)
		actor = getattr(user, "id", None) or client_ip(request)
		return f"{prefix}:{actor}"

	return _key


def _decode(raw: Optional[str]) -> List[int]:
	if not raw:
		return []
	try:
		values = json.loads(raw)
	except ValueError:
		return []
	if not isinstance(values, list):
		return []
	return [int(v) for v in values if isinstance(v, (int, float))]


class SlidingWindowLimiter:
	def __init__(
		self,
		name: str,
		*,
		window_ms: int,
		max_requests: int,
		key_func: KeyFunc,
		client=None,
		clock: Callable[[], float] = time.time,
	) -> None:
		if window_ms <= 0 or max_requests <= 0:
			raise ValueError("window_ms and max_requests must be positive")
		self.name = name
		self.window_ms = int(window_ms)
		self.max_requests = int(max_requests)
		self.key_func = key_func
		self._client = client
		self._clock = clock

	@property
	def client(self):
		return self._client if self._client is not None else redis_client

	async def hit(self, key: str, *, now_ms: Optional[int] = None) -> RateLimitDecision:
		"""Record one request against `key` and return the resulting decision."""
		now = int(now_ms if now_ms is not None else self._clock() * 1000)
		window_start = now - self.window_ms
		try:
			stamps = _decode(await self.client.get(key))
			recent = [stamp for stamp in stamps if stamp > window_start]
			if len(recent) >= self.max_requests:
				oldest = recent[0]
				decision = RateLimitDecision(
					allowed=False,
					limit=self.max_requests,
					remaining=0,
					reset_at=math.ceil((oldest + self.window_ms) / 1000),
					retry_after=max(1, math.ceil((oldest + self.window_ms - now) / 1000)),
				)
				obs_metrics.inc_rate_limit_decision(self.name, "rejected")
				return decision
			recent.append(now)
			await self.client.set(key, json.dumps(recent), ex=math.ceil(self.window_ms / 1000))
		except RedisError:
			log.warning("rate_limit_store_unavailable", extra={"limiter": self.name}, exc_info=True)
			obs_metrics.inc_rate_limit_store_failure(self.name)
			return RateLimitDecision(
				allowed=True,
				limit=self.max_requests,
				remaining=self.max_requests,
				reset_at=math.ceil((now + self.window_ms) / 1000),
			)
		obs_metrics.inc_rate_limit_decision(self.name, "allowed")
		return RateLimitDecision(
			allowed=True,
			limit=self.max_requests,
			remaining=max(0, self.max_requests - len(recent)),
			reset_at=math.ceil((recent[0] + self.window_ms) / 1000),
		)

	async def check(self, request: Request) -> RateLimitDecision:
		return await self.hit(self.key_func(request))

	async def __call__(self, request: Request, response: Response) -> None:
		"""FastAPI dependency: set rate-limit headers or raise RateLimited."""
		if not settings.rate_limit_enabled:
			return None
		decision = await self.check(request)
		if not decision.allowed:
			raise RateLimited(decision.retry_after, headers=decision.headers())
		for header, value in decision.headers().items():
			response.headers[header] = value
		return None


# Authentication endpoints: 20 attempts per 15 minutes per IP
auth_limiter = SlidingWindowLimiter("auth", window_ms=15 * 60 * 1000, max_requests=20, key_func=by_ip("auth_limit"))
# General API: 100 requests per minute per IP
api_limiter = SlidingWindowLimiter("api", window_ms=60 * 1000, max_requests=100, key_func=by_ip("api_limit"))
# Content creation: 10 per minute per user
content_limiter = SlidingWindowLimiter("content", window_ms=60 * 1000, max_requests=10, key_func=by_user_or_ip("post_limit"))
search_limiter = SlidingWindowLimiter("search", window_ms=60 * 1000, max_requests=30, key_func=by_ip("search_limit"))
upload_limiter = SlidingWindowLimiter("upload", window_ms=60 * 1000, max_requests=5, key_func=by_user_or_ip("upload_limit"))

LIMITERS: Dict[str, SlidingWindowLimiter] = {
	limiter.name: limiter
	for limiter in (auth_limiter, api_limiter, content_limiter, search_limiter, upload_limiter)
}
