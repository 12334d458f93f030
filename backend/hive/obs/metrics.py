"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"hive_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"hive_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

RATE_LIMIT_DECISIONS = Counter(
	"hive_rate_limit_decisions_total",
	"Rate limiter decisions per limiter",
	["limiter", "outcome"],
)

RATE_LIMIT_STORE_FAILURES = Counter(
	"hive_rate_limit_store_failures_total",
	"Requests allowed because the rate limit store was unreachable",
	["limiter"],
)

AUTH_FAILURES = Counter(
	"hive_auth_failures_total",
	"Rejected authentication attempts",
	["reason"],
)

TOKENS_REVOKED = Counter(
	"hive_tokens_revoked_total",
	"Bearer tokens added to the revocation registry",
)

REVOCATION_STORE_FAILURES = Counter(
	"hive_revocation_store_failures_total",
	"Revocation registry operations that failed open",
	["op"],
)

CONTENT_CREATED = Counter(
	"hive_content_created_total",
	"Threads, posts and replies created",
	["kind"],
)

REDIS_UP = Gauge("hive_redis_up", "Redis readiness (1 up, 0 down)")
STORE_UP = Gauge("hive_document_store_up", "Document store readiness (1 up, 0 down)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_rate_limit_decision(limiter: str, outcome: str) -> None:
	RATE_LIMIT_DECISIONS.labels(limiter=limiter, outcome=outcome).inc()


def inc_rate_limit_store_failure(limiter: str) -> None:
	RATE_LIMIT_STORE_FAILURES.labels(limiter=limiter).inc()


def inc_auth_failure(reason: str) -> None:
	AUTH_FAILURES.labels(reason=reason).inc()


def inc_token_revoked() -> None:
	TOKENS_REVOKED.inc()


def inc_revocation_store_failure(op: str) -> None:
	REVOCATION_STORE_FAILURES.labels(op=op).inc()


def inc_content_created(kind: str) -> None:
	CONTENT_CREATED.labels(kind=kind).inc()


def mark_redis(ok: bool) -> None:
	REDIS_UP.set(1 if ok else 0)


def mark_store(ok: bool) -> None:
	STORE_UP.set(1 if ok else 0)
