"""JSON logging with per-request context."""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from hive.settings import settings

# request_id, route, ip and user_id of the request being served.
_CONTEXT: ContextVar[Dict[str, str]] = ContextVar("hive_log_context", default={})

_LOGGER_NAME = "hive"

# Credentials, reset tokens and member emails never reach the log stream.
_REDACTED_KEYS = ("token", "password", "secret", "authorization", "email", "reset")

_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def bind_context(
	*,
	request_id: Optional[str] = None,
	route: Optional[str] = None,
	client_ip: Optional[str] = None,
) -> Token:
	fields = {"request_id": request_id, "route": route, "ip": client_ip}
	return _CONTEXT.set({key: value for key, value in fields.items() if value})


def bind_user(user_id: str) -> None:
	_CONTEXT.set({**_CONTEXT.get(), "user_id": user_id})


def current_request_id() -> Optional[str]:
	return _CONTEXT.get().get("request_id")


def reset_context(token: Token) -> None:
	_CONTEXT.reset(token)


def redact(key: str, value: Any) -> Any:
	lowered = key.lower()
	if any(marker in lowered for marker in _REDACTED_KEYS):
		return "[redacted]"
	if isinstance(value, dict):
		return {str(name): redact(str(name), nested) for name, nested in value.items()}
	return value


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per record: context fields first, then `extra`."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		payload.update(_CONTEXT.get())
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in record.__dict__.items():
			if key in _STANDARD_ATTRS or key in payload:
				continue
			payload[key] = redact(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Randomly sample info-level logs, keep warnings/errors."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = max(0.0, min(1.0, settings.obs_log_sampling_rate_info))
		return rate >= 1.0 or random.random() < rate


def configure_logging() -> logging.Logger:
	root = logging.getLogger()
	root.handlers.clear()
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
