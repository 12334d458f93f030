"""Input sanitisation for user-authored text."""

from __future__ import annotations

import re
from typing import Any

_SCRIPT_BLOCK_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_JS_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)
_INLINE_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)


def sanitize_text(value: str) -> str:
	value = value.strip()
	value = _SCRIPT_BLOCK_RE.sub("", value)
	value = _JS_SCHEME_RE.sub("", value)
	return _INLINE_HANDLER_RE.sub("", value)


def sanitize_value(value: Any) -> Any:
	"""Sanitise strings, recursing through lists and mappings."""
	if isinstance(value, str):
		return sanitize_text(value)
	if isinstance(value, (list, tuple)):
		return [sanitize_value(item) for item in value]
	if isinstance(value, dict):
		return {key: sanitize_value(item) for key, item in value.items()}
	return value
