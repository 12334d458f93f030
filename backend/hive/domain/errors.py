"""Error taxonomy shared by the Hive services and routers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import status


class HiveError(Exception):
	"""Base class for errors rendered as `{success: false, ...}` envelopes."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	code: str = "error"
	message: str = "Request failed"

	def __init__(
		self,
		message: str | None = None,
		*,
		code: str | None = None,
		headers: Optional[Dict[str, str]] = None,
	) -> None:
		super().__init__(message or self.message)
		if message:
			self.message = message
		if code:
			self.code = code
		self.headers: Dict[str, str] = dict(headers or {})

	def payload(self) -> Dict[str, Any]:
		return {"success": False, "message": self.message, "code": self.code}


class ValidationError(HiveError):
	"""Malformed or out-of-range input."""

	status_code = status.HTTP_400_BAD_REQUEST
	code = "validation_error"
	message = "Validation failed"

	def __init__(self, message: str | None = None, *, errors: Optional[List[Dict[str, str]]] = None, **kwargs: Any) -> None:
		super().__init__(message, **kwargs)
		self.errors = list(errors or [])

	@classmethod
	def for_field(cls, field: str, message: str) -> "ValidationError":
		return cls(errors=[{"field": field, "message": message}])

	def payload(self) -> Dict[str, Any]:
		body = super().payload()
		if self.errors:
			body["errors"] = self.errors
		return body


class Conflict(HiveError):
	# The public API has always reported duplicates as a plain 400.
	status_code = status.HTTP_400_BAD_REQUEST
	code = "conflict"
	message = "Resource already exists"


class Unauthenticated(HiveError):
	status_code = status.HTTP_401_UNAUTHORIZED
	code = "unauthenticated"
	message = "Not authorized to access this route"


class TokenRevoked(Unauthenticated):
	code = "token_revoked"
	message = "Token has been revoked"


class InvalidToken(Unauthenticated):
	code = "invalid_token"
	message = "Not authorized to access this route"


class UserNotFound(Unauthenticated):
	code = "user_not_found"
	message = "User not found"


class AccountDeactivated(Unauthenticated):
	code = "account_deactivated"
	message = "Account is deactivated"


class Forbidden(HiveError):
	status_code = status.HTTP_403_FORBIDDEN
	code = "forbidden"
	message = "Not authorized to perform this action"


class NotFound(HiveError):
	status_code = status.HTTP_404_NOT_FOUND
	code = "not_found"
	message = "Resource not found"


class RateLimited(HiveError):
	status_code = status.HTTP_429_TOO_MANY_REQUESTS
	code = "rate_limited"
	message = "Too many requests, please try again later"

	def __init__(self, retry_after: int, **kwargs: Any) -> None:
		super().__init__(**kwargs)
		self.retry_after = max(1, int(retry_after))
		self.headers.setdefault("Retry-After", str(self.retry_after))

	def payload(self) -> Dict[str, Any]:
		body = super().payload()
		body["retryAfter"] = self.retry_after
		return body


class InternalError(HiveError):
	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	code = "internal_error"
	message = "Server error"
