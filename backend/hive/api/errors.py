"""Global error handlers rendering `{success: false, ...}` envelopes with the request id."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hive.domain.errors import HiveError, InternalError, ValidationError
from hive.obs import logging as obs_logging

log = logging.getLogger(__name__)


def get_request_id(request: Request, default: str = "unknown") -> str:
	rid = getattr(request.state, "request_id", None) or obs_logging.current_request_id()
	return rid or request.headers.get("X-Request-Id") or default


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
	errors: List[Dict[str, str]] = []
	for error in exc.errors():
		# Drop the "body"/"query"/"path" prefix from the location.
		location = [str(part) for part in error.get("loc", ())[1:]]
		errors.append({"field": ".".join(location) or "body", "message": str(error.get("msg", "Invalid value"))})
	return errors


def _render(request: Request, error: HiveError) -> JSONResponse:
	payload: Dict[str, Any] = error.payload()
	payload["requestId"] = get_request_id(request)
	return JSONResponse(status_code=error.status_code, content=payload, headers=error.headers or None)


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(HiveError)
	async def hive_error_handler(request: Request, exc: HiveError):  # type: ignore[override]
		return _render(request, exc)

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		return _render(request, ValidationError(errors=_field_errors(exc)))

	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		payload = {
			"success": False,
			"message": str(exc.detail),
			"code": "http_error",
			"requestId": get_request_id(request),
		}
		return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

	@app.exception_handler(Exception)
	async def unhandled_exc_handler(request: Request, exc: Exception):  # type: ignore[override]
		log.error("unhandled_exception", exc_info=(type(exc), exc, exc.__traceback__))
		return _render(request, InternalError())
