"""Error taxonomy shared by the pipeline and the HTTP layer.

Every error renders as ``{"error": message, ...extra}`` with the status code
carried by its class.
"""
from __future__ import annotations
import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
	status_code = 500

	def __init__(self, message: str, **extra: Any) -> None:
		super().__init__(message)
		self.message = message
		self.extra: Dict[str, Any] = extra


class ValidationError(AppError):
	status_code = 400


class AuthError(AppError):
	status_code = 401


class ForbiddenError(AuthError):
	status_code = 403


class NotFoundError(AppError):
	status_code = 404


class ConflictError(AppError):
	status_code = 409


class RateLimitError(AppError):
	status_code = 429


class UpstreamError(AppError):
	"""The completion API failed, timed out or returned nothing usable."""


class ParseError(UpstreamError):
	"""Model output could not be turned into the expected JSON value."""


class PersistenceError(AppError):
	"""Database constraint or connectivity failure."""


def _error_response(status_code: int, message: str, extra: Dict[str, Any] | None = None) -> JSONResponse:
	body: Dict[str, Any] = {"error": message}
	if extra:
		body.update(extra)
	return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(AppError)
	async def _app_error(request: Request, exc: AppError):
		if exc.status_code >= 500:
			logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
		return _error_response(exc.status_code, exc.message, exc.extra)

	@app.exception_handler(RequestValidationError)
	async def _request_validation(request: Request, exc: RequestValidationError):
		errors = exc.errors()
		first = errors[0] if errors else {}
		loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
		message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg", "invalid request"))
		return _error_response(400, message)

	@app.exception_handler(HTTPException)
	async def _http_exception(request: Request, exc: HTTPException):
		return _error_response(exc.status_code, str(exc.detail))

	@app.exception_handler(Exception)
	async def _unhandled(request: Request, exc: Exception):
		logger.exception("%s %s crashed", request.method, request.url.path)
		return _error_response(500, "Internal server error")
