"""Global error handlers; every JSON error body carries the request id."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clubsphere.domain.errors import DomainError, PaymentProcessorError, WebhookSignatureError
from clubsphere.obs import logging as obs_logging

logger = obs_logging.get_logger("clubsphere.http")


def _request_id(request: Request) -> str:
	return getattr(request.state, "request_id", None) or obs_logging.current_request_id()


def _body(request: Request, detail: str, message: str | None = None) -> dict:
	return {"detail": detail, "message": message or detail, "request_id": _request_id(request)}


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(DomainError)
	async def domain_exc_handler(request: Request, exc: DomainError):  # type: ignore[override]
		return JSONResponse(status_code=exc.status_code, content=_body(request, exc.detail, exc.message))

	@app.exception_handler(WebhookSignatureError)
	async def webhook_exc_handler(request: Request, exc: WebhookSignatureError):  # type: ignore[override]
		return JSONResponse(status_code=exc.status_code, content=_body(request, exc.detail, str(exc)))

	@app.exception_handler(PaymentProcessorError)
	async def processor_exc_handler(request: Request, exc: PaymentProcessorError):  # type: ignore[override]
		logger.error("payment_processor_error", extra={"error": str(exc), "path": request.url.path})
		return JSONResponse(status_code=exc.status_code, content=_body(request, exc.detail))

	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		return JSONResponse(
			status_code=exc.status_code,
			content=_body(request, str(exc.detail)),
			headers=getattr(exc, "headers", None),
		)

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		payload = _body(request, "validation_error")
		payload["errors"] = jsonable_errors(exc)
		return JSONResponse(status_code=422, content=payload)

	@app.exception_handler(Exception)
	async def unhandled_exc_handler(request: Request, exc: Exception):  # type: ignore[override]
		logger.exception("unhandled_error", extra={"path": request.url.path, "method": request.method})
		return JSONResponse(status_code=500, content=_body(request, "internal_error"))


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
	errors = []
	for item in exc.errors():
		errors.append({"loc": list(item.get("loc", ())), "msg": item.get("msg"), "type": item.get("type")})
	return errors
