"""
Global middleware and error handlers.

Every response carries permissive CORS headers. Pre-flight requests are
answered here without reaching any route or authentication.

This is the only place errors are turned into responses:
- SyncServiceError -> its status code, `{"error": message, ...}`
- request validation / HTTP errors -> `{"error": message}`
- anything else -> 500, `{"error": str(exc)}`
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.shared.errors import SyncServiceError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}


def register_middleware(app: FastAPI) -> None:
    """Attach CORS and fault-normalizing middleware."""

    @app.middleware("http")
    async def cors_and_faults(request: Request, call_next):
        if request.method == "OPTIONS":
            return PlainTextResponse("ok", headers=CORS_HEADERS)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            response = JSONResponse(
                {"error": str(exc) or exc.__class__.__name__},
                status_code=500,
            )

        response.headers.update(CORS_HEADERS)
        return response


def register_exception_handlers(app: FastAPI) -> None:
    """Map typed errors to the JSON error envelope."""

    @app.exception_handler(SyncServiceError)
    async def service_error_handler(request: Request, exc: SyncServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)
