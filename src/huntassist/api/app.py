from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from huntassist.api.auth_routes import router as auth_router
from huntassist.api.deps import get_content_generator
from huntassist.api.routes import router as api_router
from huntassist.config import get_settings
from huntassist.db.init import init_database
from huntassist.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConfigurationError,
    ExtractionError,
    GenerationError,
    HuntAssistError,
    InputValidationError,
    NotFoundError,
    PersistenceError,
    UnsupportedFormatError,
    UploadTooLargeError,
)
from huntassist.logging_config import configure_logging

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[HuntAssistError], int] = {
    InputValidationError: 422,
    UnsupportedFormatError: 415,
    ExtractionError: 422,
    GenerationError: 502,
    NotFoundError: 404,
    AccessDeniedError: 403,
    AuthenticationError: 401,
    ConfigurationError: 503,
    PersistenceError: 500,
    UploadTooLargeError: 413,
}


def status_for_error(exc: HuntAssistError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return 500


def error_body(exc: HuntAssistError) -> dict:
    if isinstance(exc, InputValidationError):
        body: dict = {"error": exc.message}
        if exc.field:
            body["field"] = exc.field
        if exc.details:
            body["details"] = exc.details
        return body
    if isinstance(exc, ExtractionError):
        return {"error": "Failed to read the uploaded resume"}
    if isinstance(exc, ConfigurationError):
        return {"error": "AI provider is not configured"}
    if isinstance(exc, PersistenceError) or status_for_error(exc) == 500:
        return {"error": "Internal Server Error"}
    return {"error": exc.message}


async def handle_domain_error(request: Request, exc: HuntAssistError) -> JSONResponse:
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.error("Request failed path=%s status=%s error=%s", request.url.path, status_code, exc)
    else:
        logger.info("Request rejected path=%s status=%s error=%s", request.url.path, status_code, exc)
    return JSONResponse(error_body(exc), status_code=status_code)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Same body shape as InputValidationError; pydantic's ctx may hold exception objects, so it is dropped.
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    logger.info("Request rejected path=%s status=422 errors=%d", request.url.path, len(details))
    return JSONResponse({"error": "Validation failed", "details": details}, status_code=422)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HuntAssistError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.on_event("startup")
    def _startup() -> None:
        configure_logging()
        init_database()
        try:
            get_content_generator()
        except ConfigurationError as exc:
            logger.warning("AI backend unavailable, generation routes will return 503: %s", exc)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(auth_router)
    app.include_router(api_router)
    return app
