"""
Main entrypoint for the Task Manager API.

This module assembles the FastAPI application: it sets up logging,
CORS and request logging middleware, registers the API routers and
applies database migrations on startup.  The ``create_app`` function
builds the app, which is then instantiated at module import time as
``app`` so it can be served directly, e.g.::

    uvicorn task_manager_api.app.main:app --reload
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.responses import error_body
from .api.router import router
from .core.config import settings
from .core.db import init_db
from .core.errors import ValidationError
from .core.logging_config import setup_logging


REQUEST_ID_HEADER = "X-Request-ID"


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that the setup below
    # can log.
    setup_logging()
    logger = logging.getLogger("task_manager_api.requests")

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed request_id=%s", request.method, request.url.path, request_id
            )
            raise
        duration_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "%s %s %s %.1fms request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
        )
        return response

    # Handlers validate their own input; this only catches bodies that
    # are not valid JSON, which FastAPI rejects before the handler runs.
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())) or "body",
                "message": error.get("msg", "Invalid value"),
                "code": "VALIDATION_ERROR",
            }
            for error in exc.errors()
        ]
        error = ValidationError(details)
        return JSONResponse(status_code=error.status_code, content=error_body(error))

    app.include_router(router)

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and brings the schema up
        # to date.
        init_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
