import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cadence.config import settings
from cadence.exceptions import DataSourceError, InvalidInputError
from cadence.api.middleware import add_request_id, enforce_body_size, log_requests

# Routers
from cadence.api.routers import analytics, system

# Configure logging
logging.basicConfig(level=getattr(logging, settings.logging.level.upper(), logging.INFO))
logger = logging.getLogger("cadence.api")


def _error_payload(request: Request, error: str, detail: str) -> dict:
    payload = {"error": error, "detail": detail}
    rid = getattr(request.state, "request_id", None)
    if rid:
        payload["request_id"] = rid
    return payload


def create_app() -> FastAPI:
    """
    Factory to build the FastAPI application.
    The API only computes: every request carries its own series snapshot.
    """
    app = FastAPI(title="Cadence API", version=settings.app.version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Custom Middleware, last registered runs first: request ids wrap everything
    if settings.logging.log_requests:
        app.middleware("http")(log_requests)
    app.middleware("http")(enforce_body_size)
    app.middleware("http")(add_request_id)

    app.include_router(system.router)
    app.include_router(analytics.router)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        if isinstance(exc, StarletteHTTPException):
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

        rid = getattr(request.state, "request_id", None)
        logger.exception("Unhandled error", extra={"path": str(request.url), "request_id": rid})
        return JSONResponse(
            status_code=500,
            content=_error_payload(request, "internal_error", "Unexpected server error"),
        )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=422, content=_error_payload(request, "invalid_input", str(exc)))

    @app.exception_handler(DataSourceError)
    async def datasource_exception_handler(request: Request, exc: DataSourceError):
        return JSONResponse(status_code=422, content=_error_payload(request, "invalid_source", str(exc)))

    return app

# Module-level app for uvicorn entrypoint
app = create_app()
