import logging
import time
from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse

from cadence.config import settings

logger = logging.getLogger("cadence.api")

REQUEST_ID_HEADER = "x-request-id"
TIMING_HEADER = "x-compute-ms"


async def add_request_id(request: Request, call_next):
    """Tags each request with a caller-supplied or generated id and echoes it back."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def _declared_length(request: Request):
    raw = request.headers.get("content-length")
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


async def enforce_body_size(request: Request, call_next):
    """Rejects snapshots whose declared size exceeds the configured cap."""
    limit_mb = settings.security.max_upload_mb
    length = _declared_length(request)
    if length is not None and length > limit_mb * 1024 * 1024:
        logger.warning(f"Rejected {request.url.path}: body of {length} bytes exceeds {limit_mb}MB")
        payload = {"error": "request_too_large", "detail": f"Snapshot bodies are capped at {limit_mb}MB"}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            payload["request_id"] = request_id
        return JSONResponse(status_code=413, content=payload)
    return await call_next(request)


async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    status = "error"
    try:
        response = await call_next(request)
        status = response.status_code
        response.headers[TIMING_HEADER] = f"{(time.perf_counter() - started) * 1000:.1f}"
        return response
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {status} in {elapsed_ms:.1f}ms "
            f"(request_id={getattr(request.state, 'request_id', None)})"
        )
