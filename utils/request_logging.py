import logging
import time
import uuid
from typing import Mapping

from fastapi import Request

from utils.config import API_BASE_PATH

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REDACTED = "***REDACTED***"
SENSITIVE_FIELDS = {"password", "token", "accesstoken", "authorization", "secret", "apikey"}
EXCLUDED_PATHS = (f"{API_BASE_PATH}/health",)


def redact(values: Mapping) -> dict:
    """
    Copy of `values` with sensitive fields (password, tokens, secrets) masked.
    Field names are matched case-insensitively.
    """
    return {key: REDACTED if key.lower() in SENSITIVE_FIELDS else value for key, value in values.items()}


def get_correlation_id(request: Request) -> str:
    correlation_id = request.headers.get(CORRELATION_ID_HEADER, "").strip()
    if not correlation_id or len(correlation_id) > 128:
        correlation_id = str(uuid.uuid4())
    return correlation_id


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def is_excluded(path: str) -> bool:
    return path.startswith(EXCLUDED_PATHS)


async def log_requests(request: Request, call_next):
    """
    HTTP middleware that tags every request with a correlation ID and logs it.

    The ID comes from the X-Correlation-ID header or is generated, is kept in
    `request.state.correlation_id` and is echoed in the response header.
    Health checks get the header but are not logged.
    """
    correlation_id = get_correlation_id(request)
    request.state.correlation_id = correlation_id
    path = request.url.path
    logged = not is_excluded(path)

    if logged:
        logger.info(
            "[%s] %s %s query=%s ip=%s",
            correlation_id, request.method, path, redact(request.query_params), get_client_ip(request),
        )

    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.error("[%s] %s %s failed after %.1fms: %s", correlation_id, request.method, path, duration_ms, e)
        raise

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[CORRELATION_ID_HEADER] = correlation_id
    if logged:
        logger.info(
            "[%s] %s %s -> %s in %.1fms",
            correlation_id, request.method, path, response.status_code, duration_ms,
        )
    return response
