from fastapi import APIRouter
from datetime import datetime
import logging
import time
import pytz

from dataBase import check_connection
from utils.response import create_response

logger = logging.getLogger(__name__)

router = APIRouter()

START_TIME = datetime.now(pytz.utc)


def format_uptime(seconds: int) -> str:
    """
    Formats a duration as "1d 2h 3m 4s", omitting the leading zero units.
    """
    days, remainder = divmod(int(seconds), 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if days or hours:
        parts.append(f"{hours}h")
    if days or hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)


def uptime_info() -> dict:
    now = datetime.now(pytz.utc)
    seconds = int((now - START_TIME).total_seconds())
    return {
        "startTime": START_TIME.isoformat(),
        "uptimeSeconds": seconds,
        "uptimeFormatted": format_uptime(seconds),
    }


@router.get("")
def health():
    """
    Liveness probe; does not touch the database.
    """
    return create_response("success", "Service is running", {
        "status": "ok",
        "uptime": uptime_info(),
        "timestamp": datetime.now(pytz.utc).isoformat(),
    })


@router.get("/ready")
def readiness():
    """
    Readiness probe: checks that the database answers.

    **Responses**:
    - **200 OK**: Database reachable.
    - **503 Service Unavailable**: Database unreachable.
    """
    started = time.perf_counter()
    database_up = check_connection()
    response_time_ms = round((time.perf_counter() - started) * 1000, 2)

    data = {
        "status": "ok" if database_up else "error",
        "database": {
            "status": "up" if database_up else "down",
            "responseTimeMs": response_time_ms,
        },
        "uptime": uptime_info(),
        "timestamp": datetime.now(pytz.utc).isoformat(),
    }

    if not database_up:
        logger.error("Readiness check failed: database unreachable")
        return create_response("error", "Database unavailable", data, status_code=503)
    return create_response("success", "Service is ready", data)
