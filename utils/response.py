from fastapi import Request
from fastapi.exceptions import RequestValidationError, HTTPException
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from typing import Any, Optional
from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from enum import Enum
import logging

logger = logging.getLogger(__name__)


def to_serializable(value: Any) -> Any:
    """
    Converts response data into JSON friendly values.

    Pydantic models are dumped, Decimals become floats, datetimes become
    ISO-8601 strings and enums their values. Dicts and lists are walked.
    """
    if isinstance(value, BaseModel):
        return to_serializable(value.model_dump())
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_serializable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(item) for item in value]
    return value


def create_response(
    status: str,
    message: str,
    data: Optional[Any] = None,
    status_code: int = 200
) -> JSONResponse:
    """
    Builds the JSON envelope returned by every endpoint of the API.

    Args:
        status (str): "success" or "error".
        message (str): Human readable description of the outcome.
        data (Optional[Any], optional): Payload. Defaults to an empty dict.
        status_code (int, optional): HTTP status code. Defaults to 200.

    Returns:
        JSONResponse: {"status": ..., "message": ..., "data": ...}
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "status": status,
            "message": message,
            "data": {} if data is None else to_serializable(data)
        }
    )


def format_validation_error(error: dict) -> str:
    # ("body", "totalArea") -> "totalArea"; ("path", "id") -> "id"
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
    field = ".".join(location) or "request"
    return f"{field}: {error.get('msg', 'invalid value')}"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Renders request validation errors as 400 responses naming the offending fields.
    """
    errors = [format_validation_error(error) for error in exc.errors()]
    logger.warning("Invalid request to %s: %s", request.url.path, "; ".join(errors))
    return create_response("error", "; ".join(errors), {"errors": errors}, status_code=400)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Renders HTTPException (including 404 for unknown routes) in the common envelope.
    """
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    response = create_response("error", message, status_code=exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def not_found_response(entity: str, entity_id: Any) -> JSONResponse:
    logger.warning("%s with ID %s not found", entity, entity_id)
    return create_response("error", f"{entity} with ID {entity_id} not found", status_code=404)


def unauthorized_exception(message: str = "Invalid or missing token") -> HTTPException:
    return HTTPException(status_code=401, detail=message, headers={"WWW-Authenticate": "Bearer"})
