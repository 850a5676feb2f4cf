from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from geolocator.logger import logger


def _get_precision_from_request(request: Request) -> str | None:
    """Best-effort extraction of the `precision` query parameter for error payloads."""
    return request.query_params.get("precision")


def _build_validation_error_payload(exc: RequestValidationError) -> dict[str, Any]:
    """Collapse request validation errors into a stable `code`/`message` pair.

    Internal validation details are not exposed to clients.
    """
    code = "invalid_request"
    message = "Invalid request parameters"

    for error in exc.errors():
        loc = error.get("loc", ())
        if len(loc) >= 1 and loc[-1] == "precision":
            code = "invalid_precision"
            message = "precision must be one of: city, country."
            break
        if len(loc) >= 1 and loc[-1] == "ip":
            code = "missing_ip"
            message = "At least one ip query parameter is required."
            break

    return {
        "code": code,
        "message": message,
    }


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle query parameter validation errors with a 400 instead of FastAPI's default 422."""
    precision = _get_precision_from_request(request)
    logger.info(
        "Validation error during request handling "
        f"path={request.url.path} method={request.method} precision={precision} errors={exc.errors()}"
    )
    payload = _build_validation_error_payload(exc)
    payload["precision"] = precision
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors to return a structured 500 response."""
    precision = _get_precision_from_request(request)
    logger.exception(
        "Unhandled exception while processing request: "
        f"{repr(exc)} path={request.url.path} method={request.method} precision={precision}"
    )
    content: dict[str, Any] = {
        "code": "internal_error",
        "message": "An unexpected error occurred while processing the request.",
        "precision": precision,
    }
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
    )
