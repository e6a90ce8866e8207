"""Error envelope helpers and exception handlers.

Error responses share one shape:
    { "error": { "code": "E_...", "message": "...", "request_id": "...", "fields": {...} } }

request_id and fields are only present when known.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.errors import ApiError, ApiErrorCode, ValidationError
from src.api.logging import get_logger, get_request_id

logger = get_logger(__name__)

STATUS_TO_CODE = {
    400: ApiErrorCode.E_INVALID_REQUEST,
    401: ApiErrorCode.E_UNAUTHENTICATED,
    404: ApiErrorCode.E_NOT_FOUND,
    405: ApiErrorCode.E_INVALID_REQUEST,
    409: ApiErrorCode.E_CONFLICT,
    422: ApiErrorCode.E_INVALID_REQUEST,
}


def error_response(
    code: ApiErrorCode,
    message: str,
    fields: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Create an error response envelope."""
    if request_id is None:
        request_id = get_request_id()

    error: Dict[str, Any] = {"code": code.value, "message": message}
    if request_id:
        error["request_id"] = request_id
    if fields:
        error["fields"] = fields
    return {"error": error}


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def _field_errors(exc: RequestValidationError) -> Dict[str, Any]:
    """Flatten pydantic errors into {"body.email": ["value is not a valid email address"]}."""
    fields: Dict[str, Any] = {}
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        fields.setdefault(loc or "request", []).append(err.get("msg", "Invalid value"))
    return fields


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    fields = exc.fields if isinstance(exc, ValidationError) else None
    if exc.status_code >= 500:
        logger.error("api_error", code=exc.code.value, message=exc.message, path=request.url.path)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message, fields=fields, request_id=_request_id(request)),
        headers=headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as a 400 ValidationError."""
    error = ValidationError("Invalid request", fields=_field_errors(exc))
    logger.warning("validation_failed", path=request.url.path, fields=error.fields)
    return await api_error_handler(request, error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = STATUS_TO_CODE.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    message = str(exc.detail) if exc.detail else "An error occurred"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, message, request_id=_request_id(request)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their detail from the caller."""
    logger.error("unhandled_exception", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_response(ApiErrorCode.E_INTERNAL, "Internal server error", request_id=_request_id(request)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
