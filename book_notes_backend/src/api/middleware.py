"""X-Request-ID middleware for request correlation and access logging.

Must be added last so it runs first and wraps every other middleware.
"""

import re
import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.errors import ApiErrorCode
from src.api.logging import clear_request_context, get_logger, set_request_id, set_user_id
from src.api.responses import error_response

REQUEST_ID_HEADER = "X-Request-ID"

# Alphanumeric, dots, hyphens, underscores; at most 128 chars
VALID_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

logger = get_logger(__name__)


def resolve_request_id(incoming: str) -> str:
    """Keep a well-formed incoming id, otherwise generate a UUID4."""
    if incoming and VALID_REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.monotonic()
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        request.state.request_id = request_id
        set_request_id(request_id)

        try:
            response = await call_next(request)

            # The auth gate binds the caller to request.state.user
            user = getattr(request.state, "user", None)
            if user is not None:
                set_user_id(str(user.id))

            response.headers[REQUEST_ID_HEADER] = request_id
            if self.log_requests:
                logger.info(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                )
            return response
        except Exception:
            # Reached before the outer error middleware, which would drop the header
            logger.exception("request_failed", method=request.method, path=request.url.path)
            return JSONResponse(
                status_code=500,
                content=error_response(ApiErrorCode.E_INTERNAL, "Internal server error", request_id=request_id),
                headers={REQUEST_ID_HEADER: request_id},
            )
        finally:
            clear_request_context()
