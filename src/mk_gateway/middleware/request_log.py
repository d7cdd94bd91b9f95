"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency and a short
request ID. The ID is stored on request.state for ApiResponse envelopes and
echoed back in the X-Request-ID header; a client-supplied X-Request-ID is
reused when present.

Log format:
    INFO [POST] /api/v1/orders/batch -> 200 (412ms) req_a1b2c3d4e5f6
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.mk_common.response import new_request_id

logger = logging.getLogger("mk.request")

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_CLIENT_ID_LENGTH = 64


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        supplied = request.headers.get(REQUEST_ID_HEADER, "")
        if supplied and len(supplied) <= _MAX_CLIENT_ID_LENGTH and supplied.isprintable():
            request.state.request_id = supplied
        else:
            request.state.request_id = new_request_id()

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        logger.info(
            "[%s] %s -> %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        return response
