"""Access log for the admin/cron API.

Each call gets a short request id, exposed on request.state (echoed in the
ApiResponse envelope) and in the X-Request-ID response header.

    INFO  POST /api/v1/admin/games/g1/finalize 200 1830ms req_a1b2c3d4e5f6
    WARNING on anything slower than SLOW_REQUEST_MS: finalize runs that long
    risk the caller's timeout and should be resumed with the logged cursor.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.ra_common.response import new_request_id

logger = logging.getLogger("ra.request")

SLOW_REQUEST_MS = 60_000


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = new_request_id()
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        took_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        logger.log(
            logging.WARNING if took_ms > SLOW_REQUEST_MS else logging.INFO,
            "%s %s %d %.0fms %s",
            request.method,
            request.url.path,
            response.status_code,
            took_ms,
            request_id,
        )
        return response
