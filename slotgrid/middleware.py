import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class HTTPLogMiddleware(BaseHTTPMiddleware):
    """Log each request and stamp its duration on the response.

    Requests slower than ``slow_ms`` are logged at WARNING; everything else at
    DEBUG.
    """

    def __init__(self, app, logger_name: str = "slotgrid.http", slow_ms: int = 1000):
        super().__init__(app)
        self._logger = logging.getLogger(logger_name)
        self._slow_ms = slow_ms

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        try:
            response: Response = await call_next(request)
        except Exception as e:
            dur_ms = int((time.perf_counter() - start) * 1000)
            self._logger.warning("http.request error method=%s path=%s dur_ms=%s err=%r",
                                 method, path, dur_ms, e)
            raise
        dur_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Response-Time-Ms"] = str(dur_ms)
        level = logging.WARNING if dur_ms >= self._slow_ms else logging.DEBUG
        self._logger.log(level, "http.request method=%s path=%s status=%s dur_ms=%s",
                         method, path, response.status_code, dur_ms)
        return response
