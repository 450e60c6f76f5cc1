"""
Request logging middleware with request ID tracking.
"""
import time
import uuid
from contextvars import ContextVar

from hail_sync.core.logging_config import log_error, log_info, log_warning

# Request ID for the request being handled, readable from exception handlers
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="unknown")

SLOW_REQUEST_MS = 10000


class RequestLoggingMiddleware:
    """
    ASGI middleware that tags every HTTP request with an ID, returns it as
    x-request-id and logs the outcome with its duration.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        request_id_ctx.set(request_id)
        started = time.perf_counter()
        request_line = f"{scope.get('method', 'UNKNOWN')} {scope.get('path', '/')}"
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                message["headers"] = [*message.get("headers", []), (b"x-request-id", request_id.encode())]
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            message = f"{request_line} -> {status_code}"
            if status_code >= 500:
                log_error(message, request_id=request_id, duration_ms=duration_ms)
            elif status_code >= 400 or duration_ms >= SLOW_REQUEST_MS:
                log_warning(message, request_id=request_id, duration_ms=duration_ms)
            else:
                log_info(message, request_id=request_id, duration_ms=duration_ms)
