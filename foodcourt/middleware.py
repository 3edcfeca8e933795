"""
Request Logging Middleware

Logs one line when a request arrives and one when its response has been
fully sent, with the status code and elapsed time in milliseconds.
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("foodcourt.requests")


class RequestLoggerMiddleware:
    """Pure ASGI middleware so the completion line follows the last body chunk."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        method = scope["method"]
        path = scope["path"]
        client = scope.get("client")
        client_addr = client[0] if client else "-"
        headers = dict(scope.get("headers") or [])
        user_agent = headers.get(b"user-agent", b"-").decode("latin-1")

        logger.info(f"Incoming request {method} {path} from {client_addr} ({user_agent})")

        status_code = 500
        completed = False

        def log_completed() -> None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(f"Request completed {method} {path} {status_code} in {duration_ms:.1f}ms")

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code, completed
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                completed = True
                log_completed()

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if not completed:
                log_completed()
