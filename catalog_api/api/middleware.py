"""API middleware for the catalog service.

Provides:
- Request ID correlation and request logging
- Client IP resolution
- Error handling (unhandled exceptions become 500)
- Request timeout ceiling
"""

import asyncio
import json
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = structlog.get_logger()


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing

    Also logs one line per completed request.
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None

        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code if response is not None else 500,
                duration_ms=round(duration_ms, 2),
                client_ip=getattr(request.state, "client_ip", None),
            )

            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id

        return response


# ============================================================================
# Client IP Middleware
# ============================================================================


class ClientIpMiddleware(BaseHTTPMiddleware):
    """Middleware resolving the originating client IP.

    Checks ``X-Forwarded-For`` (first hop), then ``X-Real-IP``, then the
    socket peer address. The result is stored on ``request.state.client_ip``.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Resolve client IP before handling the request."""
        client_ip = resolve_client_ip(request)
        request.state.client_ip = client_ip

        structlog.contextvars.bind_contextvars(client_ip=client_ip)
        try:
            return await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("client_ip")


def resolve_client_ip(request: Request) -> str | None:
    """Get the client IP for a request.

    Args:
        request: Incoming request.

    Returns:
        Client IP, or None if it cannot be determined.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return request.client.host if request.client else None


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns standardized error responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Handle errors uniformly.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or error response.
        """
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "internal error",
                    "details": [],
                    "request_id": request_id,
                },
            )
            if request_id:
                response.headers[RequestIdMiddleware.HEADER_NAME] = request_id
            return response


# ============================================================================
# Timeout Middleware
# ============================================================================


class TimeoutMiddleware:
    """ASGI middleware cancelling requests that run too long.

    If the handler has not started its response when the timeout expires,
    it is cancelled and a 504 error response is sent instead.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_wrapper),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Request timed out",
                path=scope.get("path"),
                method=scope.get("method"),
                timeout_seconds=self.timeout_seconds,
            )
            if response_started:
                raise

            request_id = scope.get("state", {}).get("request_id")
            body = json.dumps(
                {
                    "error_code": "REQUEST_TIMEOUT",
                    "message": "request timed out",
                    "details": [],
                    "request_id": request_id,
                }
            ).encode()
            await send(
                {
                    "type": "http.response.start",
                    "status": status.HTTP_504_GATEWAY_TIMEOUT,
                    "headers": [
                        (b"content-type", b"application/json"),
                        (b"content-length", str(len(body)).encode()),
                    ],
                }
            )
            await send({"type": "http.response.body", "body": body})


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI, request_timeout_seconds: float) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
        request_timeout_seconds: Ceiling for a single request.
    """
    # Timeout (innermost - wraps only routing and handlers)
    app.add_middleware(TimeoutMiddleware, timeout_seconds=request_timeout_seconds)

    # Request ID correlation and request logging
    app.add_middleware(RequestIdMiddleware)

    # Client IP resolution
    app.add_middleware(ClientIpMiddleware)

    # Error handling (outermost - catches all errors)
    app.add_middleware(ErrorHandlerMiddleware)
