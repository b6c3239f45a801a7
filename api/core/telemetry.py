"""Request telemetry: one canonical log line per request."""

import os
import time
import uuid
from typing import Any

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import get_logger
from core.wide_event import clear_wide_event, get_wide_event, init_wide_event

logger = get_logger(__name__)

SERVICE_NAME = os.getenv("SERVICE_NAME", "branch-office-api")
SERVICE_VERSION = os.getenv("SERVICE_VERSION", "0.1.0")

SLOW_REQUEST_THRESHOLD_MS = 1000

REQUEST_ID_HEADER = b"x-request-id"
_MAX_REQUEST_ID_LENGTH = 128

_READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def _request_id(scope: Scope) -> str:
    """Reuse a caller-supplied X-Request-Id (bounded), else mint a UUID."""
    for name, value in scope.get("headers", []):
        if name == REQUEST_ID_HEADER:
            incoming = value.decode("latin-1").strip()
            if 0 < len(incoming) <= _MAX_REQUEST_ID_LENGTH:
                return incoming
    return str(uuid.uuid4())


def _route_fields(scope: Scope) -> dict[str, Any]:
    """Matched route template plus the branch office id, when the path has one."""
    route = scope.get("route")
    fields: dict[str, Any] = {
        "http_route": getattr(route, "path", None) or scope.get("path", "")
    }
    branch_office_id = scope.get("path_params", {}).get("branch_office_id")
    if branch_office_id is not None:
        fields["branch_office_id"] = branch_office_id
    return fields


def should_emit(method: str, status_code: int | None, duration_ms: float) -> bool:
    """Successful reads are dropped; errors, slow requests and writes are kept."""
    return (
        status_code is None
        or status_code >= 400
        or duration_ms > SLOW_REQUEST_THRESHOLD_MS
        or method not in _READ_METHODS
    )


class RequestTimingMiddleware:
    """Times each request and logs its wide event as ``request.completed``.

    Adds ``x-request-id`` and ``x-request-duration-ms`` response headers.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        method = scope.get("method", "UNKNOWN")
        request_id = _request_id(scope)
        client = scope.get("client")

        init_wide_event().update(
            service_name=SERVICE_NAME,
            service_version=SERVICE_VERSION,
            request_id=request_id,
            http_method=method,
            http_path=scope.get("path", ""),
            http_client_ip=client[0] if client else "unknown",
        )

        status_code: int | None = None

        def elapsed_ms() -> float:
            return (time.perf_counter() - start_time) * 1000

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code

            if message["type"] == "http.response.start":
                status_code = int(message.get("status", 0))
                message["headers"] = [
                    *message.get("headers", []),
                    (b"x-request-duration-ms", f"{elapsed_ms():.2f}".encode()),
                    (REQUEST_ID_HEADER, request_id.encode()),
                ]
            elif message["type"] == "http.response.body" and not message.get(
                "more_body", False
            ):
                duration_ms = elapsed_ms()
                event = get_wide_event()
                event.update(_route_fields(scope))
                event.update(
                    http_status_code=status_code,
                    duration_ms=round(duration_ms, 2),
                    outcome="success" if status_code and status_code < 400 else "error",
                )
                if should_emit(method, status_code, duration_ms):
                    logger.info("request.completed", **event)
                clear_wide_event()

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            event = get_wide_event()
            event.update(_route_fields(scope))
            event.update(
                duration_ms=round(elapsed_ms(), 2),
                outcome="exception",
                exception_type=type(exc).__name__,
            )
            logger.info("request.completed", **event)
            clear_wide_event()
            raise
