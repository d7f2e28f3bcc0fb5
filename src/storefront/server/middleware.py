"""Pure ASGI middleware for the storefront server."""

from __future__ import annotations

import secrets
import time
from typing import Callable

from ..util.log import Log

Scope = dict
Receive = Callable
Send = Callable
Message = dict

access = Log.create({"service": "server.access"})


def _header(scope: Scope, name: bytes) -> str | None:
    for key, val in scope.get("headers", []):
        if key == name:
            return val.decode("latin-1")
    return None


def _client_ip(scope: Scope) -> str | None:
    client = scope.get("client")
    return client[0] if client else None


class AccessLogMiddleware:
    """Generates request IDs, logs access, injects X-Request-ID header."""

    def __init__(self, app: Callable, enabled: bool = True) -> None:
        self.app = app
        self.enabled = enabled

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        rid = _header(scope, b"x-request-id") or secrets.token_hex(8)
        scope.setdefault("state", {})["request_id"] = rid

        path = scope.get("path", "")
        method = scope.get("method", "")
        begin = time.perf_counter()
        status = 500

        async def inject(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", rid.encode()))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, inject)
        except Exception as exc:
            if self.enabled:
                access.error("request failed", {
                    "request_id": rid,
                    "method": method,
                    "path": path,
                    "client_ip": _client_ip(scope),
                    "duration_ms": int((time.perf_counter() - begin) * 1000),
                    "error": str(exc),
                })
            raise

        if not self.enabled:
            return
        # query strings are not logged; /authorize carries the state token
        access.info("request", {
            "request_id": rid,
            "method": method,
            "path": path,
            "status": status,
            "client_ip": _client_ip(scope),
            "duration_ms": int((time.perf_counter() - begin) * 1000),
        })
