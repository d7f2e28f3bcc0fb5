"""HTTP listener lifecycle.

Example:
    from storefront.server import start

    handle = await start(app)
    print(f"Server running at {handle.url}")
    await handle.stop()
"""

from __future__ import annotations

import asyncio
import socket
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

import uvicorn

from ..core.errors import StartupError
from ..util.log import Log
from .app import ServableApp

log = Log.create({"service": "server"})

STARTUP_POLL_INTERVAL = 0.05
STOP_TIMEOUT = 5.0


@dataclass
class ServerHandle:
    """A running server.

    Attributes:
        host: Address the listener is bound to
        port: Port actually bound (differs from the requested one for port 0)
    """
    host: str
    port: int
    app: ServableApp
    _server: Any = field(repr=False)
    _task: asyncio.Task[Any] = field(repr=False)

    @property
    def url(self) -> str:
        return f"http://{_url_host(self.host)}:{self.port}"

    @property
    def probe_url(self) -> str:
        """URL usable from this process even when bound to a wildcard address."""
        host = self.host
        if host in {"0.0.0.0", ""}:
            host = "127.0.0.1"
        elif host == "::":
            host = "::1"
        return f"http://{_url_host(host)}:{self.port}"

    @property
    def running(self) -> bool:
        return not self._task.done()

    async def stop(self) -> None:
        if self._task.done():
            return
        log.info("stopping server", {"url": self.url})
        self._server.should_exit = True
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=STOP_TIMEOUT)
        except asyncio.TimeoutError:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
        log.info("server stopped", {"url": self.url})


def _url_host(host: str) -> str:
    return f"[{host}]" if ":" in host and not host.startswith("[") else host


def _bind(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.create_server((host, port), family=family)
    sock.set_inheritable(True)
    return sock


async def start(app: ServableApp) -> ServerHandle:
    """Bind the listener and serve ``app`` in a background task."""
    host, port = app.settings.host, app.settings.port
    try:
        sock = _bind(host, port)
    except OSError as exc:
        raise StartupError("start_failed", exc) from exc

    bound_port = sock.getsockname()[1]
    config = uvicorn.Config(
        app.asgi,
        host=host,
        port=bound_port,
        log_level="warning",
        access_log=False,
    )
    server = uvicorn.Server(config)
    log.info("starting server", {"host": host, "port": bound_port})
    task = asyncio.create_task(server.serve(sockets=[sock]))

    while not server.started:
        if task.done():
            sock.close()
            cause: BaseException | None = None
            if not task.cancelled():
                cause = task.exception()
            raise StartupError(
                "start_failed",
                cause or RuntimeError("server exited before it started"),
            )
        await asyncio.sleep(STARTUP_POLL_INTERVAL)

    handle = ServerHandle(host=host, port=bound_port, app=app, _server=server, _task=task)
    log.info("server started", {"url": handle.url})
    return handle
