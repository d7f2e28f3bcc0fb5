"""Post-start self check."""

from __future__ import annotations

import asyncio

import httpx

from ..core.errors import StartupError
from ..server.server import ServerHandle
from ..util.log import Log

log = Log.create({"service": "runtime.verify"})

RETRY_DELAY = 0.2


async def _probe(client: httpx.AsyncClient, url: str) -> None:
    response = await client.get(url)
    response.raise_for_status()
    body = response.json()
    if not isinstance(body, dict) or body.get("status") != "ok":
        raise RuntimeError(f"health check reported {body!r}")


async def verify(handle: ServerHandle, *, timeout: float | None = None, attempts: int = 3) -> ServerHandle:
    """Probe ``GET /health`` on the running server.

    A server that fails the probe is stopped before the error propagates.
    """
    url = f"{handle.probe_url}/health"
    timeout = timeout if timeout is not None else handle.app.settings.verify_timeout
    last: Exception | None = None

    async with httpx.AsyncClient(timeout=timeout, trust_env=False) as client:
        for attempt in range(1, max(attempts, 1) + 1):
            try:
                await _probe(client, url)
                log.info("server verified", {"url": handle.url, "attempt": attempt})
                return handle
            except (httpx.HTTPError, ValueError, RuntimeError) as exc:
                last = exc
                log.warn("health check failed", {"url": url, "attempt": attempt, "error": str(exc)})
                if attempt < attempts:
                    await asyncio.sleep(RETRY_DELAY)

    await handle.stop()
    raise StartupError("verify_failed", last)
