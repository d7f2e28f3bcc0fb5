"""Startup pipeline.

    compose_context -> compose_domains -> seal -> compose_app -> start -> verify

Each stage runs only after the previous one has finished.  ``run`` hands
any failure to the exit handler, which is the only place the process is
terminated.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence

from ..server.app import compose_app
from ..server.server import ServerHandle, start
from ..util.log import Log, LogFormat, LogLevel
from .context import compose_context
from .domains import DOMAINS, Domain, compose_domains
from .exit import ExitHandler
from .verify import verify

log = Log.create({"service": "runtime.pipeline"})


async def bootstrap(
    env: Mapping[str, str] | None = None,
    *,
    domains: Sequence[Domain] = DOMAINS,
) -> ServerHandle:
    """Run every startup stage and return the verified server handle."""
    ctx = await compose_context(env)
    ctx = await compose_domains(ctx, domains)
    app = compose_app(ctx.seal())
    handle = await start(app)
    return await verify(handle)


async def _wait_forever() -> None:
    await asyncio.Future()


async def serve(
    env: Mapping[str, str] | None = None,
    *,
    domains: Sequence[Domain] = DOMAINS,
    wait: Callable[[], Awaitable[None]] | None = None,
) -> None:
    handle = await bootstrap(env, domains=domains)
    log.info("storefront server up", {"url": handle.url})
    block = wait or _wait_forever
    try:
        await block()
    finally:
        await handle.stop()


def run(
    env: Mapping[str, str] | None = None,
    *,
    domains: Sequence[Domain] = DOMAINS,
    exit_handler: Callable[[BaseException], object] | None = None,
) -> None:
    """Process entry point: serve until interrupted, exit nonzero on failure."""
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=True, file=False)
    handler = exit_handler or ExitHandler(Log.create({"service": "exit"}))
    try:
        asyncio.run(serve(env, domains=domains))
    except KeyboardInterrupt:
        log.info("interrupted")
    except Exception as exc:
        handler(exc)
