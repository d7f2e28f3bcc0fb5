from __future__ import annotations

import io

import httpx
import pytest
from rich.console import Console

from storefront.core.errors import StartupError
from storefront.runtime import pipeline
from storefront.runtime.context import RuntimeContext
from storefront.runtime.domains import DOMAINS, Domain
from storefront.runtime.exit import EX_CONFIG, EX_SOFTWARE, ExitHandler
from storefront.util.log import Log
from tests.helpers import base_env


@pytest.mark.anyio
async def test_bootstrap_returns_verified_handle(env: dict[str, str]) -> None:
    handle = await pipeline.bootstrap(env)
    try:
        assert handle.running
        async with httpx.AsyncClient(base_url=handle.probe_url, trust_env=False) as client:
            status = await client.get("/session/test")
        assert status.json()["valid"] is False
    finally:
        await handle.stop()


@pytest.mark.anyio
async def test_stages_run_in_order_and_stop_at_first_failure(
    env: dict[str, str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[str] = []

    def fake_compose_app(ctx: RuntimeContext):  # type: ignore[no-untyped-def]
        calls.append("compose_app")
        assert ctx.sealed
        raise StartupError("compose_app_failed", ValueError("conflict"))

    async def fake_start(app):  # type: ignore[no-untyped-def]
        calls.append("start")

    async def fake_verify(handle):  # type: ignore[no-untyped-def]
        calls.append("verify")

    monkeypatch.setattr("storefront.runtime.pipeline.compose_app", fake_compose_app)
    monkeypatch.setattr("storefront.runtime.pipeline.start", fake_start)
    monkeypatch.setattr("storefront.runtime.pipeline.verify", fake_verify)

    with pytest.raises(StartupError, match="compose_app_failed"):
        await pipeline.bootstrap(env)

    assert calls == ["compose_app"]


@pytest.mark.anyio
async def test_serve_stops_listener_when_wait_returns(
    env: dict[str, str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    seen: dict[str, object] = {}
    real_bootstrap = pipeline.bootstrap

    async def capture(*args, **kwargs):  # type: ignore[no-untyped-def]
        handle = await real_bootstrap(*args, **kwargs)
        seen["handle"] = handle
        return handle

    async def wait() -> None:
        seen["running"] = seen["handle"].running  # type: ignore[attr-defined]

    monkeypatch.setattr(pipeline, "bootstrap", capture)
    await pipeline.serve(env, wait=wait)

    assert seen["running"] is True
    assert seen["handle"].running is False  # type: ignore[attr-defined]


def _exit_handler(codes: list[int]) -> ExitHandler:
    return ExitHandler(
        Log.create({"service": "test.pipeline.exit"}),
        terminate=codes.append,
        console=Console(file=io.StringIO()),
    )


def test_run_exits_with_config_status_on_missing_env(capsys) -> None:  # type: ignore[no-untyped-def]
    codes: list[int] = []

    with pytest.raises(SystemExit):
        pipeline.run({"PORT": "0"}, exit_handler=_exit_handler(codes))

    assert codes == [EX_CONFIG]
    assert "stage=compose_context_failed" in capsys.readouterr().err


def test_run_exits_nonzero_when_a_domain_fails(capsys) -> None:  # type: ignore[no-untyped-def]
    codes: list[int] = []
    started: list[str] = []

    async def broken(ctx: RuntimeContext) -> None:
        raise RuntimeError("catalog unreachable")

    async def after(ctx: RuntimeContext) -> None:
        started.append("after")

    domains = (*DOMAINS, Domain("catalog", broken), Domain("after", after))

    with pytest.raises(SystemExit):
        pipeline.run(base_env(LOG_LEVEL="info"), domains=domains, exit_handler=_exit_handler(codes))

    err = capsys.readouterr().err
    assert codes == [EX_SOFTWARE]
    assert started == []
    assert "stage=compose_domains_failed" in err
    assert "catalog unreachable" in err


def test_run_routes_every_failure_to_the_exit_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    received: list[BaseException] = []

    async def fake_serve(env, *, domains):  # type: ignore[no-untyped-def]
        raise StartupError("verify_failed", httpx.ConnectError("refused"))

    monkeypatch.setattr("storefront.runtime.pipeline.serve", fake_serve)

    pipeline.run(base_env(), exit_handler=received.append)

    assert len(received) == 1
    assert isinstance(received[0], StartupError)
    assert received[0].stage == "verify_failed"
