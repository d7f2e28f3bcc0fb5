from __future__ import annotations

import asyncio

import pytest

from storefront.core.errors import ComposeDomainsError, StartupError
from storefront.domains import auth, users
from storefront.runtime.context import RuntimeContext, compose_context
from storefront.runtime.domains import DOMAINS, Domain, compose_domains


@pytest.mark.anyio
async def test_default_domains_register_users_then_auth(env: dict[str, str]) -> None:
    ctx = await compose_domains(await compose_context(env))

    assert [d.name for d in DOMAINS] == ["users", "auth"]
    assert ctx.resolver_factories == (users.resolvers.resolve_users,)
    assert [r.key for r in ctx.routes] == [
        ("POST", "/login"),
        ("GET", "/authorize"),
        ("POST", "/logout"),
        ("GET", "/deauthorize"),
        ("GET", "/session/test"),
    ]
    assert ctx.has_service("users")
    assert ctx.has_service("auth")


@pytest.mark.anyio
async def test_auth_before_users_fails_composition(env: dict[str, str]) -> None:
    ctx = await compose_context(env)
    reordered = (Domain("auth", auth.init), Domain("users", users.init))

    with pytest.raises(ComposeDomainsError) as info:
        await compose_domains(ctx, reordered)

    assert info.value.stage == "compose_domains_failed"
    assert info.value.domain == "auth"
    assert info.value.index == 0
    assert isinstance(info.value.__cause__, LookupError)
    assert not ctx.has_service("users")


@pytest.mark.anyio
async def test_failure_aborts_remaining_domains_without_rollback(env: dict[str, str]) -> None:
    ctx = await compose_context(env)
    calls: list[str] = []

    async def first(c: RuntimeContext) -> None:
        calls.append("first")
        c.provide("first", True)

    async def broken(c: RuntimeContext) -> None:
        calls.append("broken")
        raise OSError("index unavailable")

    async def never(c: RuntimeContext) -> None:
        calls.append("never")

    with pytest.raises(StartupError) as info:
        await compose_domains(
            ctx,
            (Domain("first", first), Domain("broken", broken), Domain("never", never)),
        )

    assert calls == ["first", "broken"]
    assert isinstance(info.value, ComposeDomainsError)
    assert info.value.domain == "broken"
    assert info.value.index == 1
    assert isinstance(info.value.cause, OSError)
    assert ctx.has_service("first")


@pytest.mark.anyio
async def test_domain_setup_completes_before_next_domain(env: dict[str, str]) -> None:
    ctx = await compose_context(env)
    seen: list[list[str]] = []

    async def loader(c: RuntimeContext) -> None:
        parts: list[str] = []

        async def load(name: str, delay: float) -> None:
            await asyncio.sleep(delay)
            parts.append(name)

        await asyncio.gather(load("slow", 0.02), load("fast", 0.0))
        c.provide("parts", parts)

    async def reader(c: RuntimeContext) -> None:
        seen.append(sorted(c.service("parts")))

    await compose_domains(ctx, (Domain("loader", loader), Domain("reader", reader)))

    assert seen == [["fast", "slow"]]


@pytest.mark.anyio
async def test_registration_error_is_wrapped(env: dict[str, str]) -> None:
    ctx = await compose_context(env)
    ctx.seal()

    with pytest.raises(ComposeDomainsError) as info:
        await compose_domains(ctx)

    assert info.value.domain == "users"
    assert isinstance(info.value.cause, RuntimeError)
