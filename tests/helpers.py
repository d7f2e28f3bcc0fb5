"""Shared test helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from urllib.parse import parse_qs, urlsplit

from storefront.runtime.context import RuntimeContext, compose_context
from storefront.runtime.domains import DOMAINS, Domain, compose_domains
from storefront.server.app import ServableApp, compose_app

CLIENT_ORIGIN = "http://localhost:3000"
SHOPPER = "shopper1@95729.com"


def base_env(**overrides: str) -> dict[str, str]:
    env = {
        "CLIENT_ORIGIN": CLIENT_ORIGIN,
        "HOST": "127.0.0.1",
        "PORT": "0",
        "ACCESS_LOG": "false",
        "LOG_LEVEL": "error",
    }
    env.update(overrides)
    return env


async def compose(
    env: Mapping[str, str] | None = None,
    domains: Sequence[Domain] = DOMAINS,
) -> tuple[RuntimeContext, ServableApp]:
    ctx = await compose_context(base_env() if env is None else env)
    ctx = await compose_domains(ctx, domains)
    return ctx, compose_app(ctx.seal())


def build_app(env: Mapping[str, str] | None = None) -> tuple[RuntimeContext, ServableApp]:
    """Compose the full app outside of any running event loop."""
    return asyncio.run(compose(env))


def query_param(location: str, name: str) -> str | None:
    values = parse_qs(urlsplit(location).query).get(name)
    return values[0] if values else None
