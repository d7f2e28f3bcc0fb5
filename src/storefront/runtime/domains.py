"""Domain composition."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from ..core.errors import ComposeDomainsError
from ..domains import auth, users
from .context import RuntimeContext


@dataclass(frozen=True)
class Domain:
    name: str
    init: Callable[[RuntimeContext], Awaitable[None]]


DOMAINS: tuple[Domain, ...] = (
    Domain("users", users.init),
    Domain("auth", auth.init),
    # next domain below this line
)


async def compose_domains(ctx: RuntimeContext, domains: Sequence[Domain] = DOMAINS) -> RuntimeContext:
    """Initialize each domain in declared order.

    A domain's ``init`` runs to completion before the next one starts, so later
    domains see everything earlier ones registered.  The first failure aborts
    the rest; nothing already registered is rolled back.
    """
    for index, domain in enumerate(domains):
        try:
            await domain.init(ctx)
        except Exception as exc:
            raise ComposeDomainsError(domain.name, index, exc) from exc
        ctx.logger.emit("domain_composed", "trace", domain.name)

    ctx.logger.emit("compose_domains_complete", "trace", "compose_domains_complete")
    return ctx
