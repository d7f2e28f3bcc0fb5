"""Users domain: user index loader and query resolvers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import loaders, resolvers
from .index import DEFAULT_USERS, User, UserIndex

if TYPE_CHECKING:
    from ...runtime.context import RuntimeContext


async def init(ctx: RuntimeContext) -> None:
    await loaders.index_users(ctx)
    ctx.add_resolver_factory(resolvers.resolve_users)


__all__ = ["DEFAULT_USERS", "User", "UserIndex", "init", "loaders", "resolvers"]
