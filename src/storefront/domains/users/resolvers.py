"""User domain resolvers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from pydantic import validate_call

from .index import UserIndex
from .loaders import SERVICE

if TYPE_CHECKING:
    from ...runtime.context import RuntimeContext


def resolve_users(ctx: RuntimeContext) -> dict[str, Callable[..., Any]]:
    """Resolver bindings for the ``users`` and ``user`` query fields."""
    index: UserIndex = ctx.service(SERVICE)

    def users() -> list[dict[str, Any]]:
        return [user.model_dump() for user in index]

    @validate_call
    def user(email: str) -> dict[str, Any] | None:
        found = index.by_email(email)
        return found.model_dump() if found else None

    return {"users": users, "user": user}
