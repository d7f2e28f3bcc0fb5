"""User domain loaders."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from ...util.log import Log
from .index import DEFAULT_USERS, User, UserIndex

if TYPE_CHECKING:
    from ...runtime.context import RuntimeContext

log = Log.create({"service": "users.loaders"})

SERVICE = "users"

_users_adapter = TypeAdapter(list[User])


def _read_users(path: Path) -> list[User]:
    data = json.loads(path.read_text(encoding="utf-8"))
    return _users_adapter.validate_python(data)


async def index_users(ctx: RuntimeContext) -> UserIndex:
    """Build the user index and provide it as the ``users`` service.

    Reads ``USERS_FILE`` when configured, otherwise uses the built-in seed
    users.  Must run once per context.
    """
    if ctx.has_service(SERVICE):
        raise RuntimeError("users are already indexed for this context")

    source = ctx.settings.users_file
    if source:
        users = await asyncio.to_thread(_read_users, Path(source))
    else:
        users = list(DEFAULT_USERS)

    index = UserIndex(users)
    ctx.provide(SERVICE, index)
    log.info("users indexed", {"count": len(index), "source": source or "builtin"})
    return index
