"""Auth domain: session-based redirect handshake.

Usage with HTTPie::

    http --session=shopper POST http://localhost:3001/login email=shopper1@95729.com
    http --session=shopper GET  "http://localhost:3001/authorize?state=<state>"
    http --session=shopper GET  http://localhost:3001/session/test
    http --session=shopper POST http://localhost:3001/logout
    http --session=shopper GET  http://localhost:3001/deauthorize
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...server.app import SESSION_GUARD
from ..users.loaders import SERVICE as USERS_SERVICE
from .handlers import SESSION_COOKIE, STATE_COOKIE, AuthFlow, redirect_target
from .origin import perceived_origin, request_origin
from .store import AuthStore, PendingAuthorization, Session

if TYPE_CHECKING:
    from ...runtime.context import RuntimeContext

SERVICE = "auth"


async def init(ctx: RuntimeContext) -> None:
    """Register the handshake routes.

    Requires the ``users`` service, so the users domain must come first.
    Also provides the session guard dependency used when ``/query`` requires
    a session.
    """
    flow = AuthFlow(ctx.settings, ctx.service(USERS_SERVICE))
    ctx.provide(SERVICE, flow)
    ctx.provide(SESSION_GUARD, flow.require_session())
    client_origin = ctx.settings.client_origin

    ctx.add_route("POST", "/login", flow.login(lambda origin: f"{origin}/authorize"), name="login")
    ctx.add_route("GET", "/authorize", flow.authorize(f"{client_origin}/auth/authorized"), name="authorize")
    ctx.add_route("POST", "/logout", flow.logout(lambda origin: f"{origin}/deauthorize"), name="logout")
    ctx.add_route("GET", "/deauthorize", flow.deauthorize(f"{client_origin}/auth/login"), name="deauthorize")
    ctx.add_route("GET", "/session/test", flow.test_session(), name="session_test")


__all__ = [
    "AuthFlow",
    "AuthStore",
    "PendingAuthorization",
    "SESSION_COOKIE",
    "STATE_COOKIE",
    "Session",
    "init",
    "perceived_origin",
    "redirect_target",
    "request_origin",
]
