"""Authentication redirect handshake.

``login`` opens a pending authorization and redirects to the authorization
endpoint.  ``authorize`` completes it and opens a session.  ``logout``
redirects to the deauthorization endpoint and ``deauthorize`` ends the
session.  ``test_session`` reports session validity without side effects.

A pending authorization is identified by a random ``state`` token that is
sent both in the redirect and in an HttpOnly cookie; ``authorize`` requires
the two to match and the token to still be pending.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable
from urllib.parse import urlencode

from fastapi import Request
from starlette.responses import RedirectResponse

from ...core.config import Settings
from ...core.errors import AuthError
from ...server.schemas import LoginRequest, SessionStatusResponse
from ...util.log import Log
from ..users.index import UserIndex
from .origin import request_origin
from .store import AuthStore, Session

log = Log.create({"service": "auth"})

STATE_COOKIE = "auth_state"
SESSION_COOKIE = "sid"
REDIRECT_STATUS = 303

ReturnUrl = Callable[[str], str]


def redirect_target(endpoint: str | None, return_url: str, **params: str) -> str:
    """Location for a redirect through an optional external endpoint.

    With an endpoint, ``return_url`` travels as ``return_to``.  Without one the
    server completes the step itself, so the redirect goes straight to
    ``return_url``.
    """
    if endpoint:
        base, query = endpoint, {"return_to": return_url, **params}
    else:
        base, query = return_url, dict(params)
    if not query:
        return base
    sep = "&" if "?" in base else "?"
    return f"{base}{sep}{urlencode(query)}"


class AuthFlow:
    """Factories for the handshake endpoints, sharing one store."""

    def __init__(self, settings: Settings, users: UserIndex, store: AuthStore | None = None) -> None:
        self.settings = settings
        self.users = users
        self.store = store or AuthStore(
            pending_ttl=settings.pending_ttl,
            session_ttl=settings.session_ttl,
        )

    def _origin(self, request: Request) -> str:
        return request_origin(request, trust_proxy=self.settings.trust_proxy)

    def _set_cookie(self, response: RedirectResponse, name: str, value: str, *, max_age: float, secure: bool) -> None:
        response.set_cookie(
            name,
            value,
            max_age=int(max_age),
            path="/",
            httponly=True,
            samesite="lax",
            secure=secure,
        )

    def login(self, compute_return_url: ReturnUrl):
        async def login_handler(request: Request, payload: LoginRequest) -> RedirectResponse:
            user = self.users.by_email(payload.email)
            if user is None:
                raise AuthError("unknown_user", "no account for this email")

            origin = self._origin(request)
            return_url = compute_return_url(origin)
            pending = await self.store.begin(
                user.email,
                return_url,
                replaces=request.cookies.get(STATE_COOKIE),
            )
            location = redirect_target(
                self.settings.authorization_endpoint,
                return_url,
                state=pending.state,
            )
            response = RedirectResponse(location, status_code=REDIRECT_STATUS)
            self._set_cookie(
                response,
                STATE_COOKIE,
                pending.state,
                max_age=self.store.pending_ttl,
                secure=origin.startswith("https://"),
            )
            log.info("login redirect", {"email": user.email, "return_to": return_url})
            return response

        return login_handler

    def authorize(self, success_redirect_url: str):
        async def authorize_handler(request: Request, state: str | None = None) -> RedirectResponse:
            if not state:
                raise AuthError("missing_state", "authorization state is missing")
            cookie = request.cookies.get(STATE_COOKIE)
            if not cookie or not secrets.compare_digest(cookie, state):
                raise AuthError("state_mismatch", "authorization state does not match this client")

            try:
                session = await self.store.complete(state, replaces=request.cookies.get(SESSION_COOKIE))
            except AuthError as exc:
                # The cookie matched but names nothing live; drop it.
                exc.clear_cookies = (STATE_COOKIE,)
                raise
            response = RedirectResponse(success_redirect_url, status_code=REDIRECT_STATUS)
            self._set_cookie(
                response,
                SESSION_COOKIE,
                session.id,
                max_age=self.store.session_ttl,
                secure=self._origin(request).startswith("https://"),
            )
            response.delete_cookie(STATE_COOKIE, path="/")
            return response

        return authorize_handler

    def logout(self, compute_return_url: ReturnUrl):
        async def logout_handler(request: Request) -> RedirectResponse:
            sid = request.cookies.get(SESSION_COOKIE)
            if sid:
                await self.store.begin_logout(sid)
            return_url = compute_return_url(self._origin(request))
            location = redirect_target(self.settings.deauthorization_endpoint, return_url)
            return RedirectResponse(location, status_code=REDIRECT_STATUS)

        return logout_handler

    def deauthorize(self, return_url: str):
        async def deauthorize_handler(request: Request) -> RedirectResponse:
            sid = request.cookies.get(SESSION_COOKIE)
            if sid:
                await self.store.end(sid)
            response = RedirectResponse(return_url, status_code=REDIRECT_STATUS)
            response.delete_cookie(SESSION_COOKIE, path="/")
            return response

        return deauthorize_handler

    def require_session(self):
        """Dependency resolving the caller's live session.

        Raises ``AuthError`` (401) when the request carries no valid session.
        Sessions that are terminating still count as live.
        """

        async def session_dependency(request: Request) -> Session:
            session = self.store.lookup(request.cookies.get(SESSION_COOKIE))
            if session is None:
                raise AuthError("no_session", "a valid session is required")
            return session

        return session_dependency

    def test_session(self):
        async def test_session_handler(request: Request) -> SessionStatusResponse:
            session = self.store.lookup(request.cookies.get(SESSION_COOKIE))
            if session is None:
                return SessionStatusResponse(valid=False)
            return SessionStatusResponse(valid=True, email=session.email, terminating=session.terminating)

        return test_session_handler
