"""Pending-authorization and session store."""

from __future__ import annotations

import asyncio
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from ...core.errors import AuthError
from ...util.log import Log

log = Log.create({"service": "auth.store"})

TOKEN_BYTES = 32
MAX_PENDING_PER_EMAIL = 1


def new_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


@dataclass(frozen=True)
class PendingAuthorization:
    state: str
    email: str
    return_url: str
    created_at: float
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class Session:
    id: str
    email: str
    created_at: float
    expires_at: float
    terminating: bool = False

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


class AuthStore:
    """In-memory correlation and session records.

    Records are immutable and swapped whole under a single lock, so
    concurrent handlers for the same key see last-write-wins.
    """

    __slots__ = ("_pending", "_sessions", "_lock", "_clock", "pending_ttl", "session_ttl", "max_pending_per_email")

    def __init__(
        self,
        *,
        pending_ttl: float = 600.0,
        session_ttl: float = 86400.0,
        clock: Callable[[], float] = time.time,
        max_pending_per_email: int = MAX_PENDING_PER_EMAIL,
    ) -> None:
        if max_pending_per_email < 1:
            raise ValueError("max_pending_per_email must be at least 1")
        self._pending: dict[str, PendingAuthorization] = {}
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()
        self._clock = clock
        self.pending_ttl = pending_ttl
        self.session_ttl = session_ttl
        self.max_pending_per_email = max_pending_per_email

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def _purge(self, now: float) -> None:
        for state in [k for k, v in self._pending.items() if v.expired(now)]:
            del self._pending[state]
        for sid in [k for k, v in self._sessions.items() if v.expired(now)]:
            del self._sessions[sid]

    def _trim(self, email: str) -> None:
        # Leave room for one more entry for this email, dropping the oldest.
        mine = sorted(
            (p for p in self._pending.values() if p.email == email),
            key=lambda p: p.created_at,
        )
        for pending in mine[: max(0, len(mine) - self.max_pending_per_email + 1)]:
            del self._pending[pending.state]

    async def begin(self, email: str, return_url: str, *, replaces: str | None = None) -> PendingAuthorization:
        """Open a pending authorization, dropping the one it replaces.

        At most ``max_pending_per_email`` entries are kept per email; the
        oldest are dropped first, so clients that never send the state cookie
        back cannot accumulate entries.
        """
        async with self._lock:
            now = self._clock()
            self._purge(now)
            if replaces:
                self._pending.pop(replaces, None)
            self._trim(email)
            pending = PendingAuthorization(
                state=new_token(),
                email=email,
                return_url=return_url,
                created_at=now,
                expires_at=now + self.pending_ttl,
            )
            self._pending[pending.state] = pending
        log.debug("pending authorization opened", {"email": email})
        return pending

    async def complete(self, state: str, *, replaces: str | None = None) -> Session:
        """Consume a pending authorization and open a session for it."""
        async with self._lock:
            now = self._clock()
            pending = self._pending.pop(state, None)
            if pending is None:
                raise AuthError("unknown_state", "no pending authorization for this state")
            if pending.expired(now):
                raise AuthError("expired_state", "pending authorization has expired")
            if replaces:
                self._sessions.pop(replaces, None)
            session = Session(
                id=new_token(),
                email=pending.email,
                created_at=now,
                expires_at=now + self.session_ttl,
            )
            self._sessions[session.id] = session
        log.info("session established", {"email": session.email})
        return session

    async def begin_logout(self, sid: str) -> Session | None:
        async with self._lock:
            session = self._lookup(sid)
            if session is None:
                return None
            session = replace(session, terminating=True)
            self._sessions[sid] = session
        return session

    async def end(self, sid: str) -> bool:
        async with self._lock:
            session = self._sessions.pop(sid, None)
        if session is not None:
            log.info("session ended", {"email": session.email})
        return session is not None

    def _lookup(self, sid: str | None) -> Session | None:
        if not sid:
            return None
        session = self._sessions.get(sid)
        if session is None or session.expired(self._clock()):
            return None
        return session

    def lookup(self, sid: str | None) -> Session | None:
        """Read-only session lookup; expired sessions read as absent."""
        return self._lookup(sid)
