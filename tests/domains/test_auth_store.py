from __future__ import annotations

import asyncio

import pytest

from storefront.core.errors import AuthError
from storefront.domains.auth.store import AuthStore


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.anyio
async def test_complete_consumes_pending_once() -> None:
    store = AuthStore()
    pending = await store.begin("a@example.com", "http://x/authorize")

    session = await store.complete(pending.state)

    assert session.email == "a@example.com"
    assert store.pending_count == 0
    assert store.lookup(session.id) == session
    with pytest.raises(AuthError) as info:
        await store.complete(pending.state)
    assert info.value.reason == "unknown_state"


@pytest.mark.anyio
async def test_unknown_state_never_opens_session() -> None:
    store = AuthStore()

    with pytest.raises(AuthError) as info:
        await store.complete("forged")

    assert info.value.reason == "unknown_state"
    assert store.session_count == 0


@pytest.mark.anyio
async def test_expired_pending_is_rejected() -> None:
    clock = _Clock()
    store = AuthStore(pending_ttl=10, clock=clock)
    pending = await store.begin("a@example.com", "http://x/authorize")

    clock.now += 10

    with pytest.raises(AuthError) as info:
        await store.complete(pending.state)
    assert info.value.reason == "expired_state"
    assert store.session_count == 0


@pytest.mark.anyio
async def test_begin_replaces_previous_pending_and_purges_expired() -> None:
    clock = _Clock()
    store = AuthStore(pending_ttl=10, clock=clock)
    stale = await store.begin("old@example.com", "http://x/authorize")
    clock.now += 11
    first = await store.begin("a@example.com", "http://x/authorize")

    second = await store.begin("a@example.com", "http://x/authorize", replaces=first.state)

    assert store.pending_count == 1
    assert first.state != second.state
    with pytest.raises(AuthError):
        await store.complete(stale.state)
    with pytest.raises(AuthError):
        await store.complete(first.state)
    assert (await store.complete(second.state)).email == "a@example.com"


@pytest.mark.anyio
async def test_logout_marks_and_end_removes_session() -> None:
    store = AuthStore()
    session = await store.complete((await store.begin("a@example.com", "r")).state)

    marked = await store.begin_logout(session.id)

    assert marked is not None and marked.terminating is True
    assert store.lookup(session.id).terminating is True
    assert await store.end(session.id) is True
    assert store.lookup(session.id) is None
    assert await store.end(session.id) is False
    assert await store.begin_logout(session.id) is None


@pytest.mark.anyio
async def test_expired_session_reads_as_absent_without_mutation() -> None:
    clock = _Clock()
    store = AuthStore(session_ttl=5, clock=clock)
    session = await store.complete((await store.begin("a@example.com", "r")).state)
    clock.now += 5

    assert store.lookup(session.id) is None
    assert store.lookup(session.id) is None
    assert store.session_count == 1


@pytest.mark.anyio
async def test_concurrent_completion_opens_exactly_one_session() -> None:
    store = AuthStore()
    pending = await store.begin("a@example.com", "r")

    results = await asyncio.gather(
        *(store.complete(pending.state) for _ in range(5)),
        return_exceptions=True,
    )

    assert sum(1 for r in results if not isinstance(r, BaseException)) == 1
    assert all(isinstance(r, AuthError) for r in results if isinstance(r, BaseException))
    assert store.session_count == 1


@pytest.mark.anyio
async def test_pending_entries_are_capped_per_email() -> None:
    store = AuthStore()

    states = [(await store.begin("a@example.com", "r")).state for _ in range(20)]
    other = await store.begin("b@example.com", "r")

    assert store.pending_count == 2
    with pytest.raises(AuthError):
        await store.complete(states[0])
    assert (await store.complete(states[-1])).email == "a@example.com"
    assert (await store.complete(other.state)).email == "b@example.com"


@pytest.mark.anyio
async def test_pending_cap_keeps_newest_entries() -> None:
    clock = _Clock()
    store = AuthStore(clock=clock, max_pending_per_email=3)
    states = []
    for _ in range(5):
        states.append((await store.begin("a@example.com", "r")).state)
        clock.now += 1

    assert store.pending_count == 3
    for state in states[:2]:
        with pytest.raises(AuthError):
            await store.complete(state)
    for state in states[2:]:
        assert (await store.complete(state)).email == "a@example.com"


def test_pending_cap_must_be_positive() -> None:
    with pytest.raises(ValueError):
        AuthStore(max_pending_per_email=0)
