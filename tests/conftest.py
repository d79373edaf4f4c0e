"""Pytest fixtures and test utilities for the delegation orders test suite."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

import pytest
from redis import asyncio as aioredis

from delegation_orders.notify import Color
from delegation_orders.orders import InMemoryOrderStore, Order, Orderer

TEST_KEY_PREFIX = "test-order:"


# ============================================================================
# NOTIFIER FIXTURES
# ============================================================================


class RecordingNotifier:
    """Notifier that keeps every (message, color) it is handed."""

    def __init__(self):
        self.sent: List[Tuple[str, Color]] = []

    async def notify(self, message: str, color: Color) -> None:
        self.sent.append((message, color))

    def messages(self, color: Optional[Color] = None) -> List[str]:
        return [m for m, c in self.sent if color is None or c == color]


class FailingNotifier:
    """Notifier whose every delivery blows up."""

    def __init__(self):
        self.attempts = 0

    async def notify(self, message: str, color: Color) -> None:
        self.attempts += 1
        raise RuntimeError("chat service unavailable")


@pytest.fixture
def recording_notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


# ============================================================================
# STORE FIXTURES
# ============================================================================


@pytest.fixture
def order_store():
    """Empty in-memory order store."""
    return InMemoryOrderStore()


@pytest.fixture
def make_order(order_store):
    """
    Insert an order directly into the store.

    Returns:
        Callable: make(num, users, labels, owners, creator="carol") -> Order
    """

    async def _make(
        num: str,
        users: Sequence[str] = ("bob",),
        labels: Sequence[str] = ("prod-db",),
        owners: Sequence[str] = ("alice",),
        creator: str = "carol",
    ) -> Order:
        return await order_store.create(
            order_num=num,
            creator=creator,
            users=users,
            labels=labels,
            owners=owners,
            time_requested=datetime(2016, 5, 1, 12, 0, tzinfo=timezone.utc),
            duration=timedelta(hours=1),
        )

    return _make


class InterleavedOrderStore(InMemoryOrderStore):
    """In-memory store that runs another caller's work after its next snapshot."""

    def __init__(self):
        super().__init__()
        self.after_snapshot = None

    async def all(self):
        snapshot = await super().all()
        if self.after_snapshot is not None:
            hook, self.after_snapshot = self.after_snapshot, None
            await hook()
        return snapshot


@pytest.fixture
def interleaved_store():
    """Store for simulating a second caller acting mid-scan."""
    return InterleavedOrderStore()


@pytest.fixture
def orderer(order_store, recording_notifier):
    """Orderer over the in-memory store with a recording notifier."""
    return Orderer(store=order_store, notifier=recording_notifier)


# ============================================================================
# REDIS FIXTURES
# ============================================================================


@pytest.fixture
async def redis_client():
    """
    Provide a Redis connection with test order keys cleared before and after.

    Skips the test when no Redis server is reachable.
    """
    client = aioredis.from_url(
        "redis://localhost:6379",
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=1,
        socket_timeout=1,
    )

    try:
        await client.ping()
    except (aioredis.ConnectionError, aioredis.TimeoutError, OSError):
        await client.aclose()
        pytest.skip("Redis server not reachable")

    async def _clear():
        keys = [key async for key in client.scan_iter(f"{TEST_KEY_PREFIX}*")]
        if keys:
            await client.delete(*keys)

    try:
        await _clear()
        yield client
    finally:
        await _clear()
        await client.aclose()
