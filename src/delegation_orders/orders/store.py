"""Order store backends.

The store is the single authority for outstanding orders. It does no
locking of its own; the Orderer serializes every call against one store.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger
from redis import asyncio as aioredis

from ..config import Config
from ..redis_client import get_redis_client
from .models import Order, create_order


class OrderStoreError(Exception):
    """Raised when a store backend cannot complete an operation."""


class OrderStore(ABC):
    """Abstract mapping from order number to Order."""

    async def create(
        self,
        order_num: str,
        creator: str,
        users: Sequence[str],
        labels: Sequence[str],
        owners: Sequence[str],
        time_requested: datetime,
        duration: timedelta,
    ) -> Order:
        """
        Construct a new order and insert it.

        The caller guarantees order_num is unique. Empty users or labels
        are accepted as-is.

        Returns:
            The stored Order

        Raises:
            OrderStoreError: If order_num is already tracked
        """
        order = create_order(
            name=creator,
            order_num=order_num,
            time_requested=time_requested,
            duration=duration,
            owners_delegated=[],
            owners=owners,
            users=users,
            labels=labels,
        )
        if not await self._insert(order_num, order):
            raise OrderStoreError(f"Order {order_num} already exists")
        return order

    @abstractmethod
    async def get(self, order_num: str) -> Optional[Order]:
        """Return the order, or None if it is not tracked."""

    @abstractmethod
    async def all(self) -> List[Tuple[str, Order]]:
        """Return a snapshot of every (order_num, order) pair."""

    @abstractmethod
    async def _insert(self, order_num: str, order: Order) -> bool:
        """Add a new order. Returns False if order_num is already taken."""

    @abstractmethod
    async def put(self, order_num: str, order: Order) -> bool:
        """
        Replace a tracked order.

        An order that is no longer tracked is never brought back.

        Returns:
            True if the order was replaced, False if it was gone
        """

    @abstractmethod
    async def remove(self, order_num: str) -> bool:
        """
        Delete an order. Removing an unknown order is a no-op.

        Returns:
            True only for the call that actually deleted it
        """

    async def health(self) -> Tuple[bool, str]:
        """Report whether the backend is usable."""
        return True, f"{type(self).__name__} ready"

    async def count(self) -> int:
        """Number of tracked orders."""
        return len(await self.all())


class InMemoryOrderStore(OrderStore):
    """Dict-backed store. Orders are copied in and out."""

    def __init__(self):
        self._orders: Dict[str, Order] = {}

    async def get(self, order_num: str) -> Optional[Order]:
        order = self._orders.get(order_num)
        return order.copy() if order is not None else None

    async def all(self) -> List[Tuple[str, Order]]:
        return [(num, order.copy()) for num, order in self._orders.items()]

    async def _insert(self, order_num: str, order: Order) -> bool:
        if order_num in self._orders:
            return False
        self._orders[order_num] = order.copy()
        return True

    async def put(self, order_num: str, order: Order) -> bool:
        if order_num not in self._orders:
            return False
        self._orders[order_num] = order.copy()
        return True

    async def remove(self, order_num: str) -> bool:
        return self._orders.pop(order_num, None) is not None

    async def count(self) -> int:
        return len(self._orders)


class RedisOrderStore(OrderStore):
    """
    Redis-backed store: one JSON document per order.

    Writes are single conditional SETs: create uses NX and put uses XX,
    so an order deleted by another process is never recreated. remove
    reports the DEL count so only one caller sees the deletion.
    Connection failures are raised as OrderStoreError.
    """

    def __init__(
        self,
        redis: Optional[aioredis.Redis] = None,
        key_prefix: Optional[str] = None,
    ):
        self._redis_client = redis
        self._prefix = key_prefix or Config.ORDER_KEY_PREFIX

    async def _get_redis(self) -> aioredis.Redis:
        if self._redis_client is None:
            self._redis_client = await get_redis_client()
        return self._redis_client

    def _key(self, order_num: str) -> str:
        return f"{self._prefix}{order_num}"

    def _decode(self, key: str, raw: Optional[str]) -> Optional[Order]:
        if raw is None:
            return None
        try:
            return Order.from_dict(json.loads(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise OrderStoreError(f"Corrupt order record at {key}: {e}") from e

    async def get(self, order_num: str) -> Optional[Order]:
        key = self._key(order_num)
        try:
            redis = await self._get_redis()
            raw = await redis.get(key)
        except (aioredis.ConnectionError, aioredis.TimeoutError) as e:
            raise OrderStoreError(f"Redis get failed for {key}: {e}") from e
        return self._decode(key, raw)

    async def all(self) -> List[Tuple[str, Order]]:
        orders = []
        try:
            redis = await self._get_redis()
            async for key in redis.scan_iter(f"{self._prefix}*"):
                raw = await redis.get(key)
                order = self._decode(key, raw)
                # Removed between SCAN and GET
                if order is None:
                    continue
                orders.append((key[len(self._prefix):], order))
        except (aioredis.ConnectionError, aioredis.TimeoutError) as e:
            raise OrderStoreError(f"Redis scan failed: {e}") from e
        return orders

    async def _set(self, order_num: str, order: Order, **condition) -> bool:
        key = self._key(order_num)
        try:
            redis = await self._get_redis()
            written = await redis.set(key, json.dumps(order.to_dict()), **condition)
        except (aioredis.ConnectionError, aioredis.TimeoutError) as e:
            raise OrderStoreError(f"Redis set failed for {key}: {e}") from e
        return bool(written)

    async def _insert(self, order_num: str, order: Order) -> bool:
        return await self._set(order_num, order, nx=True)

    async def put(self, order_num: str, order: Order) -> bool:
        written = await self._set(order_num, order, xx=True)
        if not written:
            logger.debug(f"Order {order_num} removed elsewhere, update dropped")
        return written

    async def remove(self, order_num: str) -> bool:
        key = self._key(order_num)
        try:
            redis = await self._get_redis()
            deleted = await redis.delete(key)
        except (aioredis.ConnectionError, aioredis.TimeoutError) as e:
            raise OrderStoreError(f"Redis delete failed for {key}: {e}") from e
        return deleted > 0

    async def health(self) -> Tuple[bool, str]:
        """Ping the backing Redis server."""
        try:
            redis = await self._get_redis()
            pong = await redis.ping()
        except (aioredis.ConnectionError, aioredis.TimeoutError) as e:
            return False, f"Order store unreachable: {e}"
        if pong is True or pong == "PONG":
            return True, "RedisOrderStore ready"
        return False, f"Unexpected Redis ping response: {pong}"


def get_order_store(backend: Optional[str] = None) -> OrderStore:
    """
    Build the store named by backend (defaults to Config.ORDER_STORE_BACKEND).

    Raises:
        ValueError: If the backend name is unknown
    """
    name = (backend or Config.ORDER_STORE_BACKEND).strip().lower()
    if name == "memory":
        store: OrderStore = InMemoryOrderStore()
    elif name == "redis":
        store = RedisOrderStore()
    else:
        raise ValueError(f"Unknown order store backend: {name!r}")
    logger.debug(f"Using {type(store).__name__} for orders")
    return store
