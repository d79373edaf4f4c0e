"""Orderer: serialized access to one order store plus event delivery."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from ..config import Config
from ..notify import HipchatClient, Notifier
from . import matching
from .events import OrderEvent, format_duration, new_order_events
from .models import Order, OrderIndex, generate_order_num
from .store import OrderStore, get_order_store


class Orderer:
    """
    Front door for order bookkeeping.

    Every store operation runs under a single asyncio.Lock, so at most one
    of create/find/update/fulfill touches the store at a time. Events are
    delivered to the notifier after the lock is released; a failing
    notifier is logged and never undoes a store change.
    """

    def __init__(
        self,
        store: Optional[OrderStore] = None,
        notifier: Optional[Notifier] = None,
        ro_host: Optional[str] = None,
    ):
        self.store = store if store is not None else get_order_store()
        self.notifier = notifier if notifier is not None else HipchatClient()
        self.ro_host = ro_host or Config.HIPCHAT_RO_HOST
        self._lock = asyncio.Lock()

    async def health(self) -> Tuple[bool, str]:
        """Report whether the order store is reachable."""
        healthy, detail = await self.store.health()
        if not healthy:
            logger.warning(f"Order store unhealthy: {detail}")
        return healthy, detail

    async def create_order(
        self,
        creator: str,
        users: Sequence[str],
        labels: Sequence[str],
        owners: Sequence[str],
        duration: timedelta,
        uses: int = 1,
        owner_chat_names: Optional[Mapping[str, str]] = None,
    ) -> Order:
        """
        Create and announce a new order.

        Args:
            creator: Requester identity
            users: Users who will receive the delegation
            labels: Labels requested
            owners: Owners whose delegation is required
            duration: Requested delegation duration
            uses: Number of uses requested
            owner_chat_names: Owner -> chat handle for the per-owner links
                (defaults to each owner's own name)

        Returns:
            The stored Order
        """
        order_num = generate_order_num()
        async with self._lock:
            order = await self.store.create(
                order_num=order_num,
                creator=creator,
                users=users,
                labels=labels,
                owners=owners,
                time_requested=datetime.now(timezone.utc),
                duration=duration,
            )
        logger.info(
            f"Order {order_num} created by {creator} for labels {list(labels)} "
            f"({len(owners)} owners required)"
        )

        if owner_chat_names is None:
            owner_chat_names = {owner: owner for owner in owners}
        await self._deliver(
            new_order_events(
                order_num=order_num,
                duration=format_duration(duration),
                names=users,
                labels=labels,
                uses=uses,
                owners=owner_chat_names,
                ro_host=self.ro_host,
            )
        )
        return order

    async def get_order(self, order_num: str) -> Optional[Order]:
        async with self._lock:
            return await self.store.get(order_num)

    async def list_orders(self) -> List[OrderIndex]:
        """Summaries of every outstanding order."""
        async with self._lock:
            orders = await self.store.all()
        return [order.index() for _, order in orders]

    async def find_order(self, user: str, labels: Iterable[str]) -> Optional[str]:
        async with self._lock:
            return await matching.find_order(self.store, user, labels)

    async def update_orders(
        self,
        owner: str,
        duration: str,
        users: Iterable[str],
        labels: Iterable[str],
    ) -> List[OrderEvent]:
        """Apply owner's delegation to matching orders and announce progress."""
        async with self._lock:
            events = await matching.update_orders(
                self.store, owner, duration, users, labels
            )
        await self._deliver(events)
        return events

    async def fulfill_orders(
        self, user: str, owners: Iterable[str], labels: Iterable[str]
    ) -> List[OrderEvent]:
        """Remove orders the owners fully cover and announce each one."""
        async with self._lock:
            events = await matching.fulfill_orders(self.store, user, owners, labels)
        await self._deliver(events)
        return events

    async def _deliver(self, events: Iterable[OrderEvent]) -> None:
        for event in events:
            try:
                await self.notifier.notify(event.message(), event.color)
            except Exception as e:
                logger.warning(
                    f"Failed to deliver {type(event).__name__} notification: {e}"
                )
