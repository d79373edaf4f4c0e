"""Matching of owner delegations against outstanding orders.

Functions here read and write the store they are given but hold no state
and no locks of their own. Notifications are returned as events for the
caller to deliver.
"""

from typing import Iterable, List, Optional, Set, Tuple

from loguru import logger

from .events import DelegationProgress, OrderEvent, OrderFulfilled
from .store import OrderStore

# Stands in for "no constraint" when one side of an intersection is empty
ANY = "Any"


def intersect(a: Iterable[str], b: Iterable[str]) -> Set[str]:
    """
    Intersect two collections of identities or labels.

    An empty side places no constraint on the dimension, so the result is
    the single-element set {ANY} rather than the empty set. Callers only
    test whether the result is non-empty (or its size), never its content.

    Args:
        a: First collection
        b: Second collection

    Returns:
        {ANY} if either side is empty, otherwise the set intersection
    """
    set_a = set(a)
    set_b = set(b)
    if not set_a or not set_b:
        return {ANY}
    return set_a & set_b


def _in_order(common: Set[str], preferred: Iterable[str]) -> Tuple[str, ...]:
    """Order members of common by their position in preferred."""
    ordered = tuple(x for x in dict.fromkeys(preferred) if x in common)
    return ordered or tuple(sorted(common))


async def find_order(
    store: OrderStore, user: str, labels: Iterable[str]
) -> Optional[str]:
    """
    Find an order for user that the given labels fully cover.

    An order matches when user is one of its users and every one of its
    labels is among labels. An order with no labels matches any labels.
    The first match in store iteration order wins.

    Returns:
        Order number, or None if nothing matches
    """
    wanted = set(labels)
    for order_num, order in await store.all():
        if user not in order.users:
            continue
        if not set(order.labels) <= wanted:
            continue
        return order_num
    return None


async def update_orders(
    store: OrderStore,
    owner: str,
    duration: str,
    users: Iterable[str],
    labels: Iterable[str],
) -> List[OrderEvent]:
    """
    Record a delegation by owner against every order it advances.

    An order is advanced when owner is one of its required owners and the
    delegation shares at least one user and one label with it (an empty
    side counts as shared, see intersect). For each advanced order the
    owner is added to owners_delegated if not already there and the
    delegation count goes up by one. Orders are never removed here, and an
    order removed since the scan started is skipped rather than recreated.

    Args:
        store: Order store to scan and update
        owner: Owner who delegated
        duration: Human-readable delegation duration, carried into messages
        users: Users the delegation was granted to
        labels: Labels the delegation covers

    Returns:
        One DelegationProgress event per shared user of each advanced order
    """
    users = list(users)
    labels = list(labels)
    events: List[OrderEvent] = []

    for order_num, order in await store.all():
        common_owners = intersect([owner], order.owners)
        common_users = intersect(users, order.users)
        common_labels = intersect(labels, order.labels)
        if not (common_owners and common_users and common_labels):
            continue

        if owner not in order.owners_delegated:
            order.owners_delegated.append(owner)
        order.delegated += 1
        if not await store.put(order_num, order):
            continue
        logger.debug(
            f"Order {order_num} advanced by {owner} "
            f"({len(order.owners_delegated)}/{len(order.owners)} owners, "
            f"{order.delegated} delegations)"
        )

        shared_labels = _in_order(common_labels, labels)
        for delegatee in _in_order(common_users, users):
            events.append(
                DelegationProgress(
                    owner=owner,
                    delegatee=delegatee,
                    order_num=order_num,
                    labels=shared_labels,
                    duration=duration,
                )
            )

    return events


async def fulfill_orders(
    store: OrderStore,
    user: str,
    owners: Iterable[str],
    labels: Iterable[str],
) -> List[OrderEvent]:
    """
    Remove every order the given owners now fully cover.

    An order is fulfilled when the supplied owners are exactly its required
    owners (every supplied owner is required, and every required owner was
    supplied), user is one of its users, and at least one label is shared.
    A partial set of owners never fulfils an order.

    Args:
        store: Order store to scan
        user: Delegatee the owners delegated to
        owners: Owners who have delegated
        labels: Labels delegated

    Returns:
        One OrderFulfilled event per removed order
    """
    supplied = set(owners)
    labels = list(labels)
    events: List[OrderEvent] = []

    for order_num, order in await store.all():
        required = set(order.owners)
        common_owners = intersect(supplied, required)
        covered = len(common_owners) == len(supplied) and (
            not required or required <= supplied
        )
        if not covered:
            continue
        if not intersect([user], order.users):
            continue
        if not intersect(labels, order.labels):
            continue

        # Another caller may have fulfilled it since the snapshot
        if not await store.remove(order_num):
            continue
        logger.info(f"Order {order_num} fulfilled for {user}")
        events.append(OrderFulfilled(user=user, order_num=order_num))

    return events
