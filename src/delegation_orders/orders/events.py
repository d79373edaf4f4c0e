"""Order events and their chat message formatting."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, List, Mapping, Tuple, Union
from urllib.parse import urlencode

from ..notify import Color

NEW_ORDER = (
    "{names} has created an order for the label {labels}. "
    "requesting {uses} delegations for {duration}"
)
NEW_ORDER_LINK = "@{chat_name} - https://{ro_host}?{query}"
ORDER_FULFILLED = "{name} has had order {order_num} fulfilled."
NEW_DELEGATION = (
    "{delegator} has delegated the label {labels} to {delegatee} "
    "(per order {order_num}) for {duration}"
)


def join_for_url(items: Iterable[str]) -> str:
    """Join with a bare comma; form encoding would turn a space into '+'."""
    return ",".join(items)


def join_for_text(items: Iterable[str]) -> str:
    """Join with comma-space for plain text."""
    return ", ".join(items)


def format_duration(duration: timedelta) -> str:
    """
    Render a duration the way the delegation form parses it.

    Examples: 1h0m0s, 30m0s, 45s, 1.5s, 250ms.
    """
    total = duration.total_seconds()
    if total == 0:
        return "0s"
    sign = "-" if total < 0 else ""
    total = abs(total)
    if total < 1:
        return f"{sign}{total * 1000:g}ms"

    minutes, seconds = divmod(total, 60)
    hours, minutes = divmod(int(minutes), 60)
    text = f"{seconds:g}s"
    if hours:
        text = f"{hours}h{minutes}m{text}"
    elif minutes:
        text = f"{minutes}m{text}"
    return sign + text


def build_order_query(
    delegator: str,
    labels: str,
    duration: str,
    uses: int,
    order_num: str,
    delegatees: str,
) -> str:
    """
    Build the query string for a per-owner delegation link.

    labels and delegatees are taken verbatim, already joined. Keys are
    emitted in sorted order.
    """
    params = {
        "delegator": delegator,
        "label": labels,
        "duration": duration,
        "uses": str(uses),
        "ordernum": order_num,
        "delegatee": delegatees,
    }
    return urlencode(sorted(params.items()))


@dataclass(frozen=True)
class NewOrderCreated:
    """An order was created."""

    names: Tuple[str, ...]
    labels: Tuple[str, ...]
    uses: int
    duration: str
    color: Color = Color.RED

    def message(self) -> str:
        return NEW_ORDER.format(
            names=join_for_url(self.names),
            labels=join_for_url(self.labels),
            uses=self.uses,
            duration=self.duration,
        )


@dataclass(frozen=True)
class NewOrderLink:
    """Link inviting one owner to delegate for an order."""

    owner: str
    chat_name: str
    ro_host: str
    order_num: str
    names: Tuple[str, ...]
    labels: Tuple[str, ...]
    uses: int
    duration: str
    color: Color = Color.GREEN

    def query(self) -> str:
        return build_order_query(
            delegator=self.owner,
            labels=join_for_url(self.labels),
            duration=self.duration,
            uses=self.uses,
            order_num=self.order_num,
            delegatees=join_for_url(self.names),
        )

    def message(self) -> str:
        return NEW_ORDER_LINK.format(
            chat_name=self.chat_name, ro_host=self.ro_host, query=self.query()
        )


@dataclass(frozen=True)
class DelegationProgress:
    """An owner's grant advanced an order for one delegatee."""

    owner: str
    delegatee: str
    order_num: str
    labels: Tuple[str, ...]
    duration: str
    color: Color = Color.YELLOW

    def message(self) -> str:
        return NEW_DELEGATION.format(
            delegator=self.owner,
            labels=join_for_text(self.labels),
            delegatee=self.delegatee,
            order_num=self.order_num,
            duration=self.duration,
        )


@dataclass(frozen=True)
class OrderFulfilled:
    """An order collected every required delegation and was removed."""

    user: str
    order_num: str
    color: Color = Color.PURPLE

    def message(self) -> str:
        return ORDER_FULFILLED.format(name=self.user, order_num=self.order_num)


OrderEvent = Union[NewOrderCreated, NewOrderLink, DelegationProgress, OrderFulfilled]


def new_order_events(
    order_num: str,
    duration: str,
    names: Iterable[str],
    labels: Iterable[str],
    uses: int,
    owners: Mapping[str, str],
    ro_host: str,
) -> List[OrderEvent]:
    """
    Events announcing a new order.

    Args:
        order_num: Order identifier
        duration: Human-readable requested duration
        names: Users the order delegates to
        labels: Labels requested
        uses: Number of delegations requested
        owners: Owner identity -> chat handle, one link per entry
        ro_host: Host the delegation links point at

    Returns:
        One NewOrderCreated followed by one NewOrderLink per owner
    """
    names = tuple(names)
    labels = tuple(labels)
    events: List[OrderEvent] = [
        NewOrderCreated(names=names, labels=labels, uses=uses, duration=duration)
    ]
    for owner, chat_name in owners.items():
        events.append(
            NewOrderLink(
                owner=owner,
                chat_name=chat_name,
                ro_host=ro_host,
                order_num=order_num,
                names=names,
                labels=labels,
                uses=uses,
                duration=duration,
            )
        )
    return events
