"""Data models for delegation orders."""

import secrets
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..config import Config


@dataclass
class Order:
    """
    Outstanding request for delegated access to one or more labels.

    An order is tracked from creation until every required owner has
    delegated, at which point it is removed from the store.

    Invariants:
    - num is unique among tracked orders and never changes
    - owners_delegated only grows while the order is tracked
    - users, labels and owners are compared as sets, never by position
    """

    creator: str
    num: str
    users: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    time_requested: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    duration_requested: timedelta = field(default_factory=timedelta)
    owners: List[str] = field(default_factory=list)
    owners_delegated: List[str] = field(default_factory=list)
    delegated: int = 0

    def index(self) -> "OrderIndex":
        """Summarize this order for listings."""
        return OrderIndex(
            order_for=self.creator,
            order_id=self.num,
            order_owners=list(self.owners),
        )

    def copy(self) -> "Order":
        """Return an independent copy (lists are not shared)."""
        return replace(
            self,
            users=list(self.users),
            labels=list(self.labels),
            owners=list(self.owners),
            owners_delegated=list(self.owners_delegated),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe mapping."""
        return {
            "creator": self.creator,
            "num": self.num,
            "users": list(self.users),
            "labels": list(self.labels),
            "time_requested": self.time_requested.isoformat(),
            "duration_requested": self.duration_requested.total_seconds(),
            "owners": list(self.owners),
            "owners_delegated": list(self.owners_delegated),
            "delegated": self.delegated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        """
        Rebuild an order from to_dict() output.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the timestamp cannot be parsed
        """
        return cls(
            creator=data["creator"],
            num=data["num"],
            users=list(data.get("users", [])),
            labels=list(data.get("labels", [])),
            time_requested=datetime.fromisoformat(data["time_requested"]),
            duration_requested=timedelta(
                seconds=float(data.get("duration_requested", 0))
            ),
            owners=list(data.get("owners", [])),
            owners_delegated=list(data.get("owners_delegated", [])),
            delegated=int(data.get("delegated", 0)),
        )


@dataclass(frozen=True)
class OrderIndex:
    """Short description of an order, as shown to clients listing orders."""

    order_for: str
    order_id: str
    order_owners: List[str] = field(default_factory=list)


def create_order(
    name: str,
    order_num: str,
    time_requested: datetime,
    duration: timedelta,
    owners_delegated: Sequence[str],
    owners: Sequence[str],
    users: Sequence[str],
    labels: Sequence[str],
    num_delegated: int = 0,
) -> Order:
    """
    Build an order with every field populated.

    Args:
        name: Identity of the requester
        order_num: Unique order identifier (see generate_order_num)
        time_requested: When the request was made
        duration: Requested validity of the eventual delegation
        owners_delegated: Owners who have already delegated
        owners: Owners whose delegation is required
        users: Users who receive the delegation
        labels: Labels the order covers
        num_delegated: Delegations already recorded

    Returns:
        New Order instance
    """
    return Order(
        creator=name,
        num=order_num,
        users=list(users),
        labels=list(labels),
        time_requested=time_requested,
        duration_requested=duration,
        owners=list(owners),
        owners_delegated=list(owners_delegated),
        delegated=num_delegated,
    )


def generate_order_num(num_bytes: Optional[int] = None) -> str:
    """
    Generate an unguessable order number.

    Returns:
        Hex encoding of Config.ORDER_NUM_BYTES random bytes
    """
    return secrets.token_hex(num_bytes or Config.ORDER_NUM_BYTES)
