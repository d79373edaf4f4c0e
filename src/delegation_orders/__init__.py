"""Delegation orders - tracking and matching of delegated-access requests."""

__version__ = "0.1.0"

from .orders import (
    Order,
    OrderIndex,
    Orderer,
    create_order,
    fulfill_orders,
    find_order,
    generate_order_num,
    intersect,
    update_orders,
)

__all__ = [
    "Order",
    "OrderIndex",
    "Orderer",
    "create_order",
    "find_order",
    "fulfill_orders",
    "generate_order_num",
    "intersect",
    "update_orders",
    "__version__",
]
