"""Order tracking: models, stores, matching and the Orderer facade."""

from .events import (
    DelegationProgress,
    NewOrderCreated,
    NewOrderLink,
    OrderEvent,
    OrderFulfilled,
)
from .matching import ANY, find_order, fulfill_orders, intersect, update_orders
from .models import Order, OrderIndex, create_order, generate_order_num
from .orderer import Orderer
from .store import (
    InMemoryOrderStore,
    OrderStore,
    OrderStoreError,
    RedisOrderStore,
    get_order_store,
)

__all__ = [
    "ANY",
    "DelegationProgress",
    "InMemoryOrderStore",
    "NewOrderCreated",
    "NewOrderLink",
    "Order",
    "OrderEvent",
    "OrderFulfilled",
    "OrderIndex",
    "OrderStore",
    "OrderStoreError",
    "Orderer",
    "RedisOrderStore",
    "create_order",
    "find_order",
    "fulfill_orders",
    "generate_order_num",
    "get_order_store",
    "intersect",
    "update_orders",
]
