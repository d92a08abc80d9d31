"""
Schemas package
"""
from order_service.schemas.order import (
    OrderStatusWire,
    OrderItemCreate,
    CreateOrderRequest,
    UpdateOrderStatusRequest,
    OrderItemResponse,
    OrderResponse,
    ListOrdersResponse,
    CancelOrderResponse,
    status_to_wire,
    status_from_wire,
)

__all__ = [
    "OrderStatusWire",
    "OrderItemCreate",
    "CreateOrderRequest",
    "UpdateOrderStatusRequest",
    "OrderItemResponse",
    "OrderResponse",
    "ListOrdersResponse",
    "CancelOrderResponse",
    "status_to_wire",
    "status_from_wire",
]
