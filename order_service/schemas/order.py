"""
Pydantic schemas for request/response validation
"""
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict

from order_service.models.order import OrderStatus


class OrderStatusWire(str, Enum):
    """Order status as exchanged with callers"""
    UNSPECIFIED = "UNSPECIFIED"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


_STORED_TO_WIRE = {
    OrderStatus.PENDING.value: OrderStatusWire.PENDING,
    OrderStatus.CONFIRMED.value: OrderStatusWire.CONFIRMED,
    OrderStatus.SHIPPED.value: OrderStatusWire.SHIPPED,
    OrderStatus.DELIVERED.value: OrderStatusWire.DELIVERED,
    OrderStatus.CANCELLED.value: OrderStatusWire.CANCELLED,
}

_WIRE_TO_STORED = {wire: stored for stored, wire in _STORED_TO_WIRE.items()}


def status_to_wire(status: str) -> OrderStatusWire:
    """Map a stored status to its wire value; unknown values read as PENDING"""
    return _STORED_TO_WIRE.get(status, OrderStatusWire.PENDING)


def status_from_wire(status: OrderStatusWire) -> str:
    """Map a wire status to its stored value; UNSPECIFIED falls back to pending"""
    return _WIRE_TO_STORED.get(status, OrderStatus.PENDING.value)


# Request schemas only describe shape; OrderService enforces the rules so
# every violation is reported as INVALID_INPUT with the failing field.

class OrderItemCreate(BaseModel):
    """Line item of a new order"""
    product_id: str = Field("", description="Product ID")
    quantity: int = Field(0, description="Quantity to order, must be positive")
    price: Decimal = Field(Decimal("0"), description="Unit price, must be positive")


class CreateOrderRequest(BaseModel):
    """Schema for creating a new order"""
    user_id: str = Field("", description="Owning user ID")
    items: List[OrderItemCreate] = Field(default_factory=list, description="Order items")


class UpdateOrderStatusRequest(BaseModel):
    """Schema for updating order status"""
    status: OrderStatusWire = Field(OrderStatusWire.UNSPECIFIED, description="New order status")


class OrderItemResponse(BaseModel):
    """Schema for order item response"""
    id: str
    product_id: str
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: str
    user_id: str
    status: OrderStatusWire
    total_amount: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []


class ListOrdersResponse(BaseModel):
    """Schema for a page of orders"""
    orders: List[OrderResponse]
    next_page_token: str = ""


class CancelOrderResponse(BaseModel):
    """Schema for cancel order response"""
    success: bool
