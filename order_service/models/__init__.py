"""
Models package
"""
from order_service.models.order import Order, OrderItem, OrderStatus

__all__ = ["Order", "OrderItem", "OrderStatus"]
