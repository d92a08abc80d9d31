"""
Repositories package
"""
from order_service.repositories.order_repository import OrderRepository, OrderRepositoryProtocol

__all__ = ["OrderRepository", "OrderRepositoryProtocol"]
