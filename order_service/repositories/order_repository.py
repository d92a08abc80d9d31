"""
Order Repository - Data Access Layer
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Protocol

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from order_service.errors import NotFoundError, wrap_storage_error
from order_service.models.order import Order, OrderItem


class OrderRepositoryProtocol(Protocol):
    """Persistence capabilities the order workflow depends on"""

    def create(self, order: Order, items: List[OrderItem]) -> Order: ...

    def get_by_id(self, order_id: str) -> Order: ...

    def get_by_user_id(self, user_id: str, limit: int, offset: int) -> List[Order]: ...

    def list(self, limit: int, offset: int) -> List[Order]: ...

    def update_status(self, order_id: str, status: str) -> None: ...

    def delete(self, order_id: str) -> None: ...


class OrderRepository:
    """Repository for Order and OrderItem persistence"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, order: Order, items: List[OrderItem]) -> Order:
        """
        Create order together with its items in one transaction

        Args:
            order: Order with user_id, status and total_amount set
            items: Items with product_id, quantity and price set

        Returns:
            The order with generated ids and timestamps

        Raises:
            ConflictError, UnavailableError, InternalError: Storage failure,
                nothing is written
        """
        now = datetime.now(timezone.utc)
        order.id = str(uuid.uuid4())
        order.created_at = now
        order.updated_at = now

        for position, item in enumerate(items):
            item.id = str(uuid.uuid4())
            item.order_id = order.id
            # Keeps request order stable under ORDER BY created_at
            item.created_at = now + timedelta(microseconds=position)

        order.items = list(items)

        try:
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise wrap_storage_error(e, "failed to create order") from e

        return order

    def get_by_id(self, order_id: str) -> Order:
        """
        Get order by ID with its items ordered by creation time

        Raises:
            NotFoundError: If no order has this id
        """
        try:
            order = (
                self.db.query(Order)
                .options(selectinload(Order.items))
                .populate_existing()
                .filter(Order.id == order_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise wrap_storage_error(e, "failed to get order") from e

        if not order:
            raise NotFoundError("order not found")
        return order

    def get_by_user_id(self, user_id: str, limit: int, offset: int) -> List[Order]:
        """Get orders of one user, newest first"""
        try:
            return self.db.query(Order).filter(
                Order.user_id == user_id
            ).order_by(desc(Order.created_at)).offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise wrap_storage_error(e, "failed to list user orders") from e

    def list(self, limit: int, offset: int) -> List[Order]:
        """Get all orders, newest first"""
        try:
            return self.db.query(Order).order_by(
                desc(Order.created_at)
            ).offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise wrap_storage_error(e, "failed to list orders") from e

    def update_status(self, order_id: str, status: str) -> None:
        """
        Update order status and refresh updated_at

        Raises:
            NotFoundError: If no order has this id
        """
        try:
            updated = self.db.query(Order).filter(Order.id == order_id).update(
                {
                    Order.status: status,
                    Order.updated_at: datetime.now(timezone.utc),
                }
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise wrap_storage_error(e, "failed to update order status") from e

        if updated == 0:
            raise NotFoundError("order not found")

    def delete(self, order_id: str) -> None:
        """
        Delete order items, then the order, in one transaction

        Raises:
            NotFoundError: If no order has this id
        """
        try:
            self.db.query(OrderItem).filter(OrderItem.order_id == order_id).delete()
            deleted = self.db.query(Order).filter(Order.id == order_id).delete()
            if deleted == 0:
                self.db.rollback()
                raise NotFoundError("order not found")
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise wrap_storage_error(e, "failed to delete order") from e
