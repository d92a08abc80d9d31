"""
Order Service - Business Logic Layer
"""
import logging
from decimal import Decimal
from typing import List, Optional

from order_service.errors import InvalidInputError, OrderServiceError
from order_service.models.order import Order, OrderItem, OrderStatus
from order_service.pagination import decode_page_token, encode_page_token
from order_service.repositories.order_repository import OrderRepositoryProtocol
from order_service.schemas.order import (
    CreateOrderRequest,
    OrderStatusWire,
    OrderItemResponse,
    OrderResponse,
    ListOrdersResponse,
    CancelOrderResponse,
    status_to_wire,
    status_from_wire,
)

logger = logging.getLogger(__name__)


class OrderService:
    """Service layer for order business logic"""

    def __init__(
        self,
        repository: OrderRepositoryProtocol,
        default_page_size: int = 10,
        max_page_size: int = 100,
    ):
        self.repository = repository
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def create_order(self, request: CreateOrderRequest) -> OrderResponse:
        """
        Create new order

        Steps:
        1. Validate user and every item
        2. Calculate total amount
        3. Save order and items in one transaction

        Args:
            request: Order creation data

        Returns:
            Created order, without items

        Raises:
            InvalidInputError: If a required field is missing or not positive
        """
        logger.info("Creating order user_id=%s", request.user_id)

        if not request.user_id:
            raise InvalidInputError("user_id is required")
        if not request.items:
            raise InvalidInputError("at least one item is required")

        total_amount = Decimal("0")
        items = []
        for item in request.items:
            if not item.product_id:
                raise InvalidInputError("product_id is required")
            if item.quantity <= 0:
                raise InvalidInputError("quantity must be positive")
            if item.price <= 0:
                raise InvalidInputError("price must be positive")
            # Prices are stored as Numeric(10, 2); finer values would drift from the total
            if item.price.normalize().as_tuple().exponent < -2:
                raise InvalidInputError("price must have at most 2 decimal places")

            items.append(OrderItem(
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
            ))
            total_amount += item.quantity * item.price

        order = Order(
            user_id=request.user_id,
            status=OrderStatus.PENDING.value,
            total_amount=total_amount,
        )

        try:
            order = self.repository.create(order, items)
        except OrderServiceError as e:
            logger.error("Failed to create order: %s", e)
            raise

        logger.info("Order created successfully order_id=%s", order.id)
        return self._to_response(order)

    def get_order(self, order_id: str) -> OrderResponse:
        """
        Get order by ID, including its items

        Raises:
            InvalidInputError: If order_id is empty
            NotFoundError: If order does not exist
        """
        logger.info("Getting order order_id=%s", order_id)

        if not order_id:
            raise InvalidInputError("id is required")

        try:
            order = self.repository.get_by_id(order_id)
        except OrderServiceError as e:
            logger.error("Failed to get order: %s", e)
            raise

        return self._to_response(order, order.items)

    def list_orders(
        self,
        user_id: Optional[str] = None,
        page_size: int = 0,
        page_token: Optional[str] = None,
    ) -> ListOrdersResponse:
        """
        List orders, newest first

        A next page token is returned whenever the page came back full, so the
        last page of an exact multiple is followed by one empty page.

        Args:
            user_id: Only orders of this user when given
            page_size: Orders per page; defaults when not positive, capped at max
            page_token: Token from a previous call; unreadable tokens start over
        """
        logger.info("Listing orders user_id=%s page_size=%s", user_id, page_size)

        if page_size <= 0:
            page_size = self.default_page_size
        if page_size > self.max_page_size:
            page_size = self.max_page_size

        offset = decode_page_token(page_token)

        try:
            if user_id:
                orders = self.repository.get_by_user_id(user_id, page_size, offset)
            else:
                orders = self.repository.list(page_size, offset)
        except OrderServiceError as e:
            logger.error("Failed to list orders: %s", e)
            raise

        next_page_token = ""
        if len(orders) == page_size:
            next_page_token = encode_page_token(offset + page_size)

        return ListOrdersResponse(
            orders=[self._to_response(o) for o in orders],
            next_page_token=next_page_token,
        )

    def update_order_status(self, order_id: str, status: OrderStatusWire) -> OrderResponse:
        """
        Update order status

        Any status may follow any other here; only cancel_order guards
        its transition.

        Raises:
            InvalidInputError: If order_id is empty or status is UNSPECIFIED
            NotFoundError: If order does not exist
        """
        logger.info("Updating order status order_id=%s status=%s", order_id, getattr(status, "value", status))

        if not order_id:
            raise InvalidInputError("id is required")
        if status == OrderStatusWire.UNSPECIFIED:
            raise InvalidInputError("status is required")

        try:
            self.repository.update_status(order_id, status_from_wire(status))
        except OrderServiceError as e:
            logger.error("Failed to update order status: %s", e)
            raise

        try:
            order = self.repository.get_by_id(order_id)
        except OrderServiceError as e:
            logger.error("Failed to get updated order: %s", e)
            raise

        logger.info("Order status updated successfully order_id=%s", order.id)
        return self._to_response(order, order.items)

    def cancel_order(self, order_id: str) -> CancelOrderResponse:
        """
        Cancel an order unless it is already cancelled or delivered

        Raises:
            InvalidInputError: If order_id is empty or order cannot be cancelled
            NotFoundError: If order does not exist
        """
        logger.info("Cancelling order order_id=%s", order_id)

        if not order_id:
            raise InvalidInputError("id is required")

        try:
            order = self.repository.get_by_id(order_id)
        except OrderServiceError as e:
            logger.error("Failed to get order: %s", e)
            raise

        if order.status == OrderStatus.CANCELLED.value:
            raise InvalidInputError("order is already cancelled")
        if order.status == OrderStatus.DELIVERED.value:
            raise InvalidInputError("cannot cancel delivered order")

        try:
            self.repository.update_status(order_id, OrderStatus.CANCELLED.value)
        except OrderServiceError as e:
            logger.error("Failed to cancel order: %s", e)
            raise

        logger.info("Order cancelled successfully order_id=%s", order_id)
        return CancelOrderResponse(success=True)

    @staticmethod
    def _to_response(order: Order, items: Optional[List[OrderItem]] = None) -> OrderResponse:
        return OrderResponse(
            id=order.id,
            user_id=order.user_id,
            status=status_to_wire(order.status),
            total_amount=order.total_amount,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemResponse.model_validate(i) for i in items or []],
        )
