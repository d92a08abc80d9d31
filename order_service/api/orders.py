"""
Order API endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from order_service.database import get_db
from order_service.repositories.order_repository import OrderRepository
from order_service.services.order_service import OrderService
from order_service.schemas.order import (
    CreateOrderRequest,
    UpdateOrderStatusRequest,
    OrderResponse,
    ListOrdersResponse,
    CancelOrderResponse,
)

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(request: Request, db: Session = Depends(get_db)) -> OrderService:
    """Dependency to get OrderService instance"""
    settings = request.app.state.settings
    return OrderService(
        OrderRepository(db),
        default_page_size=settings.DEFAULT_PAGE_SIZE,
        max_page_size=settings.MAX_PAGE_SIZE,
    )


@router.get("", response_model=ListOrdersResponse, summary="List orders")
def list_orders(
    user_id: Optional[str] = Query(None, description="Only orders of this user"),
    page_size: int = Query(0, description="Orders per page (default 10, max 100)"),
    page_token: Optional[str] = Query(None, description="Token from the previous page"),
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve orders, newest first

    - **user_id**: Filter by owning user (optional)
    - **page_size**: Orders per page (default: 10, max: 100)
    - **page_token**: next_page_token of the previous response
    """
    return service.list_orders(user_id=user_id, page_size=page_size, page_token=page_token)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order by ID")
def get_order(
    order_id: str,
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve a specific order with its items

    - **order_id**: Order ID
    """
    return service.get_order(order_id)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED, summary="Create order")
def create_order(
    order_data: CreateOrderRequest,
    service: OrderService = Depends(get_order_service)
):
    """
    Create a new order

    Order and items are stored together; total_amount is the sum of
    quantity * price over the items and status starts as PENDING.

    - **user_id**: Owning user (required)
    - **items**: List of {product_id, quantity, price} (at least one)
    """
    return service.create_order(order_data)


@router.patch("/{order_id}/status", response_model=OrderResponse, summary="Update order status")
def update_order_status(
    order_id: str,
    status_data: UpdateOrderStatusRequest,
    service: OrderService = Depends(get_order_service)
):
    """
    Update order status

    - **order_id**: Order ID
    - **status**: PENDING, CONFIRMED, SHIPPED, DELIVERED or CANCELLED
    """
    return service.update_order_status(order_id, status_data.status)


@router.post("/{order_id}/cancel", response_model=CancelOrderResponse, summary="Cancel order")
def cancel_order(
    order_id: str,
    service: OrderService = Depends(get_order_service)
):
    """
    Cancel an order that is neither cancelled nor delivered

    - **order_id**: Order ID
    """
    return service.cancel_order(order_id)
