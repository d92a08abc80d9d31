from decimal import Decimal

import pytest

from order_service.errors import InvalidInputError, NotFoundError, CODE_INVALID_INPUT
from order_service.schemas.order import CreateOrderRequest, OrderItemCreate, OrderStatusWire
from order_service.services.order_service import OrderService


def make_request(user_id="user-1", items=None):
    if items is None:
        items = [OrderItemCreate(product_id="prod-1", quantity=2, price=Decimal("10.50"))]
    return CreateOrderRequest(user_id=user_id, items=items)


@pytest.fixture
def service(fake_repository):
    return OrderService(fake_repository)


def test_create_order_computes_total_and_starts_pending(service):
    order = service.create_order(make_request(items=[
        OrderItemCreate(product_id="prod-1", quantity=2, price=Decimal("10.50")),
        OrderItemCreate(product_id="prod-2", quantity=3, price=Decimal("1.25")),
    ]))

    assert order.id
    assert order.user_id == "user-1"
    assert order.status == OrderStatusWire.PENDING
    assert order.total_amount == Decimal("24.75")
    assert order.created_at is not None
    assert order.updated_at is not None


@pytest.mark.parametrize("request_data, message", [
    ({"user_id": ""}, "user_id is required"),
    ({"items": []}, "at least one item is required"),
    ({"items": [OrderItemCreate(product_id="", quantity=1, price=Decimal("1"))]}, "product_id is required"),
    ({"items": [OrderItemCreate(product_id="p", quantity=0, price=Decimal("1"))]}, "quantity must be positive"),
    ({"items": [OrderItemCreate(product_id="p", quantity=-1, price=Decimal("1"))]}, "quantity must be positive"),
    ({"items": [OrderItemCreate(product_id="p", quantity=1, price=Decimal("0"))]}, "price must be positive"),
    ({"items": [OrderItemCreate(product_id="p", quantity=2, price=Decimal("10.005"))]},
     "price must have at most 2 decimal places"),
    ({"items": [OrderItemCreate(product_id="p", quantity=1, price=Decimal("0.001"))]},
     "price must have at most 2 decimal places"),
])
def test_create_order_rejects_invalid_input(service, fake_repository, request_data, message):
    with pytest.raises(InvalidInputError) as exc_info:
        service.create_order(make_request(**request_data))

    assert exc_info.value.code == CODE_INVALID_INPUT
    assert str(exc_info.value) == message
    assert fake_repository.create_calls == 0
    assert fake_repository.orders == {}


def test_create_order_reports_first_failing_item(service):
    items = [
        OrderItemCreate(product_id="p", quantity=1, price=Decimal("1")),
        OrderItemCreate(product_id="p", quantity=0, price=Decimal("0")),
    ]
    with pytest.raises(InvalidInputError, match="quantity must be positive"):
        service.create_order(make_request(items=items))


def test_get_order_returns_items_in_request_order(service):
    created = service.create_order(make_request(items=[
        OrderItemCreate(product_id="sku-b", quantity=1, price=Decimal("5")),
        OrderItemCreate(product_id="sku-a", quantity=4, price=Decimal("2.50")),
    ]))

    order = service.get_order(created.id)

    assert [(i.product_id, i.quantity, i.price) for i in order.items] == [
        ("sku-b", 1, Decimal("5")),
        ("sku-a", 4, Decimal("2.50")),
    ]


def test_get_order_requires_id(service):
    with pytest.raises(InvalidInputError, match="id is required"):
        service.get_order("")


def test_get_order_propagates_not_found(service):
    with pytest.raises(NotFoundError):
        service.get_order("missing")


def test_list_orders_full_last_page_still_returns_token(service):
    for _ in range(2):
        service.create_order(make_request())

    # A full page always advertises a next page, even when nothing follows
    first = service.list_orders(page_size=2)
    assert len(first.orders) == 2
    assert first.next_page_token == "2"

    second = service.list_orders(page_size=2, page_token=first.next_page_token)
    assert second.orders == []
    assert second.next_page_token == ""


def test_list_orders_partial_page_has_no_token(service):
    for _ in range(2):
        service.create_order(make_request(user_id="u1"))
    service.create_order(make_request(user_id="u2"))

    page = service.list_orders(user_id="u1", page_size=3)

    assert len(page.orders) == 2
    assert page.next_page_token == ""


def test_list_orders_follows_next_page_token(service):
    created = [service.create_order(make_request(user_id="u1")) for _ in range(3)]

    first = service.list_orders(user_id="u1", page_size=2)
    assert [o.id for o in first.orders] == [created[2].id, created[1].id]
    assert first.next_page_token

    second = service.list_orders(user_id="u1", page_size=2, page_token=first.next_page_token)
    assert [o.id for o in second.orders] == [created[0].id]
    assert second.next_page_token == ""


def test_list_orders_scopes_by_user(service):
    service.create_order(make_request(user_id="u1"))
    service.create_order(make_request(user_id="u2"))

    assert {o.user_id for o in service.list_orders(user_id="u2").orders} == {"u2"}
    assert len(service.list_orders().orders) == 2


def test_list_orders_omits_items(service):
    service.create_order(make_request())

    assert service.list_orders().orders[0].items == []


def test_list_orders_page_size_defaults_and_cap(service, fake_repository):
    for _ in range(12):
        service.create_order(make_request())

    assert len(service.list_orders(page_size=0).orders) == 10
    assert len(service.list_orders(page_size=-5).orders) == 10

    capped = OrderService(fake_repository, max_page_size=5)
    page = capped.list_orders(page_size=50)
    assert len(page.orders) == 5
    assert page.next_page_token == "5"


def test_list_orders_malformed_token_starts_over(service):
    service.create_order(make_request())

    page = service.list_orders(page_token="not-a-number")

    assert len(page.orders) == 1


def test_update_order_status(service):
    created = service.create_order(make_request())

    order = service.update_order_status(created.id, OrderStatusWire.CONFIRMED)

    assert order.status == OrderStatusWire.CONFIRMED
    assert order.total_amount == created.total_amount
    assert len(order.items) == 1


def test_update_order_status_allows_any_transition(service):
    created = service.create_order(make_request())
    service.update_order_status(created.id, OrderStatusWire.DELIVERED)

    order = service.update_order_status(created.id, OrderStatusWire.PENDING)

    assert order.status == OrderStatusWire.PENDING


def test_update_order_status_rejects_unspecified(service, fake_repository):
    created = service.create_order(make_request())

    with pytest.raises(InvalidInputError, match="status is required"):
        service.update_order_status(created.id, OrderStatusWire.UNSPECIFIED)

    assert fake_repository.update_calls == 0
    assert service.get_order(created.id).status == OrderStatusWire.PENDING


def test_update_order_status_requires_id(service):
    with pytest.raises(InvalidInputError, match="id is required"):
        service.update_order_status("", OrderStatusWire.SHIPPED)


def test_update_order_status_not_found(service):
    with pytest.raises(NotFoundError):
        service.update_order_status("missing", OrderStatusWire.SHIPPED)


def test_cancel_pending_order(service):
    created = service.create_order(make_request())

    result = service.cancel_order(created.id)

    assert result.success is True
    assert service.get_order(created.id).status == OrderStatusWire.CANCELLED


def test_cancel_order_twice(service):
    created = service.create_order(make_request())
    service.cancel_order(created.id)

    with pytest.raises(InvalidInputError, match="order is already cancelled"):
        service.cancel_order(created.id)


def test_cancel_delivered_order(service):
    created = service.create_order(make_request())
    service.update_order_status(created.id, OrderStatusWire.DELIVERED)

    with pytest.raises(InvalidInputError, match="cannot cancel delivered order"):
        service.cancel_order(created.id)

    assert service.get_order(created.id).status == OrderStatusWire.DELIVERED


def test_cancel_order_requires_id(service):
    with pytest.raises(InvalidInputError, match="id is required"):
        service.cancel_order("")


def test_cancel_order_not_found(service):
    with pytest.raises(NotFoundError):
        service.cancel_order("missing")


def test_unknown_stored_status_reads_as_pending(service, fake_repository):
    created = service.create_order(make_request())
    fake_repository.orders[created.id].status = "lost-in-transit"

    assert service.get_order(created.id).status == OrderStatusWire.PENDING


def test_create_order_accepts_trailing_zero_cents(service):
    order = service.create_order(make_request(items=[
        OrderItemCreate(product_id="p", quantity=2, price=Decimal("10.500")),
    ]))

    assert order.total_amount == Decimal("21.00")


def test_list_orders_out_of_range_token_starts_over(service):
    created = service.create_order(make_request())

    page = service.list_orders(page_token="99999999999999999999999")

    assert [o.id for o in page.orders] == [created.id]
    assert page.next_page_token == ""
