import itertools
from datetime import datetime, timedelta, timezone
from typing import Dict, List
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from order_service.config import Settings
from order_service.database import create_session_factory, init_db
from order_service.errors import NotFoundError
from order_service.main import create_app
from order_service.models.order import Order, OrderItem
from order_service.repositories.order_repository import OrderRepository


class FakeOrderRepository:
    """Dict-backed stand-in for OrderRepository"""

    def __init__(self):
        self.orders: Dict[str, Order] = {}
        self.create_calls = 0
        self.update_calls = 0
        self._clock = itertools.count()
        self._epoch = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        return self._epoch + timedelta(seconds=next(self._clock))

    def create(self, order: Order, items: List[OrderItem]) -> Order:
        self.create_calls += 1
        now = self._now()
        order.id = str(uuid.uuid4())
        order.created_at = now
        order.updated_at = now
        for position, item in enumerate(items):
            item.id = str(uuid.uuid4())
            item.order_id = order.id
            item.created_at = now + timedelta(microseconds=position)
        order.items = list(items)
        self.orders[order.id] = order
        return order

    def get_by_id(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise NotFoundError("order not found")
        return order

    def _newest_first(self, orders, limit, offset):
        orders = sorted(orders, key=lambda o: o.created_at, reverse=True)
        return orders[offset:offset + limit]

    def get_by_user_id(self, user_id: str, limit: int, offset: int) -> List[Order]:
        return self._newest_first(
            [o for o in self.orders.values() if o.user_id == user_id], limit, offset
        )

    def list(self, limit: int, offset: int) -> List[Order]:
        return self._newest_first(list(self.orders.values()), limit, offset)

    def update_status(self, order_id: str, status: str) -> None:
        self.update_calls += 1
        order = self.get_by_id(order_id)
        order.status = status
        order.updated_at = self._now()

    def delete(self, order_id: str) -> None:
        if self.orders.pop(order_id, None) is None:
            raise NotFoundError("order not found")


@pytest.fixture
def fake_repository():
    return FakeOrderRepository()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repository(db_session):
    return OrderRepository(db_session)


@pytest.fixture
def client(session_factory):
    app_settings = Settings(
        DATABASE_URL="sqlite://",
        METRICS_ENABLED=False,
    )
    app = create_app(app_settings, session_factory=session_factory)
    with TestClient(app) as test_client:
        yield test_client
