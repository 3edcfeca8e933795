import asyncio

import pytest

from foodcourt.database import DataStore, StoreUnavailableError
from foodcourt.models import OrderStatus
from foodcourt.repositories import MockFoodCourtRepository, SqlFoodCourtRepository, select_repository
from foodcourt.schemas import OrderCreate


def run(coro):
    return asyncio.run(coro)


class TestMockRepository:
    def test_instances_do_not_share_orders(self):
        first = MockFoodCourtRepository()
        second = MockFoodCourtRepository()

        run(first.create_order(OrderCreate(vendor_id=1, customer_name="Asha", total_amount=60)))

        assert len(first.orders) == 3
        assert len(second.orders) == 2
        assert second.next_order_id == 3

    def test_list_orders_respects_limit(self):
        repo = MockFoodCourtRepository()
        for i in range(5):
            run(repo.create_order(OrderCreate(vendor_id=2, customer_name=f"N{i}", total_amount=200)))

        orders = run(repo.list_orders(limit=3))

        assert [o.customer_name for o in orders] == ["N4", "N3", "N2"]

    def test_update_status_unknown_order(self):
        repo = MockFoodCourtRepository()

        assert run(repo.update_order_status(99, OrderStatus.READY)) is None

    def test_update_status_sets_updated_at(self):
        repo = MockFoodCourtRepository()

        order = run(repo.update_order_status(2, OrderStatus.READY))

        assert order.status == OrderStatus.READY
        assert order.updated_at is not None
        assert run(repo.get_order(2)).status == OrderStatus.READY

    def test_vendor_exists(self):
        repo = MockFoodCourtRepository()

        assert run(repo.vendor_exists(3))
        assert not run(repo.vendor_exists(4))


class TestSqlRepository:
    def test_round_trip(self, sql_settings):
        async def scenario():
            store = DataStore(sql_settings)
            repo = SqlFoodCourtRepository(store)
            try:
                created = await repo.create_order(
                    OrderCreate(vendor_id=2, customer_name="Kiran", customer_phone="9000000001", total_amount=480)
                )
                fetched = await repo.get_order(created.id)
                updated = await repo.update_order_status(created.id, OrderStatus.CANCELLED)
                return created, fetched, updated
            finally:
                await store.dispose()

        created, fetched, updated = run(scenario())

        assert created.status == OrderStatus.PENDING
        assert fetched.customer_name == "Kiran"
        assert fetched.total_amount == 480
        assert updated.status == OrderStatus.CANCELLED

    def test_missing_order(self, sql_settings):
        async def scenario():
            store = DataStore(sql_settings)
            try:
                repo = SqlFoodCourtRepository(store)
                return await repo.get_order(12345), await repo.update_order_status(12345, OrderStatus.READY)
            finally:
                await store.dispose()

        assert run(scenario()) == (None, None)


class FakeStore:
    def __init__(self, connected):
        self.connected = connected


class TestSelectRepository:
    def test_connected_uses_database(self):
        assert select_repository(FakeStore(True), "sql", "mock", fallback_enabled=True) == "sql"

    def test_disconnected_uses_fallback(self):
        assert select_repository(FakeStore(False), "sql", "mock", fallback_enabled=True) == "mock"

    def test_disconnected_without_fallback_raises(self):
        with pytest.raises(StoreUnavailableError):
            select_repository(FakeStore(False), "sql", "mock", fallback_enabled=False)
