"""
Mock Repository Implementation

In-memory vendors, menus and orders served while the database is
unreachable. All state lives on the instance; the application creates one
at startup and keeps it on ``app.state``.

Behavior:
    - Three fixed vendors (Burger Hub, Pizza Corner, Desi Dhaba)
    - Fixed menus per vendor
    - Two seed orders; new order ids continue from 3
    - Orders live only as long as the process
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from foodcourt.models import OrderStatus
from foodcourt.repositories.base import BaseFoodCourtRepository
from foodcourt.schemas import MenuItemResponse, OrderCreate, OrderResponse, VendorResponse

logger = logging.getLogger(__name__)


SEED_VENDORS = [
    {"id": 1, "name": "Burger Hub", "cuisine": "Fast Food", "rating": 4.5, "contact_number": "9876543210"},
    {"id": 2, "name": "Pizza Corner", "cuisine": "Italian", "rating": 4.7, "contact_number": "9876543211"},
    {"id": 3, "name": "Desi Dhaba", "cuisine": "Indian", "rating": 4.3, "contact_number": "9876543212"},
]

SEED_MENU_ITEMS = {
    1: [
        {"id": 101, "name": "Classic Burger", "price": 120.00, "category": "Burgers"},
        {"id": 102, "name": "Cheese Burger", "price": 150.00, "category": "Burgers"},
        {"id": 103, "name": "French Fries", "price": 60.00, "category": "Sides"},
    ],
    2: [
        {"id": 201, "name": "Margherita Pizza", "price": 200.00, "category": "Pizza"},
        {"id": 202, "name": "Pepperoni Pizza", "price": 280.00, "category": "Pizza"},
    ],
    3: [
        {"id": 301, "name": "Dal Makhani", "price": 130.00, "category": "Main Course"},
        {"id": 302, "name": "Paneer Tikka", "price": 180.00, "category": "Starters"},
    ],
}

SEED_ORDERS = [
    {"id": 1, "vendor_id": 1, "customer_name": "John Doe", "total_amount": 270.00, "status": OrderStatus.DELIVERED},
    {"id": 2, "vendor_id": 2, "customer_name": "Jane Smith", "total_amount": 280.00, "status": OrderStatus.PREPARING},
]


class MockFoodCourtRepository(BaseFoodCourtRepository):
    """
    Mock implementation of the food court repository.

    Attributes:
        vendors: Fixed vendor rows
        menu_items: Menu rows keyed by vendor id
        orders: Growable list of orders
        next_order_id: Id handed to the next created order
    """

    def __init__(self):
        now = datetime.now(timezone.utc)

        self.vendors: List[VendorResponse] = [VendorResponse(**v) for v in SEED_VENDORS]
        self.menu_items: Dict[int, List[MenuItemResponse]] = {
            vendor_id: [MenuItemResponse(vendor_id=vendor_id, **item) for item in items]
            for vendor_id, items in SEED_MENU_ITEMS.items()
        }
        self.orders: List[OrderResponse] = [OrderResponse(created_at=now, **o) for o in SEED_ORDERS]
        self.next_order_id = max(o.id for o in self.orders) + 1
        self._lock = asyncio.Lock()

        logger.info(
            f"MockFoodCourtRepository initialized "
            f"({len(self.vendors)} vendors, {len(self.orders)} orders)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def list_vendors(self) -> List[VendorResponse]:
        return [v for v in self.vendors if v.is_active]

    async def vendor_exists(self, vendor_id: int) -> bool:
        return any(v.id == vendor_id and v.is_active for v in self.vendors)

    async def list_menu(self, vendor_id: Optional[int] = None) -> List[MenuItemResponse]:
        if vendor_id is None:
            items = [item for vendor_items in self.menu_items.values() for item in vendor_items]
        else:
            items = self.menu_items.get(vendor_id, [])
        return [item for item in items if item.is_available]

    async def list_foods(self) -> List[MenuItemResponse]:
        return [item for vendor_id in sorted(self.menu_items) for item in self.menu_items[vendor_id]]

    async def list_orders(self, limit: int) -> List[OrderResponse]:
        newest_first = sorted(self.orders, key=lambda o: (o.created_at, o.id), reverse=True)
        return newest_first[:limit]

    def _find(self, order_id: int) -> Optional[int]:
        for index, order in enumerate(self.orders):
            if order.id == order_id:
                return index
        return None

    async def get_order(self, order_id: int) -> Optional[OrderResponse]:
        index = self._find(order_id)
        return None if index is None else self.orders[index]

    async def create_order(self, order_data: OrderCreate) -> OrderResponse:
        async with self._lock:
            order = OrderResponse(
                id=self.next_order_id,
                vendor_id=order_data.vendor_id,
                customer_name=order_data.customer_name,
                customer_phone=order_data.customer_phone,
                items=order_data.items,
                total_amount=order_data.total_amount,
                status=OrderStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )
            self.next_order_id += 1
            self.orders.append(order)

        logger.info(f"Mock order #{order.id} created for vendor {order.vendor_id}")
        return order

    async def update_order_status(self, order_id: int, status: OrderStatus) -> Optional[OrderResponse]:
        async with self._lock:
            index = self._find(order_id)
            if index is None:
                return None
            updated = self.orders[index].model_copy(
                update={"status": status, "updated_at": datetime.now(timezone.utc)}
            )
            self.orders[index] = updated

        logger.info(f"Mock order #{order_id} status -> {status.value}")
        return updated
