"""
SQL Repository Implementation

Reads and writes the vendors, menu_items and orders tables through the
DataStore's async sessions. Errors surface as StoreError and are turned
into a 500 response by the application's exception handler.
"""

import json
import logging
from typing import List, Optional

from sqlalchemy import select

from foodcourt.database import DataStore
from foodcourt.models import MenuItem, Order, OrderStatus, Vendor
from foodcourt.repositories.base import BaseFoodCourtRepository
from foodcourt.schemas import MenuItemResponse, OrderCreate, OrderResponse, VendorResponse

logger = logging.getLogger(__name__)


class SqlFoodCourtRepository(BaseFoodCourtRepository):
    """Repository backed by the relational store."""

    def __init__(self, store: DataStore):
        self.store = store

    @property
    def provider_name(self) -> str:
        return "database"

    async def list_vendors(self) -> List[VendorResponse]:
        async with self.store.session() as db:
            result = await db.execute(
                select(Vendor).where(Vendor.is_active.is_(True)).order_by(Vendor.id)
            )
            return [VendorResponse.model_validate(v) for v in result.scalars().all()]

    async def vendor_exists(self, vendor_id: int) -> bool:
        async with self.store.session() as db:
            result = await db.execute(
                select(Vendor.id).where(Vendor.id == vendor_id, Vendor.is_active.is_(True))
            )
            return result.scalar_one_or_none() is not None

    async def list_menu(self, vendor_id: Optional[int] = None) -> List[MenuItemResponse]:
        query = select(MenuItem).where(MenuItem.is_available.is_(True))
        if vendor_id is not None:
            query = query.where(MenuItem.vendor_id == vendor_id)
        query = query.order_by(MenuItem.vendor_id, MenuItem.id)

        async with self.store.session() as db:
            result = await db.execute(query)
            return [MenuItemResponse.model_validate(item) for item in result.scalars().all()]

    async def list_foods(self) -> List[MenuItemResponse]:
        async with self.store.session() as db:
            result = await db.execute(select(MenuItem).order_by(MenuItem.vendor_id, MenuItem.id))
            return [MenuItemResponse.model_validate(item) for item in result.scalars().all()]

    async def list_orders(self, limit: int) -> List[OrderResponse]:
        query = select(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(limit)

        async with self.store.session() as db:
            result = await db.execute(query)
            return [OrderResponse.model_validate(o) for o in result.scalars().all()]

    async def get_order(self, order_id: int) -> Optional[OrderResponse]:
        async with self.store.session() as db:
            order = await db.get(Order, order_id)
            return None if order is None else OrderResponse.model_validate(order)

    async def create_order(self, order_data: OrderCreate) -> OrderResponse:
        items_json = None
        if order_data.items is not None:
            items_json = json.dumps([item.model_dump() for item in order_data.items])

        new_order = Order(
            vendor_id=order_data.vendor_id,
            customer_name=order_data.customer_name,
            customer_phone=order_data.customer_phone,
            items=items_json,
            total_amount=order_data.total_amount,
            status=OrderStatus.PENDING,
        )

        async with self.store.session() as db:
            db.add(new_order)
            await db.commit()
            await db.refresh(new_order)

        logger.info(f"Order #{new_order.id} created for vendor {new_order.vendor_id}")
        return OrderResponse.model_validate(new_order)

    async def update_order_status(self, order_id: int, status: OrderStatus) -> Optional[OrderResponse]:
        async with self.store.session() as db:
            order = await db.get(Order, order_id)
            if order is None:
                return None
            order.status = status
            await db.commit()
            await db.refresh(order)

        logger.info(f"Order #{order_id} status -> {status.value}")
        return OrderResponse.model_validate(order)
