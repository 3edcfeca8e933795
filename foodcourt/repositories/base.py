"""
Repository Abstract Base Class

Defines the interface contract for every food court data source.
Both MockFoodCourtRepository and SqlFoodCourtRepository implement it, so
route handlers never need to know whether the database is reachable.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from foodcourt.models import OrderStatus
from foodcourt.schemas import MenuItemResponse, OrderCreate, OrderResponse, VendorResponse


class BaseFoodCourtRepository(ABC):
    """
    Abstract base class for food court repositories.

    Example:
        >>> repo = MockFoodCourtRepository()
        >>> vendors = await repo.list_vendors()
        >>> [v.name for v in vendors]
        ['Burger Hub', 'Pizza Corner', 'Desi Dhaba']
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the data source.

        Returns:
            str: "mock" or "database", sent back in the X-Data-Source header
        """

    @abstractmethod
    async def list_vendors(self) -> List[VendorResponse]:
        """List active vendors ordered by id."""

    @abstractmethod
    async def vendor_exists(self, vendor_id: int) -> bool:
        """Check whether an active vendor with this id exists."""

    @abstractmethod
    async def list_menu(self, vendor_id: Optional[int] = None) -> List[MenuItemResponse]:
        """
        List available menu items.

        Args:
            vendor_id: Restrict to one vendor; None lists every vendor's items

        Returns:
            Available items; an unknown vendor yields an empty list
        """

    @abstractmethod
    async def list_foods(self) -> List[MenuItemResponse]:
        """List every menu item regardless of vendor or availability."""

    @abstractmethod
    async def list_orders(self, limit: int) -> List[OrderResponse]:
        """List the most recent orders, newest first, at most ``limit``."""

    @abstractmethod
    async def get_order(self, order_id: int) -> Optional[OrderResponse]:
        """Fetch one order, or None when it does not exist."""

    @abstractmethod
    async def create_order(self, order_data: OrderCreate) -> OrderResponse:
        """
        Persist a new order with status ``pending``.

        The caller has already checked that the vendor exists.
        """

    @abstractmethod
    async def update_order_status(self, order_id: int, status: OrderStatus) -> Optional[OrderResponse]:
        """Overwrite the status of an order; None when the order does not exist."""
