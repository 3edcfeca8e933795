"""
SQLAlchemy Database Models

Fixed, versioned record shapes for the food court store. Any column change
must bump SCHEMA_VERSION together with the matching migration.
"""

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from foodcourt.database import Base

SCHEMA_VERSION = 1


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Vendor(Base):
    """A food stall in the court. Maintained by seed data, read-only over HTTP."""
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    cuisine = Column(String(50), nullable=True)
    rating = Column(Float, nullable=True)
    contact_number = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    menu_items = relationship("MenuItem", back_populates="vendor")

    def __repr__(self):
        return f"<Vendor #{self.id} - {self.name}>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    category = Column(String(50), nullable=True)
    is_available = Column(Boolean, default=True, nullable=False)

    vendor = relationship("Vendor", back_populates="menu_items")

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} ({self.price})>"


class Order(Base):
    """
    Customer order against a single vendor.

    Created by POST /api/orders, mutated only through the status endpoint,
    never deleted.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)

    # Customer
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=True)

    # Contents
    items = Column(Text, nullable=True)  # JSON string of ordered items
    total_amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)

    status = Column(
        Enum(
            OrderStatus,
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Order #{self.id} - {self.customer_name} - {self.status.value}>"
