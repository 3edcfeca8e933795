"""
Pydantic Schemas for Request/Response Validation

Malformed or incomplete payloads are rejected (400) instead of being
filled with defaults.
"""

import json
import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from foodcourt.models import OrderStatus

# Largest value a Numeric(10, 2) column holds
MAX_AMOUNT = 99_999_999.99


# =============================================================================
# READ MODELS
# =============================================================================

class VendorResponse(BaseModel):
    """A vendor as returned by GET /api/vendors."""
    id: int
    name: str
    cuisine: Optional[str] = None
    rating: Optional[float] = None
    contact_number: Optional[str] = None
    is_active: bool = True

    class Config:
        from_attributes = True


class MenuItemResponse(BaseModel):
    id: int
    vendor_id: int
    name: str
    price: float
    category: Optional[str] = None
    is_available: bool = True

    class Config:
        from_attributes = True


class OrderItem(BaseModel):
    """Single line of an order. Stored as-is; totals are not recomputed."""
    menu_item_id: Optional[int] = Field(None, gt=0, examples=[101])
    name: str = Field(..., min_length=1, max_length=100, examples=["Classic Burger"])
    quantity: int = Field(default=1, ge=1, le=99, examples=[2])
    unit_price: Optional[float] = Field(
        None, ge=0, le=MAX_AMOUNT, allow_inf_nan=False, examples=[120.0]
    )


class OrderResponse(BaseModel):
    """Response schema for a single order."""
    id: int
    vendor_id: int
    customer_name: str
    customer_phone: Optional[str] = None
    items: Optional[List[OrderItem]] = None
    total_amount: float
    status: OrderStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("items", mode="before")
    @classmethod
    def parse_items(cls, v: Any) -> Any:
        # Stored as a JSON string in the orders table
        if isinstance(v, str):
            return json.loads(v) if v else None
        return v


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderCreate(BaseModel):
    """Request schema for creating a new order."""
    vendor_id: int = Field(..., gt=0, examples=[1])
    customer_name: str = Field(..., min_length=1, max_length=100, examples=["John Doe"])
    customer_phone: Optional[str] = Field(None, max_length=20, examples=["9876543210"])
    total_amount: float = Field(..., ge=0, le=MAX_AMOUNT, allow_inf_nan=False, examples=[270.0])
    items: Optional[List[OrderItem]] = Field(None, min_length=1)

    @field_validator("customer_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        # Stored exactly as submitted, so padding is rejected rather than trimmed
        if not v.strip():
            raise ValueError("customer_name must not be blank")
        if v != v.strip():
            raise ValueError("customer_name must not start or end with whitespace")
        return v

    @field_validator("customer_phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not re.match(r"^\+?\d[\d\s\-()]{5,18}\d$", v):
            raise ValueError("Invalid phone number format")
        return v

    @field_validator("total_amount")
    @classmethod
    def validate_amount(cls, v: float) -> float:
        if round(v, 2) != v:
            raise ValueError("total_amount must have at most two decimal places")
        return v


class OrderStatusUpdate(BaseModel):
    """Body of PATCH /api/orders/{order_id}/status."""
    status: OrderStatus = Field(..., examples=["preparing"])

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderStatusUpdateResponse(BaseModel):
    success: bool = True
    message: str
    order_id: int
    status: OrderStatus


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response. Bump schema_version when the record shapes change."""
    status: str
    timestamp: datetime
    uptime: float
    service: str
    version: str
    schema_version: int
    database: str
