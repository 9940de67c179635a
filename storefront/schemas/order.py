"""Schemas for checkout and order history."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    billing_email: str | None = Field(None, max_length=320)
    billing_name: str | None = Field(None, max_length=255)


class CompletePaymentRequest(BaseModel):
    payment_intent_id: str = Field(
        ..., min_length=1, max_length=255, description="Payment provider reference"
    )


class OrderItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    profile_id: int
    profile_name: str
    price: Decimal = Field(..., description="Unit price charged after any discount")
    delivered_contact_info: dict[str, Any] | None = None
    delivered_at: datetime | None = None


class Order(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    total_amount: Decimal
    processing_fee: Decimal
    status: str
    payment_intent_id: str | None = None
    billing_email: str | None = None
    billing_name: str | None = None
    created_at: datetime
    completed_at: datetime | None = None
    items: list[OrderItem] = Field(default_factory=list)


class OrderListResponse(BaseModel):
    orders: list[Order]
    total: int


__all__ = [
    "CheckoutRequest",
    "CompletePaymentRequest",
    "Order",
    "OrderItem",
    "OrderListResponse",
]
