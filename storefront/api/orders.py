"""Checkout and order history endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.schemas.auth import UserIdentity
from storefront.schemas.order import (
    CheckoutRequest,
    CompletePaymentRequest,
    Order,
    OrderListResponse,
)
from storefront.services.auth_service import require_identity
from storefront.services.order_service import (
    EmptyCartError,
    OrderService,
    get_order_service,
)
from storefront.services.shopping_service import ShoppingSession, get_shopping_session

router = APIRouter()


@router.get("", response_model=OrderListResponse)
async def list_orders(
    identity: UserIdentity = Depends(require_identity),
    service: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    """Return the caller's orders, newest first."""

    return await service.list_orders(identity)


@router.post("/checkout", response_model=Order, status_code=status.HTTP_201_CREATED)
async def checkout(
    payload: CheckoutRequest,
    identity: UserIdentity = Depends(require_identity),
    shopping: ShoppingSession = Depends(get_shopping_session),
    service: OrderService = Depends(get_order_service),
) -> Order:
    """Turn the cart into a pending order and empty the cart."""

    try:
        return await service.checkout(
            identity,
            shopping,
            billing_email=payload.billing_email,
            billing_name=payload.billing_name,
        )
    except EmptyCartError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/{order_id}/complete", response_model=Order)
async def complete_order(
    order_id: str,
    payload: CompletePaymentRequest,
    identity: UserIdentity = Depends(require_identity),
    service: OrderService = Depends(get_order_service),
) -> Order:
    """Record payment and deliver the purchased contact details."""

    return await service.complete_payment(
        order_id, payload.payment_intent_id, user_id=identity.id
    )
