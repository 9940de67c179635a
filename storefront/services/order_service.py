"""Checkout, payment completion and order history."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.db.connection import get_db
from storefront.db.models import Order, OrderItem, Profile
from storefront.schemas.auth import UserIdentity
from storefront.schemas.order import Order as OrderSchema
from storefront.schemas.order import OrderListResponse
from storefront.schemas.shopping import CartLineItem
from storefront.services.auth_service import AuthenticationError
from storefront.services.profile_service import ProfileService
from storefront.services.shopping import calculate_totals
from storefront.services.shopping_service import ShoppingSession

logger = logging.getLogger(__name__)


class EmptyCartError(ValueError):
    pass


class OrderService:
    """Turns a cart into an order and delivers contact details once paid."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._profiles = ProfileService(session)

    async def checkout(
        self,
        identity: UserIdentity | None,
        shopping: ShoppingSession,
        *,
        billing_email: str | None = None,
        billing_name: str | None = None,
    ) -> OrderSchema:
        """Create a pending order from the cart and clear the cart.

        Prices come from the catalog rather than the stored cart lines so a
        stale cart cannot undercharge.
        """

        if identity is None:
            raise AuthenticationError("Not authenticated")
        cart_items = shopping.items
        if not cart_items:
            raise EmptyCartError("Cart is empty")

        profile_ids = [item.id for item in cart_items]
        profiles = await self._profiles.approved_profiles(profile_ids)
        missing = [profile_id for profile_id in profile_ids if profile_id not in profiles]
        if missing:
            raise LookupError(
                f"Profiles not available for purchase: {', '.join(map(str, missing))}"
            )

        priced = [
            CartLineItem(
                id=profile.id,
                name=profile.name,
                price=profile.price,
                location=profile.location,
            )
            for profile in (profiles[profile_id] for profile_id in profile_ids)
        ]
        rules = shopping.rules
        totals = calculate_totals(priced, rules)
        await self._profiles.ensure_user_profile(identity)

        order = Order(
            user_id=identity.id,
            total_amount=totals.total,
            processing_fee=totals.processing_fee,
            status="pending",
            payment_intent_id=None,
            billing_email=billing_email or identity.email,
            billing_name=billing_name,
            completed_at=None,
            items=[
                OrderItem(
                    profile_id=item.id,
                    profile_name=item.name,
                    price=rules.charged_unit_price(item, totals.item_count),
                    delivered_contact_info=None,
                    delivered_at=None,
                )
                for item in priced
            ],
        )
        self._session.add(order)
        # The cart is only emptied once the order is durable.
        await self._session.commit()
        await asyncio.to_thread(shopping.clear)
        logger.info(
            "Order %s created for %s: %s items, total %s",
            order.id,
            identity.id,
            totals.item_count,
            totals.total,
        )
        return OrderSchema.model_validate(order)

    async def _load_order(self, order_id: str) -> Order | None:
        result = await self._session.execute(
            select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
        )
        return result.scalar_one_or_none()

    async def complete_payment(
        self,
        order_id: str,
        payment_intent_id: str,
        *,
        user_id: str | None = None,
    ) -> OrderSchema:
        """Mark the order paid and snapshot each profile's contact details.

        Completing an already completed order returns it unchanged.
        """

        order = await self._load_order(order_id)
        if order is None or (user_id is not None and order.user_id != user_id):
            raise LookupError(f"Order {order_id} not found")
        if order.status == "completed":
            return OrderSchema.model_validate(order)

        now = datetime.now(UTC)
        result = await self._session.execute(
            select(Profile).where(Profile.id.in_([item.profile_id for item in order.items]))
        )
        profiles = {profile.id: profile for profile in result.scalars().all()}
        for item in order.items:
            profile = profiles.get(item.profile_id)
            item.delivered_contact_info = profile.contact_info if profile else {}
            item.delivered_at = now

        order.status = "completed"
        order.payment_intent_id = payment_intent_id
        order.completed_at = now
        await self._session.flush()
        logger.info("Order %s completed with payment %s", order.id, payment_intent_id)
        return OrderSchema.model_validate(order)

    async def list_orders(self, identity: UserIdentity | None) -> OrderListResponse:
        if identity is None:
            raise AuthenticationError("Not authenticated")
        result = await self._session.execute(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.user_id == identity.id)
            .order_by(Order.created_at.desc())
        )
        orders = [OrderSchema.model_validate(order) for order in result.scalars().all()]
        return OrderListResponse(orders=orders, total=len(orders))


async def get_order_service(session: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(session)


__all__ = ["EmptyCartError", "OrderService", "get_order_service"]
