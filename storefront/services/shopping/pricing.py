"""Cart pricing under the bulk flat-rate rule and the processing fee model."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from storefront.schemas.shopping import CartLineItem, CartTotals

_CENT = Decimal("0.01")


def round_to_cent(amount: Decimal) -> Decimal:
    """Round half-up to two decimal places."""

    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingRules:
    """Bulk discount and fee constants applied by :func:`calculate_totals`."""

    bulk_threshold: int = 10
    bulk_unit_price: Decimal = Decimal("1.00")
    fee_rate: Decimal = Decimal("0.029")
    fee_fixed: Decimal = Decimal("0.30")

    @classmethod
    def from_settings(cls, settings) -> "PricingRules":
        return cls(
            bulk_threshold=settings.bulk_discount_threshold,
            bulk_unit_price=Decimal(settings.bulk_unit_price),
            fee_rate=Decimal(settings.processing_fee_rate),
            fee_fixed=Decimal(settings.processing_fee_fixed),
        )

    def bulk_applies(self, item_count: int) -> bool:
        return item_count >= self.bulk_threshold

    def charged_unit_price(self, item: CartLineItem, item_count: int) -> Decimal:
        """Price actually charged for ``item`` in a cart of ``item_count`` lines."""

        if self.bulk_applies(item_count):
            return round_to_cent(self.bulk_unit_price)
        return round_to_cent(Decimal(item.price))


DEFAULT_RULES = PricingRules()


def calculate_totals(
    items: Sequence[CartLineItem], rules: PricingRules = DEFAULT_RULES
) -> CartTotals:
    """Return item count, subtotal, processing fee, and grand total for ``items``.

    At or above the bulk threshold the subtotal is the item count times the
    flat per-item rate, regardless of the individual unit prices. An empty cart
    costs nothing, so no fixed fee is charged for it.
    """

    item_count = len(items)
    if item_count == 0:
        return CartTotals()

    bulk = rules.bulk_applies(item_count)
    if bulk:
        subtotal = rules.bulk_unit_price * item_count
    else:
        subtotal = sum((Decimal(item.price) for item in items), Decimal("0"))
    subtotal = round_to_cent(subtotal)

    processing_fee = round_to_cent(subtotal * rules.fee_rate + rules.fee_fixed)
    total = round_to_cent(subtotal + processing_fee)

    return CartTotals(
        item_count=item_count,
        subtotal=subtotal,
        processing_fee=processing_fee,
        total=total,
        bulk_discount_applied=bulk,
    )
