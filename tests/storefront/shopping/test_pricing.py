"""Pricing calculator: bulk flat rate, processing fee, and half-up rounding."""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from storefront.schemas.shopping import CartLineItem, CartTotals
from storefront.services.shopping.pricing import (
    DEFAULT_RULES,
    PricingRules,
    calculate_totals,
    round_to_cent,
)


def _items(*prices: str) -> list[CartLineItem]:
    return [
        CartLineItem(id=index, name=f"Profile {index}", price=Decimal(price))
        for index, price in enumerate(prices, start=1)
    ]


def test_three_items_below_threshold_sum_their_prices() -> None:
    totals = calculate_totals(_items("2.00", "2.00", "2.00"))

    assert totals.item_count == 3
    assert totals.subtotal == Decimal("6.00")
    assert totals.processing_fee == Decimal("0.47")
    assert totals.total == Decimal("6.47")
    assert totals.bulk_discount_applied is False


def test_ten_items_use_the_bulk_flat_rate() -> None:
    totals = calculate_totals(_items(*["2.00"] * 10))

    assert totals.item_count == 10
    assert totals.subtotal == Decimal("10.00")
    assert totals.processing_fee == Decimal("0.59")
    assert totals.total == Decimal("10.59")
    assert totals.bulk_discount_applied is True


def test_bulk_rate_ignores_individual_prices() -> None:
    prices = [
        "0.50", "3.00", "5.25", "2.00", "2.00", "1.10",
        "9.99", "2.00", "2.00", "2.00", "4.00", "0.75",
    ]

    totals = calculate_totals(_items(*prices))

    assert totals.subtotal == Decimal("12.00")


@pytest.mark.parametrize("count", [1, 5, 9])
def test_below_threshold_subtotal_is_the_rounded_sum(count: int) -> None:
    prices = ["1.37"] * count

    totals = calculate_totals(_items(*prices))

    assert totals.subtotal == round_to_cent(Decimal("1.37") * count)
    assert totals.total == totals.subtotal + totals.processing_fee


def test_processing_fee_rounds_half_up() -> None:
    # 5.00 * 0.029 + 0.30 = 0.445 exactly
    totals = calculate_totals(_items("5.00"))

    assert totals.processing_fee == Decimal("0.45")
    assert totals.total == Decimal("5.45")


def test_empty_cart_costs_nothing() -> None:
    assert calculate_totals([]) == CartTotals()


def test_charged_unit_price_switches_at_threshold() -> None:
    item = CartLineItem(id=1, name="Luna", price=Decimal("2.50"))

    assert DEFAULT_RULES.charged_unit_price(item, 9) == Decimal("2.50")
    assert DEFAULT_RULES.charged_unit_price(item, 10) == Decimal("1.00")


def test_rules_from_settings_use_configured_constants() -> None:
    configured = SimpleNamespace(
        bulk_discount_threshold=3,
        bulk_unit_price=Decimal("0.80"),
        processing_fee_rate=Decimal("0.05"),
        processing_fee_fixed=Decimal("0.10"),
    )
    rules = PricingRules.from_settings(configured)

    totals = calculate_totals(_items("2.00", "2.00", "2.00"), rules)

    assert totals.bulk_discount_applied is True
    assert totals.subtotal == Decimal("2.40")
    assert totals.processing_fee == Decimal("0.22")
    assert totals.total == Decimal("2.62")
