"""Purchase order totals"""

from decimal import Decimal
from typing import Iterable
from payplan_gateway.domain.models import LineItem
from payplan_gateway.domain.exceptions import InvalidInputError
from payplan_gateway.domain.money import round_half_up, to_decimal


def compute_total(
    line_items: Iterable[LineItem],
    freight_cents: int = 0,
    discount_cents: int = 0,
    taxes_cents: int = 0,
) -> int:
    """
    Compute the order total in cents.

    total = round(sum(quantity * unit_price)) + freight + taxes - discount

    The item subtotal is rounded half-up to the cent once, after summing, so
    fractional quantities do not accumulate per-line rounding drift.

    A discount larger than subtotal + freight + taxes yields a negative total.
    It is returned as-is; plan generation produces no installments for it.

    Raises:
        InvalidInputError: quantity <= 0 or a negative monetary field
    """
    for name, value in (
        ("freight", freight_cents),
        ("discount", discount_cents),
        ("taxes", taxes_cents),
    ):
        if value < 0:
            raise InvalidInputError(f"{name} must not be negative, got {value}")

    subtotal = Decimal("0")
    for position, item in enumerate(line_items, start=1):
        quantity = to_decimal(item.quantity)
        if quantity <= 0:
            raise InvalidInputError(f"Item {position}: quantity must be positive, got {quantity}")
        if item.unit_price_cents < 0:
            raise InvalidInputError(
                f"Item {position}: unit price must not be negative, got {item.unit_price_cents}"
            )
        subtotal += quantity * item.unit_price_cents

    return round_half_up(subtotal) + freight_cents + taxes_cents - discount_cents
