"""Installment plan generation for order payment conditions"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple
from payplan_gateway.domain.models import InstallmentDescriptor, PaymentCondition
from payplan_gateway.domain.exceptions import InvalidInputError
from payplan_gateway.domain.money import round_half_up, to_decimal
from payplan_gateway.utils.date_utils import add_days

logger = logging.getLogger(__name__)


def clamp_percent(value: Optional[Decimal]) -> Decimal:
    """Limit a percentage to 0..100, treating missing as 0"""
    if value is None:
        return Decimal("0")
    percent = to_decimal(value)
    if percent < 0:
        return Decimal("0")
    if percent > 100:
        return Decimal("100")
    return percent


def due_day_schedule(condition: PaymentCondition, strict: bool = False) -> List[int]:
    """
    Day offsets (from the base date) of the regular installments.

    Explicit due days win when present: negatives are dropped and the rest is
    sorted ascending. Otherwise offsets are interval_days, 2*interval_days, ...
    installments_count times.

    Raises:
        InvalidInputError: in strict mode, for negative explicit days or a
            non-positive installments_count without explicit days
    """
    if condition.explicit_due_days:
        offsets = [int(day) for day in condition.explicit_due_days]
        negative = [day for day in offsets if day < 0]
        if negative:
            if strict:
                raise InvalidInputError(f"Due days must not be negative: {negative}")
            logger.warning("Dropping negative due days %s", negative)
        return sorted(day for day in offsets if day >= 0)

    if condition.installments_count <= 0 and strict:
        raise InvalidInputError(
            f"installments_count must be positive, got {condition.installments_count}"
        )
    if condition.interval_days < 0 and strict:
        raise InvalidInputError(f"interval_days must not be negative, got {condition.interval_days}")

    count = max(condition.installments_count, 0)
    return [(i + 1) * condition.interval_days for i in range(count)]


def split_evenly(amount_cents: int, parts: int) -> List[int]:
    """
    Split an amount into parts, last part absorbing the rounding remainder.

    The rounded base is capped at amount // (parts - 1) so the last part never
    goes negative when the amount is only a few cents.

    Example:
        10000 cents / 3 -> [3333, 3333, 3334]
        7 cents / 10 -> [0] * 9 + [7]
    """
    if parts <= 0:
        return []
    base = round_half_up(Decimal(amount_cents) / parts)
    if parts > 1:
        base = min(base, amount_cents // (parts - 1))
    return [base] * (parts - 1) + [amount_cents - base * (parts - 1)]


def generate_plan(
    total_cents: int,
    condition: PaymentCondition,
    base_date: date,
    strict: bool = False,
) -> List[InstallmentDescriptor]:
    """
    Turn an order total and a payment condition into dated installments.

    Requirements:
    - Non-positive totals produce no plan
    - Optional down payment (percent of total) due on the base date, number 0
    - Remaining value split over the due-day schedule, numbered 1..N
    - Last installment absorbs rounding remainder, so values sum to the total

    Args:
        total_cents: Order total
        condition: Payment condition to apply
        base_date: Date the offsets are counted from (usually the order date)
        strict: Raise instead of returning an empty installment portion for
            malformed conditions

    Returns:
        Down payment (if any) followed by installments in due-date order

    Example:
        $100.00, 3x every 30 days, no down payment
        -> [$33.33 @ +30, $33.33 @ +60, $33.34 @ +90]
    """
    if total_cents <= 0:
        return []

    percent = clamp_percent(condition.down_payment_percent)
    down_payment = round_half_up(Decimal(total_cents) * percent / 100)
    remaining = max(total_cents - down_payment, 0)

    plan: List[InstallmentDescriptor] = []
    if down_payment > 0:
        plan.append(
            InstallmentDescriptor(
                sequence_number=0,
                value_cents=down_payment,
                due_date=base_date,
                is_down_payment=True,
                due_in_days=0,
            )
        )

    offsets = due_day_schedule(condition, strict=strict)
    if not offsets or remaining <= 0:
        return plan

    for index, (offset, value) in enumerate(zip(offsets, split_evenly(remaining, len(offsets)))):
        plan.append(
            InstallmentDescriptor(
                sequence_number=index + 1,
                value_cents=value,
                due_date=add_days(base_date, offset),
                is_down_payment=False,
                due_in_days=offset,
            )
        )

    return plan


def plan_from_override(
    items: Iterable[Tuple[int, int, date]],
    base_date: date,
) -> List[InstallmentDescriptor]:
    """
    Build a plan from caller-provided (sequence_number, value_cents, due_date)
    entries, used when an order is created with a hand-edited schedule.

    Raises:
        InvalidInputError: negative value or missing due date
    """
    plan = []
    for sequence_number, value_cents, due_date in items:
        if value_cents < 0:
            raise InvalidInputError(f"Installment {sequence_number}: value must not be negative")
        if due_date is None:
            raise InvalidInputError(f"Installment {sequence_number}: due date is required")
        plan.append(
            InstallmentDescriptor(
                sequence_number=sequence_number,
                value_cents=value_cents,
                due_date=due_date,
                is_down_payment=sequence_number == 0,
                due_in_days=(due_date - base_date).days,
            )
        )
    return sorted(plan, key=lambda d: (d.due_date, d.sequence_number))
