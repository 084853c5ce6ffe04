"""Cent rounding helpers - every monetary value is an integer number of cents"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal without picking up binary float noise"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_half_up(value: Number) -> int:
    """Round a fractional cent amount to whole cents, halves away from zero"""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
