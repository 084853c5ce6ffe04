"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class RecurrenceType(str, Enum):
    """Billing frequency of a recurring expense"""

    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"


class DueRule(str, Enum):
    """How the due day inside a billed month is chosen"""

    SPECIFIC_DAY = "specific_day"  # fixed day of month, clamped to month end
    DAYS_AFTER_START = "days_after_start"  # offset from the 1st


class ValueType(str, Enum):
    FIXED = "fixed"
    VARIABLE = "variable"


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"
    AWAITING_VALUE = "awaiting_value"


@dataclass
class LineItem:
    """Single purchase order line"""

    quantity: Decimal
    unit_price_cents: int
    sku: str = ""
    description: str = ""


@dataclass(frozen=True)
class PaymentCondition:
    """Reusable split configuration applied to an order total"""

    installments_count: int
    interval_days: int = 0
    down_payment_percent: Decimal = Decimal("0")
    explicit_due_days: Optional[Tuple[int, ...]] = None
    name: str = ""


@dataclass
class InstallmentDescriptor:
    """Single payment in a generated plan"""

    sequence_number: int  # 0 is the down payment
    value_cents: int
    due_date: date
    is_down_payment: bool
    due_in_days: int = 0


@dataclass(frozen=True)
class RecurringExpenseConfig:
    """Periodic obligation that is billed once per reference period"""

    id: str
    amount_cents: Optional[int]
    recurrence_type: str
    due_day: int
    start_date: date
    end_date: Optional[date] = None
    supplier_id: Optional[str] = None
    due_rule: str = DueRule.SPECIFIC_DAY.value
    due_day_offset: int = 0
    value_type: str = ValueType.FIXED.value
    is_active: bool = True


@dataclass
class GeneratedInstallmentRecord:
    """Candidate installment for one (expense, reference period) pair"""

    recurring_expense_id: str
    reference_period: date
    due_date: date
    value_cents: Optional[int]
    supplier_id: Optional[str] = None
    status: str = InstallmentStatus.PENDING.value

