"""Recurring expense expansion - one installment per billed reference period"""

import logging
from datetime import date
from typing import AbstractSet, List
from payplan_gateway.domain.models import (
    DueRule,
    GeneratedInstallmentRecord,
    InstallmentStatus,
    RecurrenceType,
    RecurringExpenseConfig,
    ValueType,
)
from payplan_gateway.utils.date_utils import add_months, first_of_month, last_day_of_month, with_clamped_day

logger = logging.getLogger(__name__)

MONTH_STEPS = {
    RecurrenceType.MONTHLY.value: 1,
    RecurrenceType.BIMONTHLY.value: 2,
    RecurrenceType.QUARTERLY.value: 3,
    RecurrenceType.SEMIANNUAL.value: 6,
    RecurrenceType.ANNUAL.value: 12,
}

MIN_LOOKAHEAD_MONTHS = 1
MAX_LOOKAHEAD_MONTHS = 12


def month_step(recurrence_type: str) -> int:
    """Months between billed periods; unknown types fall back to monthly"""
    step = MONTH_STEPS.get(recurrence_type)
    if step is None:
        logger.warning("Unknown recurrence type %r, using monthly step", recurrence_type)
        return 1
    return step


def clamp_lookahead(months: int) -> int:
    return max(MIN_LOOKAHEAD_MONTHS, min(months, MAX_LOOKAHEAD_MONTHS))


def due_date_for_period(reference_period: date, expense: RecurringExpenseConfig) -> date:
    """
    Due date inside the billed month.

    - specific_day: due_day, clamped to the month's last day (31 -> Feb 28/29)
    - days_after_start: 1st of month + due_day_offset, kept inside the month
    """
    if expense.due_rule == DueRule.DAYS_AFTER_START.value:
        offset = max(0, min(expense.due_day_offset, last_day_of_month(reference_period) - 1))
        return reference_period.replace(day=1 + offset)
    return with_clamped_day(reference_period, expense.due_day)


def expand(
    expense: RecurringExpenseConfig,
    lookahead_months: int,
    today: date,
    existing_periods: AbstractSet[date],
) -> List[GeneratedInstallmentRecord]:
    """
    Generate the installments an expense owes over the lookahead window.

    Requirements:
    - One candidate per step-month period starting at today's month
    - Periods already in existing_periods are skipped (safe to re-run)
    - Periods whose due date falls before start_date or after end_date are skipped
    - Variable-value expenses get no value and wait for one to be entered

    Args:
        expense: Recurring expense configuration
        lookahead_months: Window size, clamped to 1..12
        today: Current date, supplied by the caller
        existing_periods: Reference periods already stored for this expense

    Returns:
        New records in reference-period order
    """
    step = month_step(expense.recurrence_type)
    lookahead = clamp_lookahead(lookahead_months)
    # ceil(lookahead / step), at least one period
    periods_to_generate = max(1, -(-lookahead // step))

    variable = expense.value_type == ValueType.VARIABLE.value
    start_period = first_of_month(today)
    records = []

    for i in range(periods_to_generate):
        reference_period = add_months(start_period, i * step)
        if reference_period in existing_periods:
            logger.debug("Installment already exists for %s - %s", expense.id, reference_period)
            continue

        due_date = due_date_for_period(reference_period, expense)
        if due_date < expense.start_date:
            logger.debug("Due date %s is before start date %s", due_date, expense.start_date)
            continue
        if expense.end_date is not None and due_date > expense.end_date:
            logger.debug("Due date %s is after end date %s", due_date, expense.end_date)
            continue

        records.append(
            GeneratedInstallmentRecord(
                recurring_expense_id=expense.id,
                reference_period=reference_period,
                due_date=due_date,
                value_cents=None if variable else expense.amount_cents,
                supplier_id=expense.supplier_id,
                status=(
                    InstallmentStatus.AWAITING_VALUE.value
                    if variable
                    else InstallmentStatus.PENDING.value
                ),
            )
        )

    return records
