"""Installment status resolution relative to the current date"""

from datetime import date
from payplan_gateway.domain.models import InstallmentStatus


def effective_status(status: str | None, due_date: date, today: date) -> str:
    """
    Status an installment should show on a given day.

    Paid stays paid; anything else past its due date is overdue.
    """
    current = status or InstallmentStatus.PENDING.value
    if current == InstallmentStatus.PAID.value:
        return current
    if due_date < today:
        return InstallmentStatus.OVERDUE.value
    return current
