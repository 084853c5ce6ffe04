"""Recurring expenses and the scheduled installment generation run"""

import time
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from payplan_gateway.api.v1.schemas import (
    GenerateRequest,
    GenerateResponse,
    RecurringExpenseRequest,
    RecurringExpenseResponse,
    RecurringInstallmentListResponse,
    RecurringInstallmentSchema,
)
from payplan_gateway.api.dependencies import get_request_id, get_today, parse_id
from payplan_gateway.config import settings
from payplan_gateway.infrastructure.database.session import get_db
from payplan_gateway.infrastructure.database.models import RecurringExpense, RecurringExpenseInstallment
from payplan_gateway.infrastructure.database.repositories import RecurringExpenseRepository
from payplan_gateway.domain.recurrence import expand
from payplan_gateway.domain.models import ValueType
from payplan_gateway.infrastructure.observability.metrics import record_recurring_run
from payplan_gateway.infrastructure.observability.logging import log_recurring_run
from payplan_gateway.utils.date_utils import first_of_month

router = APIRouter()

REPLACE_UPCOMING = "replace-upcoming"
REMOVE_UPCOMING = "remove-upcoming"


def _to_schema(inst: RecurringExpenseInstallment) -> RecurringInstallmentSchema:
    return RecurringInstallmentSchema(
        installment_id=str(inst.id),
        recurring_expense_id=str(inst.recurring_expense_id),
        reference_month=inst.reference_month,
        amount_cents=inst.amount_cents,
        due_date=inst.due_date,
        status=inst.status,
    )


def _to_response(expense: RecurringExpense, repo: RecurringExpenseRepository) -> RecurringExpenseResponse:
    return RecurringExpenseResponse(
        expense_id=str(expense.id),
        name=expense.name,
        amount_cents=expense.amount_cents,
        recurrence_type=expense.recurrence_type,
        start_date=expense.start_date,
        end_date=expense.end_date,
        is_active=expense.is_active,
        installments=[_to_schema(inst) for inst in repo.list_installments(expense.id)],
    )


@router.post("/recurring-expenses", response_model=RecurringExpenseResponse, status_code=201)
def create_recurring_expense(request_body: RecurringExpenseRequest, db: Session = Depends(get_db)):
    if request_body.end_date and request_body.end_date < request_body.start_date:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")
    if request_body.value_type == ValueType.FIXED and request_body.amount_cents is None:
        raise HTTPException(status_code=422, detail="amount_cents is required for fixed-value expenses")

    expense_repo = RecurringExpenseRepository(db)
    expense = expense_repo.create_expense(
        name=request_body.name,
        supplier_id=request_body.supplier_id,
        amount_cents=request_body.amount_cents,
        value_type=request_body.value_type.value,
        recurrence_type=request_body.recurrence_type.value,
        due_rule=request_body.due_rule.value,
        due_day=request_body.due_day,
        due_day_offset=request_body.due_day_offset,
        start_date=request_body.start_date,
        end_date=request_body.end_date,
        is_active=request_body.is_active,
    )
    db.commit()
    return _to_response(expense, expense_repo)


@router.get("/recurring-expenses/installments/upcoming", response_model=RecurringInstallmentListResponse)
def list_upcoming_installments(
    days: int = Query(60, ge=1, le=366, description="Window length in days from today"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Unpaid recurring installments due within the next `days` days"""
    installments = RecurringExpenseRepository(db).list_upcoming(today, days)
    return RecurringInstallmentListResponse(installments=[_to_schema(inst) for inst in installments])


@router.post("/recurring-expenses/installments/{installment_id}/pay", response_model=RecurringInstallmentSchema)
def pay_recurring_installment(installment_id: str, db: Session = Depends(get_db)):
    """Mark a recurring installment paid; rebuild runs never remove it afterwards"""
    installment = RecurringExpenseRepository(db).mark_paid(parse_id(installment_id, "installment"))
    if not installment:
        raise HTTPException(status_code=404, detail="Installment not found")
    db.commit()
    return _to_schema(installment)


@router.get("/recurring-expenses/{expense_id}", response_model=RecurringExpenseResponse)
def get_recurring_expense(expense_id: str, db: Session = Depends(get_db)):
    expense_repo = RecurringExpenseRepository(db)
    expense = expense_repo.get_expense(parse_id(expense_id, "recurring expense"))
    if not expense:
        raise HTTPException(status_code=404, detail="Recurring expense not found")
    return _to_response(expense, expense_repo)


@router.post("/recurring-expenses/generate", response_model=GenerateResponse)
def generate_recurring_installments(
    request_body: GenerateRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Generate upcoming installments for recurring expenses. Safe to re-run.

    Flow:
    1. Load active expenses (or the one named by expense_id)
    2. Optionally drop unpaid installments from the rebuild month onward
    3. Expand each expense over the lookahead window, skipping stored periods
    4. Insert the new installments in one transaction
    """
    start_time = time.time()
    request_id = get_request_id(request)
    months_ahead = request_body.months_ahead or settings.default_lookahead_months
    rebuild_mode = request_body.rebuild_mode
    rebuild_period = first_of_month(request_body.rebuild_from or today)
    expense_id = parse_id(request_body.expense_id, "recurring expense") if request_body.expense_id else None

    try:
        expense_repo = RecurringExpenseRepository(db)
        # A single expense being removed is processed even when deactivated
        expenses = expense_repo.get_expenses_for_generation(
            expense_id=expense_id,
            include_inactive=expense_id is not None and rebuild_mode == REMOVE_UPCOMING,
        )

        generated = 0
        removed = 0
        for expense in expenses:
            if rebuild_mode in (REPLACE_UPCOMING, REMOVE_UPCOMING):
                removed += expense_repo.delete_upcoming(expense.id, rebuild_period)
                if rebuild_mode == REMOVE_UPCOMING:
                    logging.info(
                        f"Removed upcoming installments for {expense.name}",
                        extra={"request_id": request_id},
                    )
                    continue

            if not expense.is_active:
                continue

            records = expand(
                RecurringExpenseRepository.to_domain(expense),
                months_ahead,
                today,
                expense_repo.get_existing_periods(expense.id),
            )
            generated += expense_repo.add_installments(records)

        db.commit()

        duration = time.time() - start_time
        record_recurring_run(generated, duration)
        log_recurring_run(request_id, len(expenses), generated, removed, duration * 1000)

        return GenerateResponse(generated=generated, removed=removed, expenses_processed=len(expenses))

    except Exception as e:
        db.rollback()
        logging.error(f"Recurring generation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
