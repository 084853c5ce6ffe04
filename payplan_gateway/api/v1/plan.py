"""POST /v1/plan/preview - Preview the installment plan of a total under a payment condition"""

import logging
from datetime import date
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from payplan_gateway.api.v1.schemas import PlanPreviewRequest, PlanPreviewResponse, InstallmentSchema
from payplan_gateway.api.dependencies import get_request_id, get_strict_mode, get_today, parse_id
from payplan_gateway.infrastructure.database.session import get_db
from payplan_gateway.infrastructure.database.repositories import PaymentConditionRepository
from payplan_gateway.infrastructure.observability.metrics import record_plan
from payplan_gateway.domain.installments import generate_plan
from payplan_gateway.domain.models import PaymentCondition
from payplan_gateway.domain.exceptions import InvalidInputError

router = APIRouter()


@router.post("/plan/preview", response_model=PlanPreviewResponse)
def preview_plan(
    request_body: PlanPreviewRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    strict: bool = Depends(get_strict_mode),
):
    """
    Generate a plan without storing anything.

    The condition is either a stored one (payment_condition_id) or given
    inline. The base date defaults to today.
    """
    if request_body.payment_condition_id:
        record = PaymentConditionRepository(db).get_condition(
            parse_id(request_body.payment_condition_id, "payment condition")
        )
        if not record:
            raise HTTPException(status_code=404, detail="Payment condition not found")
        condition = PaymentConditionRepository.to_domain(record)
    elif request_body.condition is not None:
        inline = request_body.condition
        condition = PaymentCondition(
            installments_count=inline.installments_count,
            interval_days=inline.interval_days,
            down_payment_percent=Decimal(inline.down_payment_percent),
            explicit_due_days=tuple(inline.due_days) if inline.due_days else None,
            name=inline.name,
        )
    else:
        raise HTTPException(status_code=422, detail="payment_condition_id or condition is required")

    base_date = request_body.base_date or today
    try:
        plan = generate_plan(request_body.total_cents, condition, base_date, strict=strict)
    except InvalidInputError as e:
        logging.warning(f"Invalid payment condition: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    record_plan("preview", request_body.total_cents, 0)  # previews create no installments

    return PlanPreviewResponse(
        total_cents=request_body.total_cents,
        base_date=base_date,
        installments=[
            InstallmentSchema(
                installment_number=inst.sequence_number,
                amount_cents=inst.value_cents,
                due_date=inst.due_date,
                due_in_days=inst.due_in_days,
                is_down_payment=inst.is_down_payment,
            )
            for inst in plan
        ],
    )
