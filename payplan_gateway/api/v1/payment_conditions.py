"""POST/GET /v1/payment-conditions - Payment conditions read by plan generation"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from payplan_gateway.api.v1.schemas import PaymentConditionRequest, PaymentConditionResponse
from payplan_gateway.api.dependencies import parse_id
from payplan_gateway.infrastructure.database.session import get_db
from payplan_gateway.infrastructure.database.models import PaymentConditionRecord
from payplan_gateway.infrastructure.database.repositories import PaymentConditionRepository

router = APIRouter()


def _to_response(condition: PaymentConditionRecord) -> PaymentConditionResponse:
    return PaymentConditionResponse(
        condition_id=str(condition.id),
        name=condition.name,
        installments_count=condition.installments_count,
        interval_days=condition.interval_days,
        down_payment_percent=condition.down_payment_percent,
        due_days=condition.due_days,
    )


@router.post("/payment-conditions", response_model=PaymentConditionResponse, status_code=201)
def create_payment_condition(request_body: PaymentConditionRequest, db: Session = Depends(get_db)):
    condition_repo = PaymentConditionRepository(db)
    condition = condition_repo.create_condition(
        name=request_body.name,
        installments_count=request_body.installments_count,
        interval_days=request_body.interval_days,
        down_payment_percent=request_body.down_payment_percent,
        due_days=request_body.due_days,
    )
    db.commit()
    return _to_response(condition)


@router.get("/payment-conditions/{condition_id}", response_model=PaymentConditionResponse)
def get_payment_condition(condition_id: str, db: Session = Depends(get_db)):
    condition = PaymentConditionRepository(db).get_condition(parse_id(condition_id, "payment condition"))
    if not condition:
        raise HTTPException(status_code=404, detail="Payment condition not found")
    return _to_response(condition)
