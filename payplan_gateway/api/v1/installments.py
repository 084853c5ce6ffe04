"""GET /v1/installments, POST /v1/installments/{id}/pay - Order installment tracking"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from payplan_gateway.api.v1.schemas import InstallmentListResponse, OrderInstallmentSchema
from payplan_gateway.api.dependencies import get_today, parse_id
from payplan_gateway.infrastructure.database.session import get_db
from payplan_gateway.infrastructure.database.models import OrderInstallment
from payplan_gateway.infrastructure.database.repositories import InstallmentRepository
from payplan_gateway.domain.models import InstallmentStatus
from payplan_gateway.domain.status import effective_status

router = APIRouter()


def _to_schema(inst: OrderInstallment, today: date) -> OrderInstallmentSchema:
    return OrderInstallmentSchema(
        installment_id=str(inst.id),
        installment_number=inst.installment_number,
        amount_cents=inst.amount_cents,
        due_date=inst.due_date,
        status=effective_status(inst.status, inst.due_date, today),
    )


@router.get("/installments", response_model=InstallmentListResponse)
def list_installments(
    status: Optional[InstallmentStatus] = Query(None, description="Filter by status"),
    start_date: Optional[date] = Query(None, description="Earliest due date"),
    end_date: Optional[date] = Query(None, description="Latest due date"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    List order installments by due date.

    Pending installments already past due are moved to overdue before the
    filter is applied.
    """
    installment_repo = InstallmentRepository(db)
    marked = installment_repo.mark_overdue(today)
    db.commit()

    installments = installment_repo.list_installments(
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date,
    )
    return InstallmentListResponse(
        installments=[_to_schema(inst, today) for inst in installments],
        marked_overdue=marked,
    )


@router.post("/installments/{installment_id}/pay", response_model=OrderInstallmentSchema)
def pay_installment(
    installment_id: str,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    installment = InstallmentRepository(db).mark_paid(parse_id(installment_id, "installment"))
    if not installment:
        raise HTTPException(status_code=404, detail="Installment not found")
    db.commit()
    return _to_schema(installment, today)
