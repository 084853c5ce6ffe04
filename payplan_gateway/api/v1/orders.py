"""POST/GET/DELETE /v1/orders - Purchase orders and their installment plans"""

import time
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from payplan_gateway.api.v1.schemas import OrderRequest, OrderResponse, OrderInstallmentSchema
from payplan_gateway.api.dependencies import get_request_id, get_strict_mode, get_today, parse_id
from payplan_gateway.infrastructure.database.session import get_db
from payplan_gateway.infrastructure.database.models import PurchaseOrder
from payplan_gateway.infrastructure.database.repositories import OrderRepository, PaymentConditionRepository
from payplan_gateway.domain.orders import compute_total
from payplan_gateway.domain.installments import generate_plan, plan_from_override
from payplan_gateway.domain.models import LineItem
from payplan_gateway.domain.exceptions import InvalidInputError, NotFoundError
from payplan_gateway.infrastructure.observability.metrics import record_plan
from payplan_gateway.infrastructure.observability.logging import log_plan_generated

router = APIRouter()


def _to_response(order: PurchaseOrder) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        supplier_id=order.supplier_id,
        total_cents=order.total_cents,
        order_date=order.order_date,
        installments=[
            OrderInstallmentSchema(
                installment_id=str(inst.id),
                installment_number=inst.installment_number,
                amount_cents=inst.amount_cents,
                due_date=inst.due_date,
                status=inst.status,
            )
            for inst in order.installments
        ],
        created_at=order.created_at.isoformat(),
    )


@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(
    request_body: OrderRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    strict: bool = Depends(get_strict_mode),
):
    """
    Create a purchase order and its installment plan.

    Flow:
    1. Compute the order total from items, freight, taxes and discount
    2. Load the payment condition
    3. Generate the plan (or take the caller's override) from the order date
    4. Persist order + installments with a positive value
    """
    start_time = time.time()
    request_id = get_request_id(request)
    condition_id = parse_id(request_body.payment_condition_id, "payment condition")

    try:
        # 1. Order total
        items = [
            LineItem(
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                sku=item.sku,
                description=item.description,
            )
            for item in request_body.items
        ]
        total_cents = compute_total(
            items,
            freight_cents=request_body.freight_cents,
            discount_cents=request_body.discount_cents,
            taxes_cents=request_body.taxes_cents,
        )

        # 2. Payment condition
        condition_repo = PaymentConditionRepository(db)
        condition_record = condition_repo.get_condition(condition_id)
        if not condition_record:
            raise NotFoundError(f"Payment condition {condition_id} not found")

        # 3. Plan
        order_date = request_body.order_date or today
        if request_body.installments_override:
            plan = plan_from_override(
                (
                    (item.installment_number, item.amount_cents, item.due_date)
                    for item in request_body.installments_override
                ),
                base_date=order_date,
            )
        else:
            plan = generate_plan(
                total_cents,
                PaymentConditionRepository.to_domain(condition_record),
                order_date,
                strict=strict,
            )

        # 4. Persist
        order_repo = OrderRepository(db)
        db_order = order_repo.create_order(
            supplier_id=request_body.supplier_id,
            payment_condition_id=condition_id,
            items=items,
            freight_cents=request_body.freight_cents,
            discount_cents=request_body.discount_cents,
            taxes_cents=request_body.taxes_cents,
            total_cents=total_cents,
            order_date=order_date,
            plan=plan,
            order_number=(request_body.order_number or "").strip() or None,
            invoice_number=(request_body.invoice_number or "").strip() or None,
        )

        db.commit()
        db.refresh(db_order)

        duration_ms = (time.time() - start_time) * 1000
        down_payment = sum(inst.value_cents for inst in plan if inst.is_down_payment)
        record_plan("order", total_cents, len(db_order.installments))
        log_plan_generated(
            request_id, str(db_order.id), total_cents, len(db_order.installments), down_payment, duration_ms
        )

        return _to_response(db_order)

    except InvalidInputError as e:
        db.rollback()
        logging.warning(f"Invalid order: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except NotFoundError as e:
        db.rollback()
        logging.warning(f"Missing reference: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, db: Session = Depends(get_db)):
    """Retrieve an order with its installment schedule"""
    order = OrderRepository(db).get_order(parse_id(order_id, "order"))
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return _to_response(order)


@router.delete("/orders/{order_id}", status_code=204)
def delete_order(order_id: str, db: Session = Depends(get_db)):
    """Delete an order together with its installments"""
    if not OrderRepository(db).delete_order(parse_id(order_id, "order")):
        raise HTTPException(status_code=404, detail="Order not found")
    db.commit()
