"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from payplan_gateway.domain.models import DueRule, InstallmentStatus, RecurrenceType, ValueType


class PaymentConditionRequest(BaseModel):
    """Request body for POST /v1/payment-conditions"""

    name: str = Field(..., min_length=1)
    installments_count: int = Field(1, ge=0, description="Regular installments when no due days are given")
    interval_days: int = Field(30, ge=0, description="Days between installments")
    down_payment_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    due_days: Optional[List[int]] = Field(None, description="Explicit day offsets; override count/interval")


class PaymentConditionResponse(BaseModel):
    condition_id: str
    name: str
    installments_count: int
    interval_days: int
    down_payment_percent: Decimal
    due_days: Optional[List[int]] = None


class InstallmentSchema(BaseModel):
    """Single installment in a payment plan"""

    installment_number: int
    amount_cents: int
    due_date: date
    due_in_days: int = 0
    is_down_payment: bool = False


class PlanPreviewRequest(BaseModel):
    """Request body for POST /v1/plan/preview"""

    total_cents: int
    payment_condition_id: Optional[str] = None
    condition: Optional[PaymentConditionRequest] = None
    base_date: Optional[date] = None


class PlanPreviewResponse(BaseModel):
    total_cents: int
    base_date: date
    installments: List[InstallmentSchema]


class LineItemSchema(BaseModel):
    sku: str = ""
    description: str = ""
    quantity: Decimal = Field(..., gt=0)
    unit_price_cents: int = Field(..., ge=0)


class InstallmentOverride(BaseModel):
    """Hand-edited installment replacing the generated plan"""

    installment_number: int = Field(..., ge=0)
    amount_cents: int = Field(..., ge=0)
    due_date: date


class OrderRequest(BaseModel):
    """Request body for POST /v1/orders"""

    supplier_id: str = Field(..., min_length=1)
    payment_condition_id: str
    order_number: Optional[str] = None
    invoice_number: Optional[str] = None
    items: List[LineItemSchema] = Field(default_factory=list)
    freight_cents: int = Field(0, ge=0)
    discount_cents: int = Field(0, ge=0)
    taxes_cents: int = Field(0, ge=0)
    order_date: Optional[date] = None
    installments_override: Optional[List[InstallmentOverride]] = None


class OrderInstallmentSchema(BaseModel):
    installment_id: str
    installment_number: int
    amount_cents: int
    due_date: date
    status: str = InstallmentStatus.PENDING.value


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    supplier_id: str
    total_cents: int
    order_date: date
    installments: List[OrderInstallmentSchema]
    created_at: str


class InstallmentListResponse(BaseModel):
    """Response for GET /v1/installments"""

    installments: List[OrderInstallmentSchema]
    marked_overdue: int = 0


class RecurringExpenseRequest(BaseModel):
    """Request body for POST /v1/recurring-expenses"""

    name: str = Field(..., min_length=1)
    supplier_id: Optional[str] = None
    amount_cents: Optional[int] = Field(None, ge=0, description="Estimate for variable-value expenses")
    value_type: ValueType = ValueType.FIXED
    recurrence_type: RecurrenceType = RecurrenceType.MONTHLY
    due_rule: DueRule = DueRule.SPECIFIC_DAY
    due_day: int = Field(1, ge=1, le=31)
    due_day_offset: int = Field(0, ge=0)
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True


class RecurringInstallmentSchema(BaseModel):
    installment_id: str
    recurring_expense_id: str
    reference_month: date
    amount_cents: Optional[int] = None
    due_date: date
    status: str


class RecurringInstallmentListResponse(BaseModel):
    """Response for GET /v1/recurring-expenses/installments/upcoming"""

    installments: List[RecurringInstallmentSchema]


class RecurringExpenseResponse(BaseModel):
    expense_id: str
    name: str
    amount_cents: Optional[int] = None
    recurrence_type: str
    start_date: date
    end_date: Optional[date] = None
    is_active: bool
    installments: List[RecurringInstallmentSchema] = Field(default_factory=list)


class GenerateRequest(BaseModel):
    """Request body for POST /v1/recurring-expenses/generate"""

    expense_id: Optional[str] = None
    months_ahead: Optional[int] = Field(None, ge=1, le=12)
    rebuild_mode: Optional[Literal["replace-upcoming", "remove-upcoming"]] = None
    rebuild_from: Optional[date] = None


class GenerateResponse(BaseModel):
    generated: int
    removed: int = 0
    expenses_processed: int
