"""Data access layer for orders, payment conditions and recurring expenses"""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Set
from sqlalchemy import func
from sqlalchemy.orm import Session
from payplan_gateway.infrastructure.database.models import (
    OrderInstallment,
    PaymentConditionRecord,
    PurchaseOrder,
    RecurringExpense,
    RecurringExpenseInstallment,
)
from payplan_gateway.domain.models import (
    GeneratedInstallmentRecord,
    InstallmentDescriptor,
    InstallmentStatus,
    LineItem,
    PaymentCondition,
    RecurringExpenseConfig,
)


class PaymentConditionRepository:
    """Repository for payment conditions"""

    def __init__(self, db: Session):
        self.db = db

    def create_condition(
        self,
        name: str,
        installments_count: int,
        interval_days: int,
        down_payment_percent: Decimal,
        due_days: Optional[List[int]] = None,
    ) -> PaymentConditionRecord:
        db_condition = PaymentConditionRecord(
            name=name,
            installments_count=installments_count,
            interval_days=interval_days,
            down_payment_percent=down_payment_percent,
            due_days=list(due_days) if due_days else None,
        )
        self.db.add(db_condition)
        self.db.flush()
        return db_condition

    def get_condition(self, condition_id: uuid.UUID) -> Optional[PaymentConditionRecord]:
        return self.db.get(PaymentConditionRecord, condition_id)

    @staticmethod
    def to_domain(record: PaymentConditionRecord) -> PaymentCondition:
        """Map a stored row to the generator's input"""
        return PaymentCondition(
            installments_count=record.installments_count,
            interval_days=record.interval_days,
            down_payment_percent=Decimal(str(record.down_payment_percent or 0)),
            explicit_due_days=tuple(int(day) for day in record.due_days) if record.due_days else None,
            name=record.name,
        )


class OrderRepository:
    """Repository for purchase orders and their installments"""

    def __init__(self, db: Session):
        self.db = db

    def next_order_number(self) -> str:
        """Fallback order number: #001, #002, ..."""
        count = self.db.query(func.count(PurchaseOrder.id)).scalar() or 0
        return f"#{count + 1:03d}"

    def create_order(
        self,
        supplier_id: str,
        payment_condition_id: uuid.UUID,
        items: List[LineItem],
        freight_cents: int,
        discount_cents: int,
        taxes_cents: int,
        total_cents: int,
        order_date: date,
        plan: Iterable[InstallmentDescriptor],
        order_number: Optional[str] = None,
        invoice_number: Optional[str] = None,
    ) -> PurchaseOrder:
        """Create order with its installments; zero-value entries are not stored"""
        db_order = PurchaseOrder(
            order_number=order_number or self.next_order_number(),
            invoice_number=invoice_number,
            supplier_id=supplier_id,
            payment_condition_id=payment_condition_id,
            items=[
                {
                    "sku": item.sku,
                    "description": item.description,
                    "quantity": str(item.quantity),
                    "unit_price_cents": item.unit_price_cents,
                }
                for item in items
            ],
            freight_cents=freight_cents,
            discount_cents=discount_cents,
            taxes_cents=taxes_cents,
            total_cents=total_cents,
            order_date=order_date,
        )
        self.db.add(db_order)
        self.db.flush()

        for inst in plan:
            if inst.value_cents <= 0:
                continue
            db_order.installments.append(
                OrderInstallment(
                    supplier_id=supplier_id,
                    installment_number=inst.sequence_number,
                    amount_cents=inst.value_cents,
                    due_date=inst.due_date,
                    status=InstallmentStatus.PENDING.value,
                )
            )

        self.db.flush()
        return db_order

    def get_order(self, order_id: uuid.UUID) -> Optional[PurchaseOrder]:
        return self.db.get(PurchaseOrder, order_id)

    def delete_order(self, order_id: uuid.UUID) -> bool:
        """Delete order and its installments; False when it does not exist"""
        db_order = self.get_order(order_id)
        if db_order is None:
            return False
        self.db.delete(db_order)
        self.db.flush()
        return True


class InstallmentRepository:
    """Repository for order installment status tracking"""

    def __init__(self, db: Session):
        self.db = db

    def mark_overdue(self, today: date) -> int:
        """Move pending installments due before today to overdue"""
        return (
            self.db.query(OrderInstallment)
            .filter(
                OrderInstallment.status == InstallmentStatus.PENDING.value,
                OrderInstallment.due_date < today,
            )
            .update({OrderInstallment.status: InstallmentStatus.OVERDUE.value})
        )

    def list_installments(
        self,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[OrderInstallment]:
        query = self.db.query(OrderInstallment)
        if status:
            query = query.filter(OrderInstallment.status == status)
        if start_date:
            query = query.filter(OrderInstallment.due_date >= start_date)
        if end_date:
            query = query.filter(OrderInstallment.due_date <= end_date)
        return query.order_by(OrderInstallment.due_date.asc(), OrderInstallment.installment_number.asc()).all()

    def mark_paid(self, installment_id: uuid.UUID) -> Optional[OrderInstallment]:
        db_installment = self.db.get(OrderInstallment, installment_id)
        if db_installment is None:
            return None
        db_installment.status = InstallmentStatus.PAID.value
        db_installment.paid_at = datetime.now(timezone.utc)
        self.db.flush()
        return db_installment


class RecurringExpenseRepository:
    """Repository for recurring expenses and their generated installments"""

    def __init__(self, db: Session):
        self.db = db

    def create_expense(self, **fields) -> RecurringExpense:
        db_expense = RecurringExpense(**fields)
        self.db.add(db_expense)
        self.db.flush()
        return db_expense

    def get_expense(self, expense_id: uuid.UUID) -> Optional[RecurringExpense]:
        return self.db.get(RecurringExpense, expense_id)

    def get_expenses_for_generation(
        self,
        expense_id: Optional[uuid.UUID] = None,
        include_inactive: bool = False,
    ) -> List[RecurringExpense]:
        """Active expenses, or a single expense when expense_id is given"""
        query = self.db.query(RecurringExpense)
        if expense_id is not None:
            query = query.filter(RecurringExpense.id == expense_id)
        if not include_inactive:
            query = query.filter(RecurringExpense.is_active.is_(True))
        return query.order_by(RecurringExpense.created_at.asc()).all()

    def get_existing_periods(self, expense_id: uuid.UUID) -> Set[date]:
        rows = (
            self.db.query(RecurringExpenseInstallment.reference_month)
            .filter(RecurringExpenseInstallment.recurring_expense_id == expense_id)
            .all()
        )
        return {row.reference_month for row in rows}

    def add_installments(self, records: Iterable[GeneratedInstallmentRecord]) -> int:
        created = 0
        for record in records:
            self.db.add(
                RecurringExpenseInstallment(
                    recurring_expense_id=uuid.UUID(record.recurring_expense_id),
                    supplier_id=record.supplier_id,
                    reference_month=record.reference_period,
                    amount_cents=record.value_cents,
                    due_date=record.due_date,
                    status=record.status,
                )
            )
            created += 1
        self.db.flush()
        return created

    def delete_upcoming(self, expense_id: uuid.UUID, from_period: date) -> int:
        """Remove unpaid installments billed in from_period or later"""
        return (
            self.db.query(RecurringExpenseInstallment)
            .filter(
                RecurringExpenseInstallment.recurring_expense_id == expense_id,
                RecurringExpenseInstallment.status != InstallmentStatus.PAID.value,
                RecurringExpenseInstallment.reference_month >= from_period,
            )
            .delete()
        )

    def list_installments(self, expense_id: uuid.UUID) -> List[RecurringExpenseInstallment]:
        return (
            self.db.query(RecurringExpenseInstallment)
            .filter(RecurringExpenseInstallment.recurring_expense_id == expense_id)
            .order_by(RecurringExpenseInstallment.reference_month.asc())
            .all()
        )

    def list_upcoming(self, today: date, days: int = 60) -> List[RecurringExpenseInstallment]:
        """Unpaid installments due between today and today + days, soonest first"""
        return (
            self.db.query(RecurringExpenseInstallment)
            .filter(
                RecurringExpenseInstallment.status != InstallmentStatus.PAID.value,
                RecurringExpenseInstallment.due_date >= today,
                RecurringExpenseInstallment.due_date <= today + timedelta(days=days),
            )
            .order_by(RecurringExpenseInstallment.due_date.asc())
            .all()
        )

    def mark_paid(self, installment_id: uuid.UUID) -> Optional[RecurringExpenseInstallment]:
        db_installment = self.db.get(RecurringExpenseInstallment, installment_id)
        if db_installment is None:
            return None
        db_installment.status = InstallmentStatus.PAID.value
        db_installment.paid_at = datetime.now(timezone.utc)
        self.db.flush()
        return db_installment

    @staticmethod
    def to_domain(record: RecurringExpense) -> RecurringExpenseConfig:
        return RecurringExpenseConfig(
            id=str(record.id),
            amount_cents=record.amount_cents,
            recurrence_type=record.recurrence_type,
            due_day=record.due_day,
            start_date=record.start_date,
            end_date=record.end_date,
            supplier_id=record.supplier_id,
            due_rule=record.due_rule,
            due_day_offset=record.due_day_offset,
            value_type=record.value_type,
            is_active=record.is_active,
        )
