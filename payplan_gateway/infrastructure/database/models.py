"""SQLAlchemy ORM models for orders, payment conditions and recurring expenses"""

import uuid
from sqlalchemy import (
    Column,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class PaymentConditionRecord(Base):
    """Stored payment condition (the fields plan generation reads)"""

    __tablename__ = "payment_condition"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    installments_count = Column(Integer, nullable=False, default=1)
    interval_days = Column(Integer, nullable=False, default=0)
    down_payment_percent = Column(Numeric(5, 2), nullable=False, default=0)
    due_days = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PurchaseOrder(Base):
    """Supplier purchase order"""

    __tablename__ = "purchase_order"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_number = Column(Text, nullable=False)
    invoice_number = Column(Text, nullable=True)
    supplier_id = Column(Text, nullable=False, index=True)
    payment_condition_id = Column(
        Uuid, ForeignKey("payment_condition.id", ondelete="RESTRICT"), nullable=False
    )
    items = Column(JSON, nullable=False)
    freight_cents = Column(BigInteger, nullable=False, default=0)
    discount_cents = Column(BigInteger, nullable=False, default=0)
    taxes_cents = Column(BigInteger, nullable=False, default=0)
    total_cents = Column(BigInteger, nullable=False)
    order_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="open")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    installments = relationship(
        "OrderInstallment",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderInstallment.installment_number",
    )


class OrderInstallment(Base):
    """Individual installment within an order's payment plan"""

    __tablename__ = "order_installment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("purchase_order.id", ondelete="CASCADE"), nullable=False)
    supplier_id = Column(Text, nullable=False, index=True)
    installment_number = Column(Integer, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(Text, nullable=False, default="pending")
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    order = relationship("PurchaseOrder", back_populates="installments")


class RecurringExpense(Base):
    """Periodic obligation such as rent or utilities"""

    __tablename__ = "recurring_expense"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    supplier_id = Column(Text, nullable=True)
    amount_cents = Column(BigInteger, nullable=True)
    value_type = Column(Text, nullable=False, default="fixed")
    recurrence_type = Column(Text, nullable=False, default="monthly")
    due_rule = Column(Text, nullable=False, default="specific_day")
    due_day = Column(Integer, nullable=False, default=1)
    due_day_offset = Column(Integer, nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    installments = relationship(
        "RecurringExpenseInstallment", back_populates="expense", cascade="all, delete-orphan"
    )


class RecurringExpenseInstallment(Base):
    """Installment billed for one reference month of a recurring expense"""

    __tablename__ = "recurring_expense_installment"
    __table_args__ = (
        UniqueConstraint("recurring_expense_id", "reference_month", name="uq_recurring_expense_period"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    recurring_expense_id = Column(
        Uuid, ForeignKey("recurring_expense.id", ondelete="CASCADE"), nullable=False, index=True
    )
    supplier_id = Column(Text, nullable=True)
    reference_month = Column(Date, nullable=False)
    amount_cents = Column(BigInteger, nullable=True)  # null until a variable value is entered
    due_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    expense = relationship("RecurringExpense", back_populates="installments")
