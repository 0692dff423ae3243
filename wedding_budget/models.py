"""SQLAlchemy models for the wedding budget service."""
from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from .database import Base
from .enums import ExpenseCategory, PaymentStatus


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _enum_column(enum_cls: type, length: int) -> Enum:
    # Store the display values ("Partially Paid"), not the member names.
    return Enum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        validate_strings=True,
        length=length,
    )


class Expense(Base):
    __tablename__ = "expenses"

    id: int = Column(Integer, primary_key=True, index=True)
    category: ExpenseCategory = Column(_enum_column(ExpenseCategory, 32), nullable=False, index=True)
    description: str = Column(String(255), nullable=False)
    amount: Decimal = Column(Numeric(12, 2), nullable=False)
    date: datetime = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    vendor: Optional[str] = Column(String(255), nullable=True)
    payment_status: PaymentStatus = Column(
        _enum_column(PaymentStatus, 32),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    total_paid: Decimal = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    remaining_amount: Decimal = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    payments = relationship(
        "Payment",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="Payment.id",
    )


class Payment(Base):
    __tablename__ = "payments"

    id: int = Column(Integer, primary_key=True, index=True)
    expense_id: int = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    amount: Decimal = Column(Numeric(12, 2), nullable=False)
    notes: Optional[str] = Column(Text, nullable=True)
    date: datetime = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    expense = relationship("Expense", back_populates="payments")
