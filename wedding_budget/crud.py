"""CRUD helper functions for the wedding budget service."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from . import ledger, models, schemas
from .enums import ExpenseCategory, PaymentStatus

LOG = logging.getLogger(__name__)


class EntityNotFoundError(RuntimeError):
    """Raised when an entity cannot be located in the database."""


class ExpenseValidationError(ValueError):
    """Raised when payment figures are inconsistent with an expense."""


def _settle(
    amount: Decimal,
    status: PaymentStatus,
    remaining_amount: Optional[Decimal],
    total_paid: Optional[Decimal],
) -> ledger.Settlement:
    try:
        return ledger.settle(amount, status, remaining_amount=remaining_amount, total_paid=total_paid)
    except ledger.LedgerError as exc:
        raise ExpenseValidationError(str(exc)) from exc


def list_expenses(session: Session) -> List[models.Expense]:
    stmt = select(models.Expense).order_by(models.Expense.date.desc(), models.Expense.id.desc())
    return list(session.scalars(stmt))


def list_expenses_by_category(session: Session, category: ExpenseCategory) -> List[models.Expense]:
    stmt = (
        select(models.Expense)
        .where(models.Expense.category == ExpenseCategory(category))
        .order_by(models.Expense.date.desc(), models.Expense.id.desc())
    )
    return list(session.scalars(stmt))


def list_expenses_by_status(session: Session, status: PaymentStatus) -> List[models.Expense]:
    stmt = (
        select(models.Expense)
        .where(models.Expense.payment_status == PaymentStatus(status))
        .order_by(models.Expense.date.desc(), models.Expense.id.desc())
    )
    return list(session.scalars(stmt))


def get_expense(session: Session, expense_id: int) -> models.Expense:
    expense = session.get(models.Expense, expense_id)
    if expense is None:
        raise EntityNotFoundError(f"Expense {expense_id} not found")
    return expense


def create_expense(session: Session, expense_in: schemas.ExpenseCreate) -> models.Expense:
    settlement = _settle(
        expense_in.amount,
        expense_in.payment_status,
        expense_in.remaining_amount,
        expense_in.total_paid,
    )
    data = expense_in.model_dump(exclude={"total_paid", "remaining_amount"}, exclude_none=True)
    expense = models.Expense(
        **data,
        total_paid=settlement.total_paid,
        remaining_amount=settlement.remaining_amount,
    )
    session.add(expense)
    session.flush()
    session.refresh(expense)
    LOG.info(
        "Created expense %s (%s, %s)",
        expense.id,
        expense.category.value,
        expense.payment_status.value,
        extra={"expense_id": expense.id},
    )
    return expense


def update_expense(session: Session, expense_id: int, update_in: schemas.ExpenseUpdate) -> models.Expense:
    """Merge ``update_in`` into the stored expense and re-derive its payment figures.

    Figures sent with the body take precedence. When the merged status is
    *Partially Paid* and the body carries neither ``remainingAmount`` nor
    ``totalPaid``, the stored ``totalPaid`` is kept and the remainder is
    recomputed against the merged amount.
    """
    expense = get_expense(session, expense_id)
    changes = update_in.model_dump(exclude_unset=True)
    remaining_amount = changes.pop("remaining_amount", None)
    total_paid = changes.pop("total_paid", None)
    amount = changes.get("amount", expense.amount)
    status = changes.get("payment_status", expense.payment_status)

    if status is PaymentStatus.PARTIALLY_PAID and remaining_amount is None and total_paid is None:
        if expense.payment_status is not PaymentStatus.PARTIALLY_PAID:
            raise ExpenseValidationError("remainingAmount is required for a partially paid expense")
        total_paid = expense.total_paid

    settlement = _settle(amount, status, remaining_amount, total_paid)
    for field, value in changes.items():
        setattr(expense, field, value)
    expense.payment_status = status
    expense.total_paid = settlement.total_paid
    expense.remaining_amount = settlement.remaining_amount
    session.flush()
    session.refresh(expense)
    LOG.info("Updated expense %s", expense.id, extra={"expense_id": expense.id})
    return expense


def delete_expense(session: Session, expense_id: int) -> None:
    expense = get_expense(session, expense_id)
    session.delete(expense)
    session.flush()
    LOG.info("Deleted expense %s", expense_id, extra={"expense_id": expense_id})


def total_amount(session: Session) -> Decimal:
    """Sum of ``amount`` across every expense, zero when there are none."""
    total_stmt = select(func.coalesce(func.sum(models.Expense.amount), 0))
    total_value = session.scalar(total_stmt) or Decimal(0)
    return ledger.quantize(total_value)


def _aggregate_columns():
    return (
        func.count(models.Expense.id).label("expense_count"),
        func.coalesce(func.sum(models.Expense.amount), 0).label("total_amount"),
        func.coalesce(func.sum(models.Expense.total_paid), 0).label("total_paid"),
        func.coalesce(func.sum(models.Expense.remaining_amount), 0).label("remaining_amount"),
    )


def status_summary(session: Session) -> List[schemas.StatusSummary]:
    """Aggregate expenses per payment status, zero-filled for empty statuses."""
    stmt = select(models.Expense.payment_status, *_aggregate_columns()).group_by(
        models.Expense.payment_status
    )
    rows = {PaymentStatus(row.payment_status): row for row in session.execute(stmt)}
    summary = []
    for status in PaymentStatus:
        row = rows.get(status)
        summary.append(
            schemas.StatusSummary(
                payment_status=status,
                count=row.expense_count if row else 0,
                total_amount=ledger.quantize(row.total_amount if row else 0),
                total_paid=ledger.quantize(row.total_paid if row else 0),
                remaining_amount=ledger.quantize(row.remaining_amount if row else 0),
            )
        )
    return summary


def category_summary(session: Session) -> List[schemas.CategorySummary]:
    """Aggregate expenses per category; categories without expenses are omitted."""
    stmt = select(models.Expense.category, *_aggregate_columns()).group_by(models.Expense.category)
    order = list(ExpenseCategory)
    summary = [
        schemas.CategorySummary(
            category=ExpenseCategory(row.category),
            count=row.expense_count,
            total_amount=ledger.quantize(row.total_amount),
            total_paid=ledger.quantize(row.total_paid),
            remaining_amount=ledger.quantize(row.remaining_amount),
        )
        for row in session.execute(stmt)
    ]
    return sorted(summary, key=lambda item: order.index(item.category))


def record_payment(session: Session, expense_id: int, payment_in: schemas.PaymentCreate) -> models.Expense:
    """Append a payment to an expense and move its status towards *Paid*."""
    expense = get_expense(session, expense_id)
    try:
        outcome = ledger.apply_payment(expense.amount, expense.total_paid, payment_in.amount)
    except ledger.LedgerError as exc:
        raise ExpenseValidationError(str(exc)) from exc

    payment = models.Payment(**payment_in.model_dump(exclude_none=True))
    expense.payments.append(payment)
    expense.total_paid = outcome.total_paid
    expense.remaining_amount = outcome.remaining_amount
    expense.payment_status = outcome.payment_status
    session.flush()
    session.refresh(expense)
    LOG.info(
        "Recorded payment of %s on expense %s, remaining %s",
        payment.amount,
        expense.id,
        expense.remaining_amount,
        extra={"expense_id": expense.id},
    )
    return expense


def list_payments(session: Session, expense_id: int) -> List[models.Payment]:
    get_expense(session, expense_id)
    stmt = (
        select(models.Payment)
        .where(models.Payment.expense_id == expense_id)
        .order_by(models.Payment.date, models.Payment.id)
    )
    return list(session.scalars(stmt))
