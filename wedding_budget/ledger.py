"""Payment bookkeeping for expenses.

The helpers here derive ``total_paid`` and ``remaining_amount`` from an
expense's payment status and keep the three fields consistent:

* ``total_paid + remaining_amount == amount``;
* a *Paid* expense owes nothing;
* a *Pending* expense has nothing paid;
* a *Partially Paid* expense has ``0 < total_paid < amount``.

All functions are pure and operate on :class:`~decimal.Decimal` values so the
store can call them before touching the session.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional

from .enums import PaymentStatus

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class LedgerError(ValueError):
    """Raised when payment figures cannot be reconciled with an amount."""


class Settlement(NamedTuple):
    total_paid: Decimal
    remaining_amount: Decimal


class PaymentOutcome(NamedTuple):
    total_paid: Decimal
    remaining_amount: Decimal
    payment_status: PaymentStatus


def quantize(value: Decimal | int | float | str) -> Decimal:
    """Round ``value`` to cents the way the ``NUMERIC(12, 2)`` columns store it."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def settle(
    amount: Decimal,
    status: PaymentStatus,
    remaining_amount: Optional[Decimal] = None,
    total_paid: Optional[Decimal] = None,
) -> Settlement:
    """Return the paid/remaining split implied by ``status``.

    For *Paid* and *Pending* the client figures are ignored. A *Partially Paid*
    expense needs at least one of ``remaining_amount`` or ``total_paid``; when
    both are given they must add up to ``amount``.

    Raises:
        LedgerError: If the split is missing or violates the status invariants.
    """
    status = PaymentStatus(status)
    amount = quantize(amount)
    if amount < 0:
        raise LedgerError("Amount must not be negative")

    if status is PaymentStatus.PAID:
        return Settlement(amount, ZERO)
    if status is PaymentStatus.PENDING:
        return Settlement(ZERO, amount)

    if remaining_amount is None and total_paid is None:
        raise LedgerError("remainingAmount is required for a partially paid expense")
    if remaining_amount is not None:
        remaining = quantize(remaining_amount)
        if total_paid is not None and quantize(total_paid) + remaining != amount:
            raise LedgerError("totalPaid and remainingAmount must add up to amount")
    else:
        remaining = amount - quantize(total_paid)

    if remaining >= amount:
        raise LedgerError("Remaining amount must be less than total amount")
    if remaining <= 0:
        raise LedgerError("Remaining amount must be greater than zero for a partially paid expense")
    return Settlement(amount - remaining, remaining)


def apply_payment(amount: Decimal, total_paid: Decimal, payment: Decimal) -> PaymentOutcome:
    """Add ``payment`` to an expense and return the new figures and status.

    Raises:
        LedgerError: If the payment is not positive or exceeds the balance.
    """
    amount = quantize(amount)
    total_paid = quantize(total_paid)
    payment = quantize(payment)
    balance = amount - total_paid
    if payment <= 0:
        raise LedgerError("Payment amount must be greater than 0")
    if payment > balance:
        raise LedgerError(f"Payment amount cannot exceed remaining balance ({balance})")

    new_total = total_paid + payment
    remaining = amount - new_total
    status = PaymentStatus.PAID if remaining == 0 else PaymentStatus.PARTIALLY_PAID
    return PaymentOutcome(new_total, remaining, status)


__all__ = [
    "LedgerError",
    "PaymentOutcome",
    "Settlement",
    "apply_payment",
    "quantize",
    "settle",
]
