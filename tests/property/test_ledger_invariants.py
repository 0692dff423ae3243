from __future__ import annotations

from decimal import Decimal

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from wedding_budget import ledger
from wedding_budget.enums import PaymentStatus

amounts = st.decimals(min_value=Decimal("0"), max_value=Decimal("1000000"), places=2)
positive_amounts = st.decimals(min_value=Decimal("0.02"), max_value=Decimal("1000000"), places=2)
statuses = st.sampled_from(list(PaymentStatus))


def assert_consistent(amount: Decimal, total_paid: Decimal, remaining: Decimal, status: PaymentStatus) -> None:
    assert total_paid + remaining == amount
    if status is PaymentStatus.PAID:
        assert remaining == 0
    elif status is PaymentStatus.PENDING:
        assert total_paid == 0
    else:
        assert 0 < total_paid < amount


@given(amount=amounts, status=st.sampled_from([PaymentStatus.PAID, PaymentStatus.PENDING]))
def test_settle_full_states_are_consistent(amount: Decimal, status: PaymentStatus) -> None:
    total_paid, remaining = ledger.settle(amount, status)
    assert_consistent(amount, total_paid, remaining, status)


@given(amount=positive_amounts, data=st.data())
def test_settle_partial_is_consistent_or_rejected(amount: Decimal, data: st.DataObject) -> None:
    remaining = data.draw(st.decimals(min_value=Decimal("0"), max_value=amount * 2, places=2))
    try:
        total_paid, settled_remaining = ledger.settle(amount, PaymentStatus.PARTIALLY_PAID, remaining_amount=remaining)
    except ledger.LedgerError:
        assert remaining >= amount or remaining == 0
        return
    assert settled_remaining == remaining
    assert_consistent(amount, total_paid, settled_remaining, PaymentStatus.PARTIALLY_PAID)


@settings(max_examples=50, deadline=None)
@given(
    amount=positive_amounts,
    payments=st.lists(st.decimals(min_value=Decimal("0.01"), max_value=Decimal("500000"), places=2), max_size=8),
)
def test_payment_sequence_keeps_invariants(amount: Decimal, payments: list[Decimal]) -> None:
    total_paid, remaining = ledger.settle(amount, PaymentStatus.PENDING)
    status = PaymentStatus.PENDING
    for payment in payments:
        if payment > remaining:
            with pytest.raises(ledger.LedgerError):
                ledger.apply_payment(amount, total_paid, payment)
            continue
        total_paid, remaining, status = ledger.apply_payment(amount, total_paid, payment)
        assert_consistent(amount, total_paid, remaining, status)
    assert total_paid <= amount


@given(amount=positive_amounts, status=statuses, data=st.data())
def test_status_change_from_partial_is_consistent(
    amount: Decimal, status: PaymentStatus, data: st.DataObject
) -> None:
    paid = data.draw(st.decimals(min_value=Decimal("0.01"), max_value=amount - Decimal("0.01"), places=2))
    assume(0 < paid < amount)
    total_paid, remaining = ledger.settle(amount, status, total_paid=paid)
    assert_consistent(amount, total_paid, remaining, status)
