from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import select

from koperasi.core.errors import InvalidInputError, NotFoundError
from koperasi.models.savings import Savings
from koperasi.models.transaction import Transaction
from koperasi.models.user import User
from koperasi.services.savings import record_deposit


def _mk_member(session) -> User:
    u = User(username="wati", password_hash="x", name="Wati", member_number="M-wati", status="active")
    session.add(u)
    session.commit()
    return u


def test_balance_runs_per_savings_type(session):
    m = _mk_member(session)

    record_deposit(session, m.id, "mandatory", Decimal("100.00"), transaction_date=datetime(2025, 1, 5))
    record_deposit(session, m.id, "voluntary", Decimal("40.00"), transaction_date=datetime(2025, 1, 6))
    row = record_deposit(session, m.id, "mandatory", Decimal("25.50"), transaction_date=datetime(2025, 2, 5))

    assert row.balance == Decimal("125.50")
    assert row.transaction_date == datetime(2025, 2, 5)
    txs = session.execute(select(Transaction).where(Transaction.type == "savings_deposit")).scalars().all()
    assert sorted(t.amount for t in txs) == [Decimal("25.50"), Decimal("40.00"), Decimal("100.00")]


@pytest.mark.parametrize("amount", [Decimal("10.005"), Decimal("0.001")])
def test_sub_cent_deposit_is_rejected(session, amount):
    m = _mk_member(session)

    with pytest.raises(InvalidInputError) as ei:
        record_deposit(session, m.id, "voluntary", amount)
    assert ei.value.code == "amount_precision"

    assert session.execute(select(Savings)).scalars().all() == []
    assert session.execute(select(Transaction)).scalars().all() == []


def test_non_positive_deposit_is_rejected(session):
    m = _mk_member(session)
    with pytest.raises(InvalidInputError) as ei:
        record_deposit(session, m.id, "voluntary", Decimal("0"))
    assert ei.value.code == "amount_must_be_positive"


def test_deposit_for_unknown_member(session):
    with pytest.raises(NotFoundError):
        record_deposit(session, 404, "voluntary", Decimal("10.00"))
