from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from koperasi.core.errors import InvalidInputError, InvalidStateError, NotFoundError
from koperasi.models.installment import Installment
from koperasi.models.loan import Loan
from koperasi.models.transaction import Transaction
from koperasi.models.user import User
from koperasi.services import loan_approval
from koperasi.services.amortization import monthly_payment
from koperasi.services.loan_approval import add_months, approve_loan, get_payment_schedules
from koperasi.utils.money import d2

NOW = datetime(2026, 1, 31, 10, 0, 0)


def _mk_member(session, status: str = "active", role: str = "member") -> User:
    tag = uuid4().hex[:8]
    u = User(
        username=f"user-{tag}",
        password_hash="x",
        name=f"Member {tag}",
        member_number=f"M-{tag}",
        role=role,
        status=status,
    )
    session.add(u)
    session.commit()
    return u


def _mk_loan(session, member_id: int, amount: Decimal, term_months: int, status: str = "pending") -> Loan:
    ln = Loan(member_id=member_id, amount=amount, term_months=term_months, purpose="working capital", status=status)
    session.add(ln)
    session.commit()
    return ln


def _installments(session, loan_id: int) -> list[Installment]:
    return (
        session.execute(
            select(Installment).where(Installment.loan_id == loan_id).order_by(Installment.installment_number)
        )
        .scalars()
        .all()
    )


def test_approval_materializes_full_schedule(session):
    member = _mk_member(session)
    admin = _mk_member(session, role="admin")
    ln = _mk_loan(session, member.id, Decimal("10000.00"), 12)

    out = approve_loan(session, ln.id, approved=True, approver_id=admin.id, now=NOW)

    assert out.status == "approved"
    assert out.interest_rate == Decimal("12")
    assert out.monthly_payment == Decimal("888.49")
    assert out.remaining_balance == Decimal("10000.00")
    assert out.approved_by == admin.id
    assert out.approved_at == NOW

    rows = _installments(session, ln.id)
    assert [r.installment_number for r in rows] == list(range(1, 13))
    for r in rows:
        assert r.status == "pending"
        assert r.paid_amount == 0
        assert r.late_fee == 0
        assert r.paid_date is None
        assert r.total_amount == r.principal_amount + r.interest_amount

    assert sum((r.principal_amount for r in rows), Decimal("0")) == Decimal("10000.00")
    total_interest = sum((r.interest_amount for r in rows), Decimal("0"))
    assert abs(total_interest - Decimal("661.85")) <= Decimal("0.05")


def test_due_dates_are_one_calendar_month_apart(session):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("3000.00"), 3)

    approve_loan(session, ln.id, approved=True, approver_id=member.id, now=NOW)

    due = [r.due_date for r in _installments(session, ln.id)]
    assert due == [
        datetime(2026, 2, 28, 10, 0, 0),
        datetime(2026, 3, 31, 10, 0, 0),
        datetime(2026, 4, 30, 10, 0, 0),
    ]


def test_add_months_crosses_year_end_and_clamps():
    assert add_months(datetime(2025, 11, 30), 3) == datetime(2026, 2, 28)
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2025, 12, 15), 12) == datetime(2026, 12, 15)


def test_explicit_rate_overrides_default(session):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("12000.00"), 24)

    out = approve_loan(session, ln.id, approved=True, approver_id=member.id, interest_rate=6, notes="ok", now=NOW)

    assert out.interest_rate == Decimal("6")
    assert out.approval_notes == "ok"
    assert len(_installments(session, ln.id)) == 24


def test_zero_rate_installments_have_no_interest(session):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("1000.00"), 3)

    approve_loan(session, ln.id, approved=True, approver_id=member.id, interest_rate=Decimal("0"), now=NOW)

    rows = _installments(session, ln.id)
    assert [r.principal_amount for r in rows] == [Decimal("333.33"), Decimal("333.33"), Decimal("333.34")]
    assert all(r.interest_amount == 0 for r in rows)


def test_rejection_creates_no_schedule(session):
    member = _mk_member(session)
    admin = _mk_member(session, role="admin")
    ln = _mk_loan(session, member.id, Decimal("5000.00"), 6)

    out = approve_loan(session, ln.id, approved=False, approver_id=admin.id, notes="insufficient savings", now=NOW)

    assert out.status == "rejected"
    assert out.approved_by == admin.id
    assert out.approved_at == NOW
    assert out.monthly_payment is None
    assert out.remaining_balance is None
    assert _installments(session, ln.id) == []


@pytest.mark.parametrize("first_decision", [True, False])
def test_second_decision_on_same_loan_fails(session, first_decision):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("5000.00"), 6)
    approve_loan(session, ln.id, approved=first_decision, approver_id=member.id, now=NOW)

    with pytest.raises(InvalidStateError) as ei:
        approve_loan(session, ln.id, approved=True, approver_id=member.id, now=NOW)
    assert ei.value.code == "loan_not_pending"

    expected = 6 if first_decision else 0
    assert len(_installments(session, ln.id)) == expected


def test_unknown_loan_is_not_found(session):
    with pytest.raises(NotFoundError):
        approve_loan(session, 999, approved=True, approver_id=1, now=NOW)


def test_failed_schedule_insert_leaves_loan_pending(session, session_factory, monkeypatch):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("8000.00"), 8)
    loan_id = ln.id

    def _boom(*args, **kwargs):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(loan_approval, "build_installments", _boom)

    with pytest.raises(RuntimeError):
        approve_loan(session, loan_id, approved=True, approver_id=member.id, now=NOW)

    fresh = session_factory()
    try:
        stored = fresh.get(Loan, loan_id)
        assert stored.status == "pending"
        assert stored.monthly_payment is None
        assert stored.approved_at is None
        assert _installments(fresh, loan_id) == []
        assert fresh.execute(select(Transaction)).scalars().all() == []
    finally:
        fresh.close()


def test_approval_records_disbursement(session):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("2500.00"), 5)

    approve_loan(session, ln.id, approved=True, approver_id=member.id, now=NOW)

    txs = session.execute(select(Transaction).where(Transaction.reference_id == ln.id)).scalars().all()
    assert len(txs) == 1
    assert txs[0].type == "loan_disbursement"
    assert txs[0].amount == Decimal("2500.00")
    assert txs[0].member_id == member.id


def test_get_payment_schedules_is_ordered(session):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("6000.00"), 6)
    approve_loan(session, ln.id, approved=True, approver_id=member.id, now=NOW)

    rows = get_payment_schedules(session, ln.id)
    assert [r.installment_number for r in rows] == [1, 2, 3, 4, 5, 6]

    with pytest.raises(NotFoundError):
        get_payment_schedules(session, 12345)


def test_schedule_uses_the_rate_as_stored(session):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("10000.00"), 12)

    out = approve_loan(session, ln.id, approved=True, approver_id=member.id, interest_rate=Decimal("12.345"), now=NOW)

    assert out.interest_rate == Decimal("12.35")
    expected = monthly_payment(Decimal("10000.00"), Decimal("12.35"), 12)
    assert out.monthly_payment == d2(expected)
    first = _installments(session, ln.id)[0]
    # one month of interest at 12.35 % a year
    assert first.interest_amount == Decimal("102.92")


def test_rate_above_limit_leaves_loan_pending(session):
    member = _mk_member(session)
    ln = _mk_loan(session, member.id, Decimal("1000.00"), 6)

    with pytest.raises(InvalidInputError) as ei:
        approve_loan(session, ln.id, approved=True, approver_id=member.id, interest_rate=Decimal("1000"), now=NOW)
    assert ei.value.code == "interest_rate_too_high"

    session.expire_all()
    stored = session.get(Loan, ln.id)
    assert stored.status == "pending"
    assert stored.approved_at is None
    assert _installments(session, ln.id) == []
