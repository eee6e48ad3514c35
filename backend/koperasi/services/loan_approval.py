from __future__ import annotations

import calendar
import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from koperasi.core.config import settings
from koperasi.core.errors import InvalidInputError, InvalidStateError, NotFoundError
from koperasi.models.installment import Installment
from koperasi.models.loan import Loan
from koperasi.models.transaction import Transaction
from koperasi.services.amortization import LoanSimulation, compute_schedule
from koperasi.utils.money import ZERO, d2, to_dec
from koperasi.utils.timezone import utcnow

logger = logging.getLogger(__name__)

MAX_INTEREST_RATE = Decimal("100")


def add_months(dt: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` later, clamped to the month's last day."""
    idx = dt.month - 1 + months
    year = dt.year + idx // 12
    month = idx % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def build_installments(loan: Loan, sim: LoanSimulation, start: datetime) -> list[Installment]:
    """Cent-rounded installment rows for ``sim``.

    The last row's principal takes whatever cents rounding left over, so the
    stored principal portions sum exactly to the loan amount.
    """
    principal_total = d2(to_dec(loan.amount))
    allocated = ZERO
    rows: list[Installment] = []
    last = len(sim.schedule)
    for entry in sim.schedule:
        interest = d2(entry.interest)
        if entry.month < last:
            principal = d2(entry.principal)
            allocated += principal
        else:
            principal = principal_total - allocated
        rows.append(
            Installment(
                loan_id=loan.id,
                installment_number=entry.month,
                due_date=add_months(start, entry.month),
                principal_amount=principal,
                interest_amount=interest,
                total_amount=principal + interest,
                paid_amount=ZERO,
                paid_date=None,
                status="pending",
                late_fee=ZERO,
            )
        )
    return rows


def _require_loan(s: Session, loan_id: int) -> Loan:
    ln = s.execute(select(Loan).where(Loan.id == loan_id).with_for_update()).scalar_one_or_none()
    if ln is None:
        raise NotFoundError("loan_not_found", f"Loan {loan_id} not found")
    return ln


def approve_loan(
    s: Session,
    loan_id: int,
    approved: bool,
    approver_id: int,
    interest_rate: Decimal | float | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> Loan:
    """Approve or reject a pending loan.

    On approval the loan update, its full installment schedule and the
    disbursement ledger row are committed together; any failure rolls the
    whole approval back.
    """
    now = now or utcnow()
    try:
        ln = _require_loan(s, loan_id)
        if ln.status != "pending":
            raise InvalidStateError("loan_not_pending", "Loan is not pending approval")

        ln.approved_at = now
        ln.approved_by = approver_id
        ln.approval_notes = notes

        if not approved:
            ln.status = "rejected"
            s.commit()
            logger.info("loan %s rejected by %s", ln.id, approver_id)
            s.refresh(ln)
            return ln

        # stored as Numeric(5, 2): the schedule is built from the stored rate
        rate = d2(to_dec(interest_rate if interest_rate is not None else settings.default_interest_rate_percent))
        if rate > MAX_INTEREST_RATE:
            raise InvalidInputError("interest_rate_too_high", f"Interest rate cannot exceed {MAX_INTEREST_RATE}%")
        sim = compute_schedule(ln.amount, rate, ln.term_months)

        ln.status = "approved"
        ln.interest_rate = rate
        ln.monthly_payment = d2(sim.monthly_payment)
        ln.remaining_balance = to_dec(ln.amount)

        s.add_all(build_installments(ln, sim, now))
        s.add(
            Transaction(
                member_id=ln.member_id,
                type="loan_disbursement",
                amount=to_dec(ln.amount),
                description=f"Loan #{ln.id} disbursement",
                reference_id=ln.id,
                created_by=approver_id,
            )
        )
        s.commit()
    except Exception:
        s.rollback()
        raise

    logger.info(
        "loan %s approved by %s: rate=%s%% term=%s monthly=%s",
        ln.id,
        approver_id,
        ln.interest_rate,
        ln.term_months,
        ln.monthly_payment,
    )
    s.refresh(ln)
    return ln


def get_payment_schedules(s: Session, loan_id: int) -> list[Installment]:
    if s.get(Loan, loan_id) is None:
        raise NotFoundError("loan_not_found", f"Loan {loan_id} not found")
    return (
        s.execute(
            select(Installment)
            .where(Installment.loan_id == loan_id)
            .order_by(Installment.installment_number.asc())
        )
        .scalars()
        .all()
    )
