from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from koperasi.core.errors import ConflictError, InvalidInputError, NotFoundError
from koperasi.models.installment import Installment
from koperasi.models.loan import Loan
from koperasi.models.transaction import Transaction
from koperasi.utils.money import HALF_CENT, ZERO, d2, require_cents, to_dec
from koperasi.utils.timezone import utcnow

logger = logging.getLogger(__name__)

LATE_FEE_RATE = Decimal("0.01")
LATE_FEE_PERIOD = timedelta(days=30)


def is_settled(paid: Decimal, total_due: Decimal) -> bool:
    return paid >= total_due - HALF_CENT


def months_overdue(due_date: datetime, now: datetime) -> int:
    return math.ceil((now - due_date) / LATE_FEE_PERIOD)


def late_fee_for(total_due: Decimal, due_date: datetime, now: datetime) -> Decimal:
    return d2(total_due * LATE_FEE_RATE * months_overdue(due_date, now))


def _require_installment(s: Session, installment_id: int) -> Installment:
    inst = (
        s.execute(select(Installment).where(Installment.id == installment_id).with_for_update())
        .scalar_one_or_none()
    )
    if inst is None:
        raise NotFoundError("installment_not_found", f"Payment schedule {installment_id} not found")
    return inst


def _apply_to_loan(s: Session, inst: Installment, amount: Decimal, paid_before: Decimal) -> Loan:
    ln = s.execute(select(Loan).where(Loan.id == inst.loan_id).with_for_update()).scalar_one()

    # interest is settled first within an installment
    interest = to_dec(inst.interest_amount)
    principal_before = max(ZERO, paid_before - interest)
    principal_after = min(to_dec(inst.principal_amount), max(ZERO, paid_before + amount - interest))
    principal_paid = principal_after - principal_before
    if ln.remaining_balance is not None and principal_paid > 0:
        ln.remaining_balance = max(ZERO, to_dec(ln.remaining_balance) - principal_paid)

    if inst.status == "paid":
        still_open = (
            s.execute(
                select(Installment.id).where(
                    Installment.loan_id == ln.id,
                    Installment.id != inst.id,
                    Installment.status != "paid",
                )
            )
            .scalars()
            .all()
        )
        if not still_open:
            ln.status = "completed"
            ln.remaining_balance = ZERO
            logger.info("loan %s completed", ln.id)
    return ln


def process_payment(
    s: Session,
    installment_id: int,
    amount: Decimal | float,
    method: str,
    notes: str | None = None,
    now: datetime | None = None,
    recorded_by: int | None = None,
) -> Installment:
    """Apply ``amount`` to an installment.

    Payments accumulate and are never clamped. A late fee of 1% of the
    amount due per started 30 days overdue is assigned once, on the first
    payment that arrives late. Status is judged against ``total_amount``
    alone, the late fee is tracked separately.
    """
    amount = to_dec(amount)
    if amount <= 0:
        raise InvalidInputError("amount_must_be_positive", "Payment amount must be greater than zero")
    require_cents(amount, "Payment amount")
    now = now or utcnow()

    try:
        inst = _require_installment(s, installment_id)
        paid_before = to_dec(inst.paid_amount)
        total_due = to_dec(inst.total_amount)
        if is_settled(paid_before, total_due):
            raise ConflictError("installment_already_paid", "Payment schedule is already fully paid")

        new_paid = paid_before + amount
        overdue = now > inst.due_date

        if overdue and inst.status == "pending" and to_dec(inst.late_fee) == 0:
            inst.late_fee = late_fee_for(total_due, inst.due_date, now)

        if is_settled(new_paid, total_due):
            inst.status = "paid"
            inst.paid_date = now
        elif overdue:
            inst.status = "late"
        else:
            inst.status = "pending"
        inst.paid_amount = new_paid

        ln = _apply_to_loan(s, inst, amount, paid_before)

        desc = f"Loan #{inst.loan_id} installment {inst.installment_number} via {method}"
        if notes:
            desc = f"{desc}: {notes}"
        s.add(
            Transaction(
                member_id=ln.member_id,
                type="loan_payment",
                amount=amount,
                description=desc[:256],
                reference_id=inst.id,
                created_by=recorded_by,
            )
        )
        s.commit()
    except StaleDataError as e:
        s.rollback()
        raise ConflictError(
            "installment_modified_concurrently",
            "Payment schedule was updated by another request, retry the payment",
        ) from e
    except Exception:
        s.rollback()
        raise

    logger.info(
        "payment of %s applied to installment %s (loan %s): status=%s late_fee=%s",
        amount,
        inst.id,
        inst.loan_id,
        inst.status,
        inst.late_fee,
    )
    s.refresh(inst)
    return inst
