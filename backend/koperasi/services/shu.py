"""Year-end SHU (Sisa Hasil Usaha) calculation and distribution.

Two allocation passes exist and both are kept:

* ``calculate_shu`` writes provisional rows (``distributed_at`` NULL): half
  of the member pool follows fiscal-year savings, half follows fiscal-year
  loan applications.
* ``distribute_shu`` writes the final rows (``distributed_at`` set): the
  whole pool follows lifetime savings plus completed-loan principal, or is
  split equally when nobody contributed.

Both use cent rounding with largest-remainder reconciliation.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from koperasi.core.errors import ConflictError, InvalidInputError, InvalidStateError, NotFoundError
from koperasi.models.shu import SHUCalculation, SHUDistribution
from koperasi.models.transaction import Transaction
from koperasi.models.user import User
from koperasi.services.contributions import (
    Contribution,
    active_member_ids,
    fiscal_year_window,
    lifetime_contributions,
    window_contributions,
)
from koperasi.utils.money import ZERO, allocate_cents, d2, to_dec
from koperasi.utils.timezone import utcnow

logger = logging.getLogger(__name__)

MEMBER_SHARE_PERCENT = Decimal("40")
SAVINGS_WEIGHT = Decimal("0.5")
LOANS_WEIGHT = Decimal("0.5")


def provisional_shares(total_member_share: Decimal, contributions: dict[int, Contribution]) -> dict[int, Decimal]:
    """50/50 savings/loan split. A category nobody contributed to allocates nothing."""
    member_ids = list(contributions)
    total_savings = sum((c.savings for c in contributions.values()), ZERO)
    total_loans = sum((c.loans for c in contributions.values()), ZERO)

    weights = []
    for mid in member_ids:
        c = contributions[mid]
        w = ZERO
        if total_savings > 0:
            w += SAVINGS_WEIGHT * c.savings / total_savings
        if total_loans > 0:
            w += LOANS_WEIGHT * c.loans / total_loans
        weights.append(w)

    pool = ZERO
    if total_savings > 0:
        pool += total_member_share * SAVINGS_WEIGHT
    if total_loans > 0:
        pool += total_member_share * LOANS_WEIGHT

    return dict(zip(member_ids, allocate_cents(pool, weights)))


def final_shares(total_member_share: Decimal, contributions: dict[int, Contribution]) -> dict[int, Decimal]:
    """Single combined-contribution ratio; equal split when the pool is empty."""
    member_ids = list(contributions)
    total = sum((c.total for c in contributions.values()), ZERO)
    if total > 0:
        weights = [contributions[mid].total for mid in member_ids]
    else:
        weights = [Decimal("1")] * len(member_ids)
    return dict(zip(member_ids, allocate_cents(total_member_share, weights)))


def calculate_shu(
    s: Session,
    year: int,
    total_profit: Decimal | float,
    calculated_by: int,
    now: datetime | None = None,
) -> SHUCalculation:
    total_profit = to_dec(total_profit)
    if total_profit < 0:
        raise InvalidInputError("total_profit_negative", "Total profit cannot be negative")
    now = now or utcnow()

    try:
        exists = s.execute(select(SHUCalculation.id).where(SHUCalculation.year == year)).scalar_one_or_none()
        if exists is not None:
            raise ConflictError("shu_exists", f"SHU calculation for year {year} already exists")
        if s.get(User, calculated_by) is None:
            raise NotFoundError("user_not_found", f"User {calculated_by} not found")

        total_member_share = d2(total_profit * MEMBER_SHARE_PERCENT / Decimal("100"))
        calc = SHUCalculation(
            year=year,
            total_profit=total_profit,
            member_share_percentage=MEMBER_SHARE_PERCENT,
            total_member_share=total_member_share,
            calculated_at=now,
            calculated_by=calculated_by,
            distributed=False,
        )
        s.add(calc)
        s.flush()

        start, end = fiscal_year_window(year)
        contributions = window_contributions(s, active_member_ids(s), start, end)
        shares = provisional_shares(total_member_share, contributions)
        for mid, c in contributions.items():
            s.add(
                SHUDistribution(
                    shu_calculation_id=calc.id,
                    member_id=mid,
                    savings_contribution=c.savings,
                    loan_contribution=c.loans,
                    share_amount=shares[mid],
                    distributed_at=None,
                )
            )
        s.commit()
    except Exception:
        s.rollback()
        raise

    logger.info(
        "shu %s calculated for %s: profit=%s member_share=%s members=%s",
        calc.id,
        year,
        total_profit,
        total_member_share,
        len(contributions),
    )
    s.refresh(calc)
    return calc


def distribute_shu(s: Session, calculation_id: int, now: datetime | None = None) -> list[SHUDistribution]:
    """Finalize a calculation: one distributed row per active member, then flip the flag.

    Rows and flag are committed together.
    """
    now = now or utcnow()
    try:
        calc = (
            s.execute(select(SHUCalculation).where(SHUCalculation.id == calculation_id).with_for_update())
            .scalar_one_or_none()
        )
        if calc is None:
            raise NotFoundError("shu_not_found", f"SHU calculation {calculation_id} not found")
        if calc.distributed:
            raise ConflictError("shu_already_distributed", "SHU has already been distributed")

        member_ids = active_member_ids(s)
        if not member_ids:
            raise InvalidStateError("no_active_members", "No active members found for distribution")

        total_member_share = to_dec(calc.total_member_share)
        contributions = lifetime_contributions(s, member_ids)
        shares = final_shares(total_member_share, contributions)

        rows: list[SHUDistribution] = []
        for mid in member_ids:
            c = contributions[mid]
            row = SHUDistribution(
                shu_calculation_id=calc.id,
                member_id=mid,
                savings_contribution=c.savings,
                loan_contribution=c.loans,
                share_amount=shares[mid],
                distributed_at=now,
            )
            rows.append(row)
            if shares[mid] > 0:
                s.add(
                    Transaction(
                        member_id=mid,
                        type="shu_distribution",
                        amount=shares[mid],
                        description=f"SHU {calc.year} distribution",
                        reference_id=calc.id,
                    )
                )
        s.add_all(rows)

        flipped = s.execute(
            update(SHUCalculation)
            .where(SHUCalculation.id == calc.id, SHUCalculation.distributed.is_(False))
            .values(distributed=True)
        )
        if flipped.rowcount != 1:
            raise ConflictError("shu_already_distributed", "SHU has already been distributed")
        s.commit()
    except Exception:
        s.rollback()
        raise

    logger.info("shu %s distributed to %s members (%s)", calculation_id, len(rows), total_member_share)
    for row in rows:
        s.refresh(row)
    return rows


def list_calculations(s: Session) -> list[SHUCalculation]:
    return s.execute(select(SHUCalculation).order_by(SHUCalculation.year.desc())).scalars().all()


def list_distributions(s: Session, calculation_id: int) -> list[SHUDistribution]:
    if s.get(SHUCalculation, calculation_id) is None:
        raise NotFoundError("shu_not_found", f"SHU calculation {calculation_id} not found")
    return (
        s.execute(
            select(SHUDistribution)
            .where(SHUDistribution.shu_calculation_id == calculation_id)
            .order_by(SHUDistribution.id.asc())
        )
        .scalars()
        .all()
    )


def member_distributions(s: Session, member_id: int) -> list[SHUDistribution]:
    return (
        s.execute(
            select(SHUDistribution)
            .where(SHUDistribution.member_id == member_id)
            .order_by(SHUDistribution.shu_calculation_id.desc(), SHUDistribution.id.asc())
        )
        .scalars()
        .all()
    )
