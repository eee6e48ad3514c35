from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from koperasi.models.loan import Loan
from koperasi.models.savings import Savings
from koperasi.models.user import User
from koperasi.utils.money import ZERO, to_dec


@dataclass(frozen=True)
class Contribution:
    savings: Decimal = ZERO
    loans: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.savings + self.loans


def active_member_ids(s: Session) -> list[int]:
    return list(s.execute(select(User.id).where(User.status == "active").order_by(User.id.asc())).scalars().all())


def fiscal_year_window(year: int) -> tuple[datetime, datetime]:
    return datetime(year, 1, 1), datetime.combine(date(year, 12, 31), time.max)


def _sum_by_member(s: Session, q) -> dict[int, Decimal]:
    return {mid: to_dec(total) for (mid, total) in s.execute(q).all()}


def _collect(
    member_ids: Iterable[int],
    savings: dict[int, Decimal],
    loans: dict[int, Decimal],
) -> dict[int, Contribution]:
    return {
        mid: Contribution(savings=savings.get(mid, ZERO), loans=loans.get(mid, ZERO))
        for mid in member_ids
    }


def window_contributions(
    s: Session,
    member_ids: Iterable[int],
    start: datetime,
    end: datetime,
) -> dict[int, Contribution]:
    """Savings deposited and loan principal applied for inside ``[start, end]``.

    Loans count from their application date whatever their status.
    """
    member_ids = list(member_ids)
    if not member_ids:
        return {}

    savings = _sum_by_member(
        s,
        select(Savings.member_id, func.coalesce(func.sum(Savings.amount), 0))
        .where(
            Savings.member_id.in_(member_ids),
            Savings.transaction_date >= start,
            Savings.transaction_date <= end,
        )
        .group_by(Savings.member_id),
    )
    loans = _sum_by_member(
        s,
        select(Loan.member_id, func.coalesce(func.sum(Loan.amount), 0))
        .where(
            Loan.member_id.in_(member_ids),
            Loan.applied_at >= start,
            Loan.applied_at <= end,
        )
        .group_by(Loan.member_id),
    )
    return _collect(member_ids, savings, loans)


def lifetime_contributions(s: Session, member_ids: Iterable[int]) -> dict[int, Contribution]:
    """All savings ever deposited and the principal of completed loans."""
    member_ids = list(member_ids)
    if not member_ids:
        return {}

    savings = _sum_by_member(
        s,
        select(Savings.member_id, func.coalesce(func.sum(Savings.amount), 0))
        .where(Savings.member_id.in_(member_ids))
        .group_by(Savings.member_id),
    )
    loans = _sum_by_member(
        s,
        select(Loan.member_id, func.coalesce(func.sum(Loan.amount), 0))
        .where(Loan.member_id.in_(member_ids), Loan.status == "completed")
        .group_by(Loan.member_id),
    )
    return _collect(member_ids, savings, loans)
