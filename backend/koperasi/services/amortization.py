"""Fixed-payment (annuity) amortization.

Pure functions: nothing here touches the database. Arithmetic runs in a
local ``Decimal`` context of ``PRECISION`` digits, independent of the caller's
context; callers round to cents when they persist.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext

from koperasi.core.errors import InvalidInputError
from koperasi.utils.money import ZERO, to_dec

MONTHS_PER_YEAR = Decimal("12")
HUNDRED = Decimal("100")
PRECISION = 50


@dataclass(frozen=True)
class ScheduleEntry:
    month: int
    principal: Decimal
    interest: Decimal
    total: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class LoanSimulation:
    monthly_payment: Decimal
    total_payment: Decimal
    total_interest: Decimal
    schedule: list[ScheduleEntry]


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    return annual_rate_percent / HUNDRED / MONTHS_PER_YEAR


def monthly_payment(principal: Decimal, annual_rate_percent: Decimal, term_months: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = PRECISION
        r = monthly_rate(annual_rate_percent)
        if r == 0:
            return principal / Decimal(term_months)
        growth = (1 + r) ** term_months
        return principal * r * growth / (growth - 1)


def _validate(principal: Decimal, annual_rate_percent: Decimal, term_months: int) -> None:
    if principal <= 0:
        raise InvalidInputError("principal_must_be_positive", "Principal must be greater than zero")
    if annual_rate_percent < 0:
        raise InvalidInputError("interest_rate_negative", "Interest rate cannot be negative")
    if int(term_months) != term_months or term_months < 1:
        raise InvalidInputError("term_must_be_positive", "Term must be a whole number of months, at least 1")


def compute_schedule(principal, annual_rate_percent, term_months: int) -> LoanSimulation:
    principal = to_dec(principal)
    annual_rate_percent = to_dec(annual_rate_percent)
    _validate(principal, annual_rate_percent, term_months)
    term_months = int(term_months)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        r = monthly_rate(annual_rate_percent)
        payment = monthly_payment(principal, annual_rate_percent, term_months)

        balance = principal
        schedule: list[ScheduleEntry] = []
        for month in range(1, term_months + 1):
            interest = balance * r
            if month < term_months:
                principal_part = payment - interest
                total = payment
                balance = balance - principal_part
            else:
                # final month absorbs accumulated drift
                principal_part = balance
                total = principal_part + interest
                balance = ZERO
            schedule.append(
                ScheduleEntry(
                    month=month,
                    principal=principal_part,
                    interest=interest,
                    total=total,
                    remaining_balance=balance,
                )
            )

        total_payment = sum((e.total for e in schedule), ZERO)
        total_interest = total_payment - principal

    return LoanSimulation(
        monthly_payment=payment,
        total_payment=total_payment,
        total_interest=total_interest,
        schedule=schedule,
    )
