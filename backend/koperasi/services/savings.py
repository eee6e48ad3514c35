from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from koperasi.core.errors import InvalidInputError, NotFoundError
from koperasi.models.savings import Savings
from koperasi.models.transaction import Transaction
from koperasi.models.user import User
from koperasi.utils.money import require_cents, to_dec
from koperasi.utils.timezone import utcnow

logger = logging.getLogger(__name__)


def record_deposit(
    s: Session,
    member_id: int,
    savings_type: str,
    amount: Decimal | float,
    description: str | None = None,
    recorded_by: int | None = None,
    transaction_date: datetime | None = None,
) -> Savings:
    """Append a deposit; ``balance`` is the running total per member and savings type."""
    amount = to_dec(amount)
    if amount <= 0:
        raise InvalidInputError("amount_must_be_positive", "Deposit amount must be greater than zero")
    require_cents(amount, "Deposit amount")

    try:
        if s.get(User, member_id) is None:
            raise NotFoundError("member_not_found", f"User with id {member_id} not found")

        current = (
            s.execute(
                select(func.coalesce(func.sum(Savings.amount), 0)).where(
                    Savings.member_id == member_id,
                    Savings.type == savings_type,
                )
            )
            .scalar_one()
        )
        row = Savings(
            member_id=member_id,
            type=savings_type,
            amount=amount,
            balance=to_dec(current) + amount,
            description=description,
            transaction_date=transaction_date or utcnow(),
        )
        s.add(row)
        s.flush()
        s.add(
            Transaction(
                member_id=member_id,
                type="savings_deposit",
                amount=amount,
                description=description or f"{savings_type.capitalize()} savings deposit",
                reference_id=row.id,
                created_by=recorded_by,
            )
        )
        s.commit()
    except Exception:
        s.rollback()
        raise

    logger.info("savings deposit %s for member %s (%s)", amount, member_id, savings_type)
    s.refresh(row)
    return row
