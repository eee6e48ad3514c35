from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import select

from koperasi.api.deps import db, current_user, require_admin, require_self_or_admin
from koperasi.models.savings import Savings
from koperasi.schemas.savings import SavingsCreate, SavingsOut
from koperasi.services.savings import record_deposit

router = APIRouter(prefix="/savings", tags=["savings"])


@router.get("", response_model=list[SavingsOut])
def list_savings(member_id: int = Query(...), s: Session = Depends(db), u=Depends(current_user)):
    require_self_or_admin(member_id, u)
    return (
        s.execute(
            select(Savings)
            .where(Savings.member_id == member_id)
            .order_by(Savings.transaction_date.desc(), Savings.id.desc())
        )
        .scalars()
        .all()
    )


@router.post("", response_model=SavingsOut)
def deposit(body: SavingsCreate, s: Session = Depends(db), u=Depends(require_admin)):
    return record_deposit(
        s,
        member_id=body.member_id,
        savings_type=body.type,
        amount=body.amount,
        description=body.description,
        recorded_by=u.get("uid"),
    )
