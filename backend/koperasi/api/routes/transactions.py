from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import select

from koperasi.api.deps import db, current_user
from koperasi.models.transaction import Transaction
from koperasi.schemas.transaction import TxOut

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=list[TxOut])
def list_transactions(member_id: int | None = Query(None), s: Session = Depends(db), u=Depends(current_user)):
    if u.get("role") != "admin":
        member_id = u.get("uid")
    q = select(Transaction)
    if member_id is not None:
        q = q.where(Transaction.member_id == member_id)
    return s.execute(q.order_by(Transaction.created_at.desc(), Transaction.id.desc())).scalars().all()
