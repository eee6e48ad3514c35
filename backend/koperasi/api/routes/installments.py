from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from koperasi.api.deps import db, require_admin
from koperasi.schemas.installment import InstallmentOut, PaymentIn
from koperasi.services.payments import process_payment

router = APIRouter(prefix="/installments", tags=["payments"])


@router.post("/{installment_id}/payments", response_model=InstallmentOut)
def pay(installment_id: int, body: PaymentIn, s: Session = Depends(db), u=Depends(require_admin)):
    return process_payment(
        s,
        installment_id,
        amount=body.amount,
        method=body.payment_method,
        notes=body.notes,
        recorded_by=u.get("uid"),
    )
