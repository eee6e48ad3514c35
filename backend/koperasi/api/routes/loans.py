from io import BytesIO

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from sqlalchemy import select

from koperasi.api.deps import db, current_user, require_admin, require_self_or_admin
from koperasi.core.errors import InvalidStateError, NotFoundError
from koperasi.models.loan import Loan
from koperasi.models.user import User
from koperasi.schemas.installment import InstallmentOut
from koperasi.schemas.loan import LoanApprove, LoanCreate, LoanOut, LoanSimulationIn, LoanSimulationOut
from koperasi.services.amortization import compute_schedule
from koperasi.services.loan_approval import approve_loan, get_payment_schedules
from koperasi.services.reports import build_schedule_report
from koperasi.utils.money import require_cents, to_dec

router = APIRouter(prefix="/loans", tags=["loans"])


def _require_loan(s: Session, loan_id: int) -> Loan:
    ln = s.execute(select(Loan).where(Loan.id == loan_id)).scalar_one_or_none()
    if ln is None:
        raise NotFoundError("loan_not_found", f"Loan {loan_id} not found")
    return ln


@router.get("", response_model=list[LoanOut])
def list_loans(member_id: int | None = Query(None), s: Session = Depends(db), u=Depends(current_user)):
    if u.get("role") != "admin":
        member_id = u.get("uid")
    q = select(Loan)
    if member_id is not None:
        q = q.where(Loan.member_id == member_id)
    return s.execute(q.order_by(Loan.applied_at.desc(), Loan.id.desc())).scalars().all()


@router.post("", response_model=LoanOut)
def apply_for_loan(body: LoanCreate, s: Session = Depends(db), u=Depends(current_user)):
    require_self_or_admin(body.member_id, u)
    member = s.get(User, body.member_id)
    if member is None:
        raise NotFoundError("member_not_found", f"User with id {body.member_id} not found")
    if member.status != "active":
        raise InvalidStateError("member_not_active", "Only active members can apply for a loan")

    amount = require_cents(to_dec(body.amount), "Loan amount")
    ln = Loan(
        member_id=body.member_id,
        amount=amount,
        term_months=body.term_months,
        purpose=body.purpose,
        status="pending",
    )
    s.add(ln)
    s.commit()
    s.refresh(ln)
    return ln


@router.post("/simulation", response_model=LoanSimulationOut)
def simulate(body: LoanSimulationIn):
    sim = compute_schedule(body.amount, body.interest_rate, body.term_months)
    return LoanSimulationOut(
        monthly_payment=float(sim.monthly_payment),
        total_payment=float(sim.total_payment),
        total_interest=float(sim.total_interest),
        payment_schedule=[
            {
                "month": e.month,
                "principal": float(e.principal),
                "interest": float(e.interest),
                "total": float(e.total),
                "remaining_balance": float(e.remaining_balance),
            }
            for e in sim.schedule
        ],
    )


@router.get("/{loan_id}", response_model=LoanOut)
def get_loan(loan_id: int, s: Session = Depends(db), u=Depends(current_user)):
    ln = _require_loan(s, loan_id)
    require_self_or_admin(ln.member_id, u)
    return ln


@router.post("/{loan_id}/approval", response_model=LoanOut)
def approve(loan_id: int, body: LoanApprove, s: Session = Depends(db), u=Depends(require_admin)):
    return approve_loan(
        s,
        loan_id,
        approved=body.approved,
        approver_id=u.get("uid"),
        interest_rate=body.interest_rate,
        notes=body.notes,
    )


@router.get("/{loan_id}/schedule", response_model=list[InstallmentOut])
def schedule(loan_id: int, s: Session = Depends(db), u=Depends(current_user)):
    ln = _require_loan(s, loan_id)
    require_self_or_admin(ln.member_id, u)
    return get_payment_schedules(s, loan_id)


@router.get("/{loan_id}/schedule/export")
def export_schedule(loan_id: int, s: Session = Depends(db), u=Depends(current_user)):
    ln = _require_loan(s, loan_id)
    require_self_or_admin(ln.member_id, u)

    buf = BytesIO()
    build_schedule_report(s, loan_id, buf)
    buf.seek(0)
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="loan_{loan_id}_schedule.xlsx"'},
    )
