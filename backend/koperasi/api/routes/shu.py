from io import BytesIO

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from koperasi.api.deps import db, current_user, require_admin, require_self_or_admin
from koperasi.schemas.shu import SHUCalculate, SHUCalculationOut, SHUDistributionOut
from koperasi.services.reports import build_shu_report
from koperasi.services.shu import (
    calculate_shu,
    distribute_shu,
    list_calculations,
    list_distributions,
    member_distributions,
)

router = APIRouter(prefix="/shu", tags=["shu"])


@router.get("", response_model=list[SHUCalculationOut])
def calculations(s: Session = Depends(db), u=Depends(current_user)):
    return list_calculations(s)


@router.post("", response_model=SHUCalculationOut)
def calculate(body: SHUCalculate, s: Session = Depends(db), u=Depends(require_admin)):
    calculated_by = body.calculated_by if body.calculated_by is not None else u.get("uid")
    return calculate_shu(s, body.year, body.total_profit, calculated_by)


@router.post("/{calculation_id}/distribute", response_model=list[SHUDistributionOut])
def distribute(calculation_id: int, s: Session = Depends(db), u=Depends(require_admin)):
    return distribute_shu(s, calculation_id)


@router.get("/{calculation_id}/distributions", response_model=list[SHUDistributionOut])
def distributions(calculation_id: int, s: Session = Depends(db), u=Depends(require_admin)):
    return list_distributions(s, calculation_id)


@router.get("/{calculation_id}/export")
def export(calculation_id: int, s: Session = Depends(db), u=Depends(require_admin)):
    buf = BytesIO()
    build_shu_report(s, calculation_id, buf)
    buf.seek(0)
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="shu_{calculation_id}.xlsx"'},
    )


@router.get("/members/{member_id}", response_model=list[SHUDistributionOut])
def for_member(member_id: int, s: Session = Depends(db), u=Depends(current_user)):
    require_self_or_admin(member_id, u)
    return member_distributions(s, member_id)
