from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import select
from koperasi.api.deps import db, require_admin
from koperasi.schemas.user import UserCreate, UserUpdate, UserOut
from koperasi.models.user import User
from koperasi.core.security import hash_password
from koperasi.utils.timezone import utcnow

router = APIRouter(prefix="/members", tags=["members"])

@router.get("", response_model=list[UserOut])
def list_members(
    status: str | None = Query(None),
    s: Session = Depends(db),
    u=Depends(require_admin),
):
    q = select(User)
    if status is not None:
        q = q.where(User.status == status)
    return s.execute(q.order_by(User.id.asc())).scalars().all()

@router.post("", response_model=UserOut)
def create_member(body: UserCreate, s: Session = Depends(db), u=Depends(require_admin)):
    exists = s.execute(select(User).where(User.username == body.username)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="user_exists")
    if body.member_number is not None:
        taken = s.execute(select(User).where(User.member_number == body.member_number)).scalar_one_or_none()
        if taken:
            raise HTTPException(status_code=409, detail="member_number_exists")
    user = User(
        username=body.username,
        password_hash=hash_password(body.password),
        name=body.name,
        member_number=body.member_number,
        role=body.role,
        status=body.status,
        verified_at=utcnow() if body.status == "active" else None,
    )
    s.add(user)
    s.commit()
    s.refresh(user)
    return user

@router.patch("/{member_id}", response_model=UserOut)
def update_member(member_id: int, body: UserUpdate, s: Session = Depends(db), u=Depends(require_admin)):
    user = s.execute(select(User).where(User.id == member_id)).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="user_not_found")
    if body.name is not None:
        user.name = body.name.strip() or user.name
    if body.role is not None:
        user.role = body.role
    if body.password is not None:
        user.password_hash = hash_password(body.password)
    if body.status is not None:
        # first activation counts as verification
        if body.status == "active" and user.verified_at is None:
            user.verified_at = utcnow()
        user.status = body.status
    s.add(user)
    s.commit()
    s.refresh(user)
    return user
