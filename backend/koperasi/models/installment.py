from decimal import Decimal

from sqlalchemy import Integer, DateTime, func, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from koperasi.db.base import Base

class Installment(Base):
    __tablename__ = "payment_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    loan_id: Mapped[int] = mapped_column(ForeignKey("loans.id", ondelete="CASCADE"), index=True)
    installment_number: Mapped[int] = mapped_column(Integer)
    due_date: Mapped[DateTime] = mapped_column(DateTime, index=True)

    principal_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    interest_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"))
    paid_date: Mapped[DateTime | None] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="pending")
    late_fee: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"))

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("loan_id", "installment_number", name="uq_payment_schedules_loan_number"),
    )
    # UPDATE ... WHERE version = :old; a concurrent writer raises StaleDataError
    __mapper_args__ = {"version_id_col": version}
