from decimal import Decimal

from sqlalchemy import Boolean, Integer, DateTime, func, ForeignKey, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column
from koperasi.db.base import Base


class SHUCalculation(Base):
    __tablename__ = "shu_calculations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    year: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    total_profit: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    member_share_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    total_member_share: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    calculated_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
    calculated_by: Mapped[int] = mapped_column(ForeignKey("users.id"))
    distributed: Mapped[bool] = mapped_column(Boolean, default=False)


class SHUDistribution(Base):
    __tablename__ = "shu_distributions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shu_calculation_id: Mapped[int] = mapped_column(ForeignKey("shu_calculations.id", ondelete="CASCADE"), index=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    savings_contribution: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    loan_contribution: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    share_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    # NULL for the provisional rows written at calculation time
    distributed_at: Mapped[DateTime | None] = mapped_column(DateTime, nullable=True)


Index("ix_shu_distributions_calc_member", SHUDistribution.shu_calculation_id, SHUDistribution.member_id)
