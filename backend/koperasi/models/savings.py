from decimal import Decimal

from sqlalchemy import Integer, DateTime, func, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from koperasi.db.base import Base

class Savings(Base):
    __tablename__ = "savings"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    type: Mapped[str] = mapped_column(String(16))
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    balance: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    transaction_date: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now(), index=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
