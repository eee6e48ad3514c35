from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal

InstallmentStatus = Literal["pending", "paid", "late", "missed"]

class PaymentIn(BaseModel):
    amount: float = Field(gt=0)
    payment_method: str = Field(min_length=1, max_length=32)
    notes: str | None = None

class InstallmentOut(BaseModel):
    id: int
    loan_id: int
    installment_number: int
    due_date: datetime
    principal_amount: float
    interest_amount: float
    total_amount: float
    paid_amount: float
    paid_date: datetime | None
    status: InstallmentStatus
    late_fee: float

    class Config:
        from_attributes = True
