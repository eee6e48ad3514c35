from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Literal

LoanStatus = Literal["pending", "approved", "rejected", "active", "completed", "overdue"]

class LoanCreate(BaseModel):
    member_id: int
    amount: float = Field(gt=0)
    term_months: int = Field(ge=1)
    purpose: str

    @field_validator("purpose")
    @classmethod
    def purpose_trim(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("purpose is required")
        return v

class LoanApprove(BaseModel):
    approved: bool
    interest_rate: float | None = Field(default=None, ge=0, le=100)
    notes: str | None = None

class LoanOut(BaseModel):
    id: int
    member_id: int
    amount: float
    interest_rate: float | None
    term_months: int
    monthly_payment: float | None
    remaining_balance: float | None
    status: LoanStatus
    purpose: str | None
    applied_at: datetime
    approved_at: datetime | None
    approved_by: int | None
    approval_notes: str | None = None

    class Config:
        from_attributes = True

class LoanSimulationIn(BaseModel):
    amount: float = Field(gt=0)
    interest_rate: float = Field(ge=0)
    term_months: int = Field(ge=1)

class SimulationRow(BaseModel):
    month: int
    principal: float
    interest: float
    total: float
    remaining_balance: float

class LoanSimulationOut(BaseModel):
    monthly_payment: float
    total_payment: float
    total_interest: float
    payment_schedule: list[SimulationRow]
