from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Literal

SavingsType = Literal["mandatory", "voluntary", "special"]

class SavingsCreate(BaseModel):
    member_id: int
    type: SavingsType
    amount: float
    description: str | None = None

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: float):
        if v != v or v in (float("inf"), float("-inf")):
            raise ValueError("amount must be finite")
        if v <= 0:
            raise ValueError("amount must be positive")
        return v

class SavingsOut(BaseModel):
    id: int
    member_id: int
    type: SavingsType
    amount: float
    balance: float
    description: str | None
    transaction_date: datetime
    created_at: datetime | None = None

    class Config:
        from_attributes = True
