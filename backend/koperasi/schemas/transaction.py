from pydantic import BaseModel
from datetime import datetime
from typing import Literal

TxType = Literal["savings_deposit", "loan_disbursement", "loan_payment", "shu_distribution", "administrative"]

class TxOut(BaseModel):
    id: int
    member_id: int
    type: TxType
    amount: float
    description: str
    reference_id: int | None
    created_by: int | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
