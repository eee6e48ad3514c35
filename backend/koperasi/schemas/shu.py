from pydantic import BaseModel, Field
from datetime import datetime

class SHUCalculate(BaseModel):
    year: int = Field(ge=1900, le=9999)
    total_profit: float
    calculated_by: int | None = None

class SHUCalculationOut(BaseModel):
    id: int
    year: int
    total_profit: float
    member_share_percentage: float
    total_member_share: float
    calculated_at: datetime
    calculated_by: int
    distributed: bool

    class Config:
        from_attributes = True

class SHUDistributionOut(BaseModel):
    id: int
    shu_calculation_id: int
    member_id: int
    savings_contribution: float
    loan_contribution: float
    share_amount: float
    distributed_at: datetime | None

    class Config:
        from_attributes = True
