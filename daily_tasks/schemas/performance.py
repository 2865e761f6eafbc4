from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from typing import Optional, Literal

class PerformanceEntryCreate(BaseModel):
    """Ligne de revenu ou de coût"""
    kind: Literal["revenue", "cost"]
    subject: str
    amount: float
    occurred_on: Optional[date] = None

class PerformanceEntryResponse(BaseModel):
    id: str
    owner_id: str
    kind: str
    subject: str
    amount: float
    occurred_on: date
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PerformanceTotalsResponse(BaseModel):
    revenue: float
    cost: float
    profit: float
