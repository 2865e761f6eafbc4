"""Revenue / cost ledger entry"""

import uuid
from sqlalchemy import Column, String, DateTime, Date, Numeric
from datetime import datetime
from daily_tasks.core.database import Base


class PerformanceEntry(Base):
    __tablename__ = "performance_entries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, nullable=False, index=True)
    kind = Column(String, nullable=False)  # "revenue" | "cost"
    subject = Column(String, nullable=False)
    amount = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    occurred_on = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
