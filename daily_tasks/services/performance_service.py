"""Revenue / cost ledger service"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from daily_tasks.models.performance_entry import PerformanceEntry

logger = logging.getLogger(__name__)

KINDS = ("revenue", "cost")


@dataclass
class LedgerTotals:
    revenue: float = 0.0
    cost: float = 0.0

    @property
    def profit(self) -> float:
        return self.revenue - self.cost


def validate_entry(kind: str, subject: Optional[str], amount, occurred_on: Optional[date]) -> tuple:
    """Returns (subject, amount, occurred_on) or raises ValueError with a user message."""
    if kind not in KINDS:
        raise ValueError(f"Unknown kind: {kind}")
    subject = (subject or "").strip()
    if not subject:
        raise ValueError("Subject is required")
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise ValueError("Amount must be a number")
    if not math.isfinite(amount) or amount <= 0:
        raise ValueError("Amount must be greater than 0")
    return subject, amount, occurred_on or date.today()


def add_entry(db: Session, owner_id: str, kind: str, subject: str, amount, occurred_on: Optional[date] = None) -> PerformanceEntry:
    subject, amount, occurred_on = validate_entry(kind, subject, amount, occurred_on)
    entry = PerformanceEntry(
        owner_id=owner_id,
        kind=kind,
        subject=subject,
        amount=amount,
        occurred_on=occurred_on,
        created_at=datetime.utcnow(),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info(f"{kind} entry {entry.id} recorded for {owner_id}")
    return entry


def list_entries(db: Session, owner_id: str) -> List[PerformanceEntry]:
    return db.query(PerformanceEntry).filter(
        PerformanceEntry.owner_id == owner_id
    ).order_by(
        PerformanceEntry.occurred_on.desc(),
        PerformanceEntry.created_at.desc(),
    ).all()


def compute_totals(entries: Iterable[PerformanceEntry]) -> LedgerTotals:
    totals = LedgerTotals()
    for entry in entries:
        if entry.kind == "revenue":
            totals.revenue += float(entry.amount)
        elif entry.kind == "cost":
            totals.cost += float(entry.amount)
    return totals
