from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List
import logging

from daily_tasks.core.database import get_db
from daily_tasks.core.deps import get_current_user
from daily_tasks.schemas.performance import PerformanceEntryCreate, PerformanceEntryResponse, PerformanceTotalsResponse
from daily_tasks.schemas.user import CloudUser
from daily_tasks.services import performance_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/performance", tags=["performance"])

@router.post("", response_model=PerformanceEntryResponse, status_code=status.HTTP_201_CREATED)
def create_entry(
    entry_data: PerformanceEntryCreate,
    db: Session = Depends(get_db),
    current_user: CloudUser = Depends(get_current_user)
):
    try:
        return performance_service.add_entry(
            db,
            current_user.id,
            entry_data.kind,
            entry_data.subject,
            entry_data.amount,
            entry_data.occurred_on,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[performance_entries] insert {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save entry")

@router.get("", response_model=List[PerformanceEntryResponse])
def list_entries(
    db: Session = Depends(get_db),
    current_user: CloudUser = Depends(get_current_user)
):
    try:
        return performance_service.list_entries(db, current_user.id)
    except SQLAlchemyError as e:
        logger.error(f"[performance_entries] fetch {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load entries")

@router.get("/totals", response_model=PerformanceTotalsResponse)
def totals(
    db: Session = Depends(get_db),
    current_user: CloudUser = Depends(get_current_user)
):
    """Total revenus / coûts et marge"""
    try:
        entries = performance_service.list_entries(db, current_user.id)
    except SQLAlchemyError as e:
        logger.error(f"[performance_entries] totals {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load totals")
    totals = performance_service.compute_totals(entries)
    return PerformanceTotalsResponse(revenue=totals.revenue, cost=totals.cost, profit=totals.profit)
