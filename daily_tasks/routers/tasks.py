import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query, Header, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from daily_tasks.core.database import get_db
from daily_tasks.core.deps import get_current_user, get_caps
from daily_tasks.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    TaskCreatedResponse,
    ReorderRequest,
    DayBoardResponse,
    DayTotalsResponse,
    MemberGroup,
    Scope,
)
from daily_tasks.schemas.user import CloudUser
from daily_tasks.services import task_service
from daily_tasks.services.calendar_service import CalendarError, mirror_task
from daily_tasks.services.projection import member_options, project_day
from daily_tasks.services.schema_capabilities import SchemaCapabilities

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def backend_failure(db: Session, where: str, e: Exception, detail: str) -> HTTPException:
    db.rollback()
    logger.error(f"[{where}] {e}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def load_tasks(db: Session, caps: SchemaCapabilities, scope: str, user: CloudUser):
    try:
        if scope == "all":
            return task_service.fetch_all(db, caps)
        return task_service.fetch_mine(db, caps, user.id)
    except SQLAlchemyError as e:
        raise backend_failure(db, "fetch", e, "Failed to load tasks")


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    scope: Scope = Query("mine"),
    db: Session = Depends(get_db),
    caps: SchemaCapabilities = Depends(get_caps),
    current_user: CloudUser = Depends(get_current_user)
):
    tasks = load_tasks(db, caps, scope, current_user)
    return [task_service.serialize(t, caps, current_user.id) for t in tasks]


@router.get("/board", response_model=DayBoardResponse)
def day_board(
    day: date = Query(..., alias="date"),
    scope: Scope = Query("mine"),
    member: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    caps: SchemaCapabilities = Depends(get_caps),
    current_user: CloudUser = Depends(get_current_user)
):
    """Tâches du jour groupées par membre, avec les totaux prévu / réel"""
    tasks = [task_service.serialize(t, caps, current_user.id) for t in load_tasks(db, caps, scope, current_user)]
    board = project_day(tasks, day, scope, current_user.id, member)
    return DayBoardResponse(
        date=day,
        scope=scope,
        member=member if scope == "all" else None,
        groups=[MemberGroup(member=label, tasks=rows) for label, rows in board.groups],
        totals=DayTotalsResponse(planned=board.totals.planned, actual=board.totals.actual),
    )


@router.get("/members", response_model=List[str])
def members(
    db: Session = Depends(get_db),
    caps: SchemaCapabilities = Depends(get_caps),
    current_user: CloudUser = Depends(get_current_user)
):
    return member_options(load_tasks(db, caps, "all", current_user))


@router.post("", response_model=TaskCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    caps: SchemaCapabilities = Depends(get_caps),
    current_user: CloudUser = Depends(get_current_user),
    provider_token: Optional[str] = Header(None, alias="X-Provider-Token")
):
    try:
        task = task_service.insert_task(db, caps, current_user, task_data)
    except SQLAlchemyError as e:
        raise backend_failure(db, "addTask", e, "Failed to add task")

    response = TaskCreatedResponse(**task_service.serialize(task, caps, current_user.id).model_dump())

    # la tâche est déjà enregistrée : un échec calendrier ne l'annule pas
    if task_data.add_to_calendar:
        try:
            event = mirror_task(response, provider_token)
            response.calendar_event_id = event.get("id")
        except CalendarError as e:
            logger.error(f"[google calendar] {e}")
            response.calendar_error = str(e)

    return response


@router.post("/reorder", response_model=List[TaskResponse])
def reorder_tasks(
    request: ReorderRequest,
    db: Session = Depends(get_db),
    caps: SchemaCapabilities = Depends(get_caps),
    current_user: CloudUser = Depends(get_current_user)
):
    """Déplace une tâche juste avant une autre du même groupe"""
    try:
        group = task_service.reorder_group(db, caps, current_user.id, request.moved_id, request.target_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except task_service.ReorderError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Reorder partially applied ({len(e.applied)} task(s) renumbered)"
        )
    except SQLAlchemyError as e:
        raise backend_failure(db, "reorder", e, "Failed to reorder tasks")

    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    return [task_service.serialize(t, caps, current_user.id) for t in group]


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    caps: SchemaCapabilities = Depends(get_caps),
    current_user: CloudUser = Depends(get_current_user)
):
    changes = task_data.model_dump(exclude_unset=True)
    try:
        task = task_service.update_task(db, caps, current_user.id, task_id, changes)
    except SQLAlchemyError as e:
        raise backend_failure(db, "updateTask", e, "Failed to update task")

    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    return task_service.serialize(task, caps, current_user.id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    caps: SchemaCapabilities = Depends(get_caps),
    current_user: CloudUser = Depends(get_current_user)
):
    try:
        deleted = task_service.delete_task(db, caps, current_user.id, task_id)
    except SQLAlchemyError as e:
        raise backend_failure(db, "deleteTask", e, "Failed to delete task")

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    return Response(status_code=status.HTTP_204_NO_CONTENT)
