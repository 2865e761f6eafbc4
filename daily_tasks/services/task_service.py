"""Task service"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, load_only

from daily_tasks.models.task import Task
from daily_tasks.schemas.task import TaskCreate, TaskResponse, UPDATABLE_FIELDS
from daily_tasks.schemas.user import CloudUser
from daily_tasks.services.duration import diff_hours_from_times, finite_or_zero
from daily_tasks.services.ordering import next_sort_order, reorder, sort_group
from daily_tasks.services.schema_capabilities import OPTIONAL_COLUMNS, SchemaCapabilities

logger = logging.getLogger(__name__)


class ReorderError(Exception):
    """A renumbering write failed; the writes before it are kept."""

    def __init__(self, task_id: str, applied: List[str]):
        super().__init__(f"Reorder stopped at task {task_id} after {len(applied)} write(s)")
        self.task_id = task_id
        self.applied = applied


def _query(db: Session, caps: SchemaCapabilities):
    query = db.query(Task)
    if caps.missing:
        present = [getattr(Task, c) for c in sorted(caps.columns) if hasattr(Task, c)]
        query = query.options(load_only(*present))
    return query


def fetch_all(db: Session, caps: SchemaCapabilities) -> List[Task]:
    return _query(db, caps).order_by(Task.created_at).all()


def fetch_mine(db: Session, caps: SchemaCapabilities, owner_id: str) -> List[Task]:
    return _query(db, caps).filter(Task.owner_id == owner_id).order_by(Task.created_at).all()


def fetch_group(db: Session, caps: SchemaCapabilities, day: date, member: str, owner_id: str) -> List[Task]:
    return _query(db, caps).filter(
        Task.date == day,
        Task.member == member,
        Task.owner_id == owner_id,
    ).all()


def get_owned(db: Session, caps: SchemaCapabilities, owner_id: str, task_id: str) -> Optional[Task]:
    return _query(db, caps).filter(Task.id == task_id, Task.owner_id == owner_id).first()


def serialize(task: Task, caps: SchemaCapabilities, viewer_id: Optional[str] = None) -> TaskResponse:
    """Only touches the columns the table has."""
    data = {
        "id": task.id,
        "owner_id": task.owner_id,
        "member": task.member or "",
        "name": task.name,
        "category": task.category,
        "planned_hours": finite_or_zero(task.planned_hours),
        "actual_hours": finite_or_zero(task.actual_hours),
        "status": task.status,
        "date": task.date,
        "created_at": task.created_at,
        "can_edit": viewer_id is not None and task.owner_id == viewer_id,
    }
    for column in OPTIONAL_COLUMNS:
        data[column] = getattr(task, column) if caps.supports(column) else None
    data["retrospective"] = data["retrospective"] or ""
    data["completion_criteria"] = data["completion_criteria"] or ""

    hours = diff_hours_from_times(data["start_time"], data["end_time"])
    data["display_planned_hours"] = data["planned_hours"] if hours is None else hours
    return TaskResponse(**data)


def insert_task(db: Session, caps: SchemaCapabilities, user: CloudUser, data: TaskCreate) -> Task:
    planned = diff_hours_from_times(data.start_time, data.end_time)
    payload = {
        "owner_id": user.id,
        "member": user.display_name,
        "name": data.name,
        "category": data.category,
        "planned_hours": planned if planned is not None else 0,
        "actual_hours": 0,
        "status": "not_started",
        "date": data.date,
        "created_at": datetime.utcnow(),
        "retrospective": "",
        "start_time": data.start_time,
        "end_time": data.end_time,
        "completion_criteria": data.completion_criteria or "",
    }
    if caps.supports("sort_order"):
        group = fetch_group(db, caps, data.date, user.display_name, user.id)
        payload["sort_order"] = next_sort_order(group)

    task = Task(**caps.strip(payload))
    db.add(task)
    db.commit()
    db.refresh(task, attribute_names=[c for c in caps.columns if hasattr(Task, c)])
    logger.info(f"Task {task.id} created by {user.id}")
    return task


def update_task(db: Session, caps: SchemaCapabilities, owner_id: str, task_id: str, changes: dict) -> Optional[Task]:
    """Returns None (nothing written) when the task is not the caller's."""
    task = get_owned(db, caps, owner_id, task_id)
    if task is None:
        return None

    allowed = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    for field, value in caps.strip(allowed).items():
        setattr(task, field, value)

    db.commit()
    db.refresh(task, attribute_names=[c for c in caps.columns if hasattr(Task, c)])
    return task


def delete_task(db: Session, caps: SchemaCapabilities, owner_id: str, task_id: str) -> bool:
    task = get_owned(db, caps, owner_id, task_id)
    if task is None:
        return False
    db.delete(task)
    db.commit()
    logger.info(f"Task {task_id} deleted by {owner_id}")
    return True


def reorder_group(db: Session, caps: SchemaCapabilities, owner_id: str, moved_id: str, target_id: str) -> Optional[List[Task]]:
    """Move a task before another one of its group, one commit per renumbered task."""
    if not caps.supports("sort_order"):
        raise ValueError("Manual ordering is not available on this database")

    moved = get_owned(db, caps, owner_id, moved_id)
    if moved is None:
        return None

    group = fetch_group(db, caps, moved.date, moved.member, owner_id)
    changes = reorder(group, moved_id, target_id)

    applied = []
    for task, new_key in changes:
        task.sort_order = new_key
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Reorder write failed for task {task.id}: {e}")
            raise ReorderError(task.id, applied) from e
        applied.append(task.id)

    return sort_group(group)
