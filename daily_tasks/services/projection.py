"""Pure derivations of the day board from a task list."""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Tuple

from daily_tasks.services.duration import display_planned, finite_or_zero, round2
from daily_tasks.services.ordering import member_label, sort_group

SCOPE_MINE = "mine"
SCOPE_ALL = "all"
ALL_MEMBERS = "all"


@dataclass
class DayTotals:
    planned: float = 0.0
    actual: float = 0.0


@dataclass
class DayBoard:
    day: date
    groups: List[Tuple[str, list]] = field(default_factory=list)
    totals: DayTotals = field(default_factory=DayTotals)


def member_options(tasks: Iterable) -> List[str]:
    return [ALL_MEMBERS] + sorted({member_label(t) for t in tasks})


def filter_tasks(tasks: Iterable, day: date, scope: str = SCOPE_MINE,
                 owner_id: Optional[str] = None, member: Optional[str] = None) -> list:
    selected = [t for t in tasks if t.date == day]
    if scope == SCOPE_MINE:
        selected = [t for t in selected if t.owner_id == owner_id]
    elif member and member != ALL_MEMBERS:
        selected = [t for t in selected if member_label(t) == member]
    return selected


def group_by_member(tasks: Iterable) -> List[Tuple[str, list]]:
    groups = {}
    for task in tasks:
        groups.setdefault(member_label(task), []).append(task)
    return [(label, sort_group(rows)) for label, rows in sorted(groups.items())]


def compute_totals(tasks: Iterable) -> DayTotals:
    planned = 0.0
    actual = 0.0
    for task in tasks:
        planned += display_planned(task)
        actual += finite_or_zero(task.actual_hours)
    return DayTotals(planned=round2(planned), actual=actual)


def project_day(tasks: Iterable, day: date, scope: str = SCOPE_MINE,
                owner_id: Optional[str] = None, member: Optional[str] = None) -> DayBoard:
    selected = filter_tasks(tasks, day, scope, owner_id, member)
    return DayBoard(day=day, groups=group_by_member(selected), totals=compute_totals(selected))
