"""Manual ordering of tasks inside a (date, member, owner) group.

Sort keys are sparse (steps of 10) so a new task can be appended without
touching the others. A drag-and-drop move renumbers the whole group.
"""

from datetime import datetime
from typing import Iterable, List, Sequence, Tuple

SORT_STEP = 10
MEMBER_PLACEHOLDER = "-"


def member_label(task) -> str:
    return task.member or MEMBER_PLACEHOLDER


def group_key(task) -> tuple:
    return (task.date, member_label(task), task.owner_id)


def order_key(task) -> tuple:
    # keyless tasks (created before sort_order existed) go after keyed ones
    created = task.created_at or datetime.min
    if task.sort_order is None:
        return (1, 0, created)
    return (0, task.sort_order, created)


def sort_group(tasks: Iterable) -> list:
    return sorted(tasks, key=order_key)


def next_sort_order(group: Iterable) -> int:
    keys = [t.sort_order for t in group if t.sort_order is not None]
    return (max(keys) if keys else 0) + SORT_STEP


def reorder(group: Sequence, moved_id: str, target_id: str) -> List[Tuple[object, int]]:
    """Move `moved_id` right before `target_id` and renumber 10, 20, ...

    Returns the (task, new_sort_order) pairs whose key actually changes,
    in the new display order.
    """
    if moved_id == target_id:
        raise ValueError("A task cannot be moved onto itself")

    ordered = sort_group(group)
    moved = next((t for t in ordered if t.id == moved_id), None)
    target = next((t for t in ordered if t.id == target_id), None)
    if moved is None or target is None:
        raise ValueError("Both tasks must belong to the same group")

    ordered.remove(moved)
    ordered.insert(ordered.index(target), moved)

    changes = []
    for position, task in enumerate(ordered, start=1):
        new_key = position * SORT_STEP
        if task.sort_order != new_key:
            changes.append((task, new_key))
    return changes
