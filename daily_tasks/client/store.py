"""Client-side task cache.

Both lists (mine / everyone) are refetched wholesale after every mutation;
nothing is patched locally. Fetches are never cancelled, so when two
refreshes overlap the one that completes last wins.
"""

import logging
from datetime import date
from typing import List, Optional

from daily_tasks.client.api import ApiClient, ApiError
from daily_tasks.client.debounce import DebouncedField, DEFAULT_DELAY
from daily_tasks.client.session import CloudSession
from daily_tasks.schemas.task import TaskCreatedResponse, TaskResponse, UPDATABLE_FIELDS
from daily_tasks.services.projection import DayBoard, SCOPE_ALL, SCOPE_MINE, member_options, project_day

logger = logging.getLogger(__name__)


class StoreError(Exception):
    pass


class TaskStore:
    def __init__(self, api: ApiClient):
        self.api = api
        self.mine: List[TaskResponse] = []
        self.all: List[TaskResponse] = []
        self._unsubscribe = api.holder.subscribe(self._on_session)
        if api.holder.current:
            self._initial_load()

    # -------------------- session --------------------
    def _on_session(self, session: Optional[CloudSession]) -> None:
        if session is None:
            self.mine = []
            self.all = []
            return
        self._initial_load()

    def _initial_load(self) -> None:
        try:
            self.refresh()
        except StoreError as e:
            logger.error(f"[initial load] {e}")

    def close(self) -> None:
        self._unsubscribe()

    @property
    def user_id(self) -> Optional[str]:
        user = self.api.holder.user
        return user.id if user else None

    # -------------------- queries --------------------
    def _fetch(self, scope: str) -> List[TaskResponse]:
        response = self.api.request("GET", "/tasks", params={"scope": scope})
        return [TaskResponse(**row) for row in response.json()]

    def refresh(self) -> None:
        if self.user_id is None:
            return
        try:
            mine = self._fetch(SCOPE_MINE)
            everyone = self._fetch(SCOPE_ALL)
        except ApiError as e:
            raise StoreError(f"Failed to load tasks: {e}") from e
        self.mine = mine
        self.all = everyone

    def find(self, task_id: str) -> Optional[TaskResponse]:
        for task in self.all + self.mine:
            if task.id == task_id:
                return task
        return None

    def can_edit(self, task: Optional[TaskResponse]) -> bool:
        return task is not None and self.user_id is not None and task.owner_id == self.user_id

    def board(self, day: date, scope: str = SCOPE_MINE, member: Optional[str] = None) -> DayBoard:
        source = self.all if scope == SCOPE_ALL else self.mine
        return project_day(source, day, scope, self.user_id, member)

    def members(self) -> List[str]:
        return member_options(self.all)

    # -------------------- mutations --------------------
    def add_task(self, name: str, category: str, day: date, start_time: Optional[str] = "09:00",
                 end_time: Optional[str] = "18:00", completion_criteria: Optional[str] = None,
                 add_to_calendar: bool = False) -> Optional[TaskCreatedResponse]:
        session = self.api.holder.current
        if session is None or not name.strip():
            return None

        headers = {}
        if add_to_calendar and session.provider_token:
            headers["X-Provider-Token"] = session.provider_token

        payload = {
            "name": name.strip(),
            "category": category,
            "date": day.isoformat(),
            "start_time": start_time,
            "end_time": end_time,
            "completion_criteria": completion_criteria,
            "add_to_calendar": add_to_calendar,
        }
        try:
            response = self.api.request("POST", "/tasks", json=payload, headers=headers)
        except ApiError as e:
            raise StoreError(f"Failed to add task: {e}") from e

        created = TaskCreatedResponse(**response.json())
        if created.calendar_error:
            logger.error(f"[google calendar] {created.calendar_error}")
        self.refresh()
        return created

    def update_task(self, task_id: str, **changes) -> bool:
        """Returns False without any request when the task is not ours."""
        if not self.can_edit(self.find(task_id)):
            return False
        patch = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if not patch:
            return False
        try:
            self.api.request("PATCH", f"/tasks/{task_id}", json=patch)
        except ApiError as e:
            raise StoreError(f"Failed to update task: {e}") from e
        self.refresh()
        return True

    def delete_task(self, task_id: str) -> bool:
        if not self.can_edit(self.find(task_id)):
            return False
        try:
            self.api.request("DELETE", f"/tasks/{task_id}")
        except ApiError as e:
            raise StoreError(f"Failed to delete task: {e}") from e
        self.refresh()
        return True

    def reorder(self, moved_id: str, target_id: str) -> bool:
        if not (self.can_edit(self.find(moved_id)) and self.can_edit(self.find(target_id))):
            return False
        try:
            self.api.request("POST", "/tasks/reorder", json={"moved_id": moved_id, "target_id": target_id})
        except ApiError as e:
            # des écritures ont pu passer : on recharge pour afficher l'état réel
            self._initial_load()
            raise StoreError(f"Failed to reorder tasks: {e}") from e
        self.refresh()
        return True

    def text_field(self, task_id: str, field: str, delay: float = DEFAULT_DELAY, **kwargs) -> DebouncedField:
        """Debounced editor for `retrospective` or `completion_criteria`."""
        if field not in ("retrospective", "completion_criteria"):
            raise ValueError(f"{field} is not a free-text field")

        def save(text: str) -> None:
            try:
                self.update_task(task_id, **{field: text})
            except StoreError as e:
                logger.error(f"[{field}] {e}")

        return DebouncedField(save, delay=delay, **kwargs)
