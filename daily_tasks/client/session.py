"""Session holder for the client side.

The current identity lives in an explicit object that components receive,
and every sign-in / sign-out is pushed to subscribers.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from daily_tasks.schemas.user import CloudUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloudSession:
    access_token: str
    user: CloudUser
    # delegated OAuth token for the calendar API, None if the provider gave none
    provider_token: Optional[str] = None


Listener = Callable[[Optional[CloudSession]], None]


class SessionHolder:
    def __init__(self):
        self._current: Optional[CloudSession] = None
        self._listeners: List[Listener] = []

    @property
    def current(self) -> Optional[CloudSession]:
        return self._current

    @property
    def user(self) -> Optional[CloudUser]:
        return self._current.user if self._current else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, session: CloudSession) -> None:
        self._current = session
        logger.info(f"Signed in as {session.user.id}")
        self._notify()

    def clear(self) -> None:
        if self._current is None:
            return
        self._current = None
        logger.info("Signed out")
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)
