"""Debounced persistence of a free-text field, aware of IME composition.

While a composition session is open nothing is saved; the text is flushed
once when the composition ends (after the debounce delay) or on blur.
"""

import threading
from typing import Callable, Optional

DEFAULT_DELAY = 0.6


class DebouncedField:
    def __init__(self, on_save: Callable[[str], None], delay: float = DEFAULT_DELAY,
                 timer_factory: Callable = threading.Timer):
        self.on_save = on_save
        self.delay = delay
        self.timer_factory = timer_factory
        self.composing = False
        self._timer = None
        self._lock = threading.Lock()

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, text: str) -> None:
        with self._lock:
            self._cancel()
            self._timer = self.timer_factory(self.delay, self.on_save, args=(text,))
            self._timer.start()

    def change(self, text: str) -> None:
        if not self.composing:
            self._schedule(text)

    def composition_start(self) -> None:
        self.composing = True
        with self._lock:
            self._cancel()

    def composition_end(self, text: str) -> None:
        self.composing = False
        self._schedule(text)

    def blur(self, text: Optional[str]) -> None:
        if self.composing:
            return
        with self._lock:
            self._cancel()
        self.on_save(text or "")

    def close(self) -> None:
        with self._lock:
            self._cancel()
