"""Scheduler helper that owns the workflow timers for the console.

The app layer passes Tk ``after`` and ``after_cancel`` callables into this
class so timer state is tracked in one place: at most one pending timer per
key, cancelled safely when a workflow stops or the window closes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

log = logging.getLogger(__name__)

ScheduleFn = Callable[[int, Callable[[], None]], str]
CancelFn = Callable[[str], None]


@dataclass
class PollHandle:
    """Timer token associated with a single key.

    Attributes:
        key: Channel key (workflow kind value or a synthetic key such as
            ``firmware_reboot``).
        token: Scheduler token returned by the UI scheduler implementation.
    """
    key: str
    token: str = ""


class PollingScheduler:
    """Manage keyed one-shot timers using a UI scheduler (for example Tk)."""

    def __init__(self, schedule: ScheduleFn, cancel: CancelFn) -> None:
        """Store schedule/cancel functions and initialize handle registry.

        Args:
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function compatible with ``after_cancel(token)``.
        """
        self._schedule = schedule
        self._cancel = cancel
        self._handles: Dict[str, PollHandle] = {}

    def schedule(self, key: str, delay_ms: int, callback: Callable[[], None]) -> None:
        """Schedule or reschedule the next callback for a key.

        Any timer already pending for ``key`` is cancelled first.

        Args:
            key: Timer channel key.
            delay_ms: Delay in milliseconds before callback execution.
            callback: Callback to execute.
        """
        delay = max(1, int(delay_ms))
        self.cancel(key)
        handle = PollHandle(key=key)

        def _fire() -> None:
            if self._handles.get(key) is handle:
                del self._handles[key]
            callback()

        handle.token = self._schedule(delay, _fire)
        self._handles[key] = handle

    def cancel(self, key: str) -> None:
        """Cancel the pending timer for a key, if any."""
        handle = self._handles.pop(key, None)
        if not handle:
            return
        try:
            self._cancel(handle.token)
        except Exception as exc:
            # Tk raises if the timer already fired or the window is gone.
            log.debug("Cancelling timer %s failed: %s", key, exc)

    def cancel_all(self) -> None:
        """Cancel all pending timers across all keys."""
        for key in list(self._handles.keys()):
            self.cancel(key)

    def is_scheduled(self, key: str) -> bool:
        return key in self._handles

    def handle_for(self, key: str) -> Optional[PollHandle]:
        """Return the current handle for a key, if scheduled."""
        return self._handles.get(key)

    def active_keys(self) -> Tuple[str, ...]:
        return tuple(self._handles.keys())


__all__ = ["PollHandle", "PollingScheduler"]
