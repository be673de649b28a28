"""Single-loop status poller shared by all workflow controllers.

A poller is either ``IDLE`` or ``POLLING``. While polling it owns at most one
pending timer, registered in the scheduler under the workflow kind. Each tick
issues one status request, and only a ``CONTINUE`` classification schedules
the next tick; terminal readings stop the poller before the completion
callback runs. Results of a request that was in flight while the poller was
stopped (or restarted) are discarded without touching any state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from edgelink.adapters.api_errors import ApiError
from edgelink.domain.ports import SchedulerPort
from edgelink.domain.workflows import Outcome, StatusReading, WorkflowKind

log = logging.getLogger(__name__)


class PollerState(Enum):
    IDLE = "idle"
    POLLING = "polling"


@dataclass
class WorkflowState:
    """Mutable bookkeeping for one workflow kind.

    Attributes:
        state: ``IDLE`` or ``POLLING``.
        generation: Bumped on every start and stop so late responses from an
            earlier loop can be recognized and dropped.
        in_flight: Whether a status request is currently outstanding.
    """

    state: PollerState = PollerState.IDLE
    generation: int = 0
    in_flight: bool = False

    @property
    def active(self) -> bool:
        return self.state is PollerState.POLLING


def _noop_reading(_: StatusReading) -> None:
    """Default callback for readings."""


def _noop_error(_: Exception) -> None:
    """Default callback for strict tick errors."""


class StatusPoller:
    """Drive periodic status requests for one workflow kind.

    Args:
        kind: Workflow this poller serves; also the scheduler key.
        scheduler: Keyed one-shot timer service.
        poll: Callable performing one status request for ``kind``.
        interval_ms: Delay between ticks; ``None`` disables the timer so
            ticks only happen when :meth:`tick` is called explicitly.
        on_status: Called with every accepted reading.
        on_terminal: Called once with the terminal reading, after the poller
            has already stopped.
        on_error: Called when a strict tick gets an ``ApiError``. Any other
            exception from ``poll`` propagates to the caller.
    """

    def __init__(
        self,
        kind: WorkflowKind,
        scheduler: SchedulerPort,
        poll: Callable[[WorkflowKind], StatusReading],
        *,
        interval_ms: Optional[int],
        on_status: Callable[[StatusReading], None] = _noop_reading,
        on_terminal: Callable[[StatusReading], None] = _noop_reading,
        on_error: Callable[[Exception], None] = _noop_error,
    ) -> None:
        self.kind = WorkflowKind(kind)
        self.key = self.kind.value
        self._scheduler = scheduler
        self._poll = poll
        self.interval_ms = interval_ms
        self._on_status = on_status
        self._on_terminal = on_terminal
        self._on_error = on_error
        self.workflow = WorkflowState()

    @property
    def state(self) -> PollerState:
        return self.workflow.state

    @property
    def is_active(self) -> bool:
        return self.workflow.active

    @property
    def generation(self) -> int:
        return self.workflow.generation

    def start(self) -> None:
        """Enter ``POLLING``, replacing any loop that is already running."""
        self._scheduler.cancel(self.key)
        self.workflow.generation += 1
        self.workflow.state = PollerState.POLLING
        log.debug("%s poller started (generation %d)", self.key, self.workflow.generation)
        self._schedule_next()

    def stop(self) -> None:
        """Return to ``IDLE``; no further tick fires. Safe to call repeatedly."""
        self._scheduler.cancel(self.key)
        if self.workflow.state is PollerState.IDLE:
            return
        self.workflow.state = PollerState.IDLE
        self.workflow.generation += 1
        log.debug("%s poller stopped", self.key)

    def tick(self, *, strict: bool = False) -> Optional[StatusReading]:
        """Run one request/classify cycle.

        Args:
            strict: Treat a failed request as terminal (``on_error``) instead
                of "still in progress".

        Returns:
            The accepted reading, or ``None`` if the tick was skipped, failed,
            or its result was discarded.
        """
        if not self.workflow.active or self.workflow.in_flight:
            return None
        generation = self.workflow.generation
        self.workflow.in_flight = True
        try:
            reading = self._poll(self.kind)
        except ApiError as exc:
            self.workflow.in_flight = False
            if self._is_stale(generation):
                log.debug("%s: dropping error from cancelled tick: %s", self.key, exc)
                return None
            if strict:
                log.warning("%s status request failed: %s", self.key, exc)
                self.stop()
                self._on_error(exc)
                return None
            # The device is embedded and may be briefly unreachable; keep going.
            log.debug("%s status request failed, will retry: %s", self.key, exc)
            self._schedule_next()
            return None
        except Exception:
            self.workflow.in_flight = False
            raise
        self.workflow.in_flight = False

        if self._is_stale(generation):
            log.debug("%s: discarding reading %s from cancelled tick", self.key, reading.code)
            return None

        self._on_status(reading)
        if self._is_stale(generation):
            return reading
        if reading.outcome is Outcome.CONTINUE:
            self._schedule_next()
            return reading

        log.info("%s reached %s (code %s)", self.key, reading.outcome.value, reading.code)
        self.stop()
        self._on_terminal(reading)
        return reading

    # ------------------------------------------------------------------
    def _is_stale(self, generation: int) -> bool:
        return not self.workflow.active or self.workflow.generation != generation

    def _schedule_next(self) -> None:
        if self.interval_ms is None:
            return
        generation = self.workflow.generation
        self._scheduler.schedule(self.key, self.interval_ms, lambda: self._on_timer(generation))

    def _on_timer(self, generation: int) -> None:
        if self._is_stale(generation):
            return
        self.tick()


__all__ = ["PollerState", "StatusPoller", "WorkflowState"]
