"""Countdown between a successful OTA flash and the client reload."""

from __future__ import annotations

import logging
from typing import Callable

from edgelink.domain.ports import SchedulerPort

log = logging.getLogger(__name__)

REBOOT_COUNTDOWN_KEY = "firmware_reboot"


class RebootCountdown:
    """Count down once per tick and reload exactly once at zero.

    Not cancellable once started: the device reboots into the new image on
    its own and the client has to reload afterwards.
    """

    def __init__(
        self,
        scheduler: SchedulerPort,
        *,
        on_tick: Callable[[int], None],
        on_reload: Callable[[], None],
        start_at: int = 10,
        tick_ms: int = 1000,
    ) -> None:
        self._scheduler = scheduler
        self._on_tick = on_tick
        self._on_reload = on_reload
        self.start_at = max(1, int(start_at))
        self.tick_ms = tick_ms
        self.remaining = 0
        self.running = False

    def start(self) -> None:
        if self.running:
            return
        self.remaining = self.start_at
        self.running = True
        log.info("Firmware applied, reloading in %d ticks", self.remaining)
        self._on_tick(self.remaining)
        self._scheduler.schedule(REBOOT_COUNTDOWN_KEY, self.tick_ms, self._tick)

    def _tick(self) -> None:
        if not self.running:
            return
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.running = False
            self._scheduler.cancel(REBOOT_COUNTDOWN_KEY)
            self._on_reload()
            return
        self._on_tick(self.remaining)
        self._scheduler.schedule(REBOOT_COUNTDOWN_KEY, self.tick_ms, self._tick)


__all__ = ["REBOOT_COUNTDOWN_KEY", "RebootCountdown"]
