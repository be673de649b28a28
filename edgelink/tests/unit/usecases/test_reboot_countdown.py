from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from edgelink.usecases.reboot_countdown import REBOOT_COUNTDOWN_KEY, RebootCountdown


class _ManualScheduler:
    def __init__(self) -> None:
        self.pending: Dict[str, Tuple[int, Callable[[], None]]] = {}

    def schedule(self, key: str, delay_ms: int, callback: Callable[[], None]) -> None:
        self.pending[key] = (delay_ms, callback)

    def cancel(self, key: str) -> None:
        self.pending.pop(key, None)

    def is_scheduled(self, key: str) -> bool:
        return key in self.pending

    def fire(self, key: str) -> None:
        _, callback = self.pending.pop(key)
        callback()


def _countdown(start_at: int = 10):
    scheduler = _ManualScheduler()
    ticks: List[int] = []
    reloads: List[int] = []
    countdown = RebootCountdown(
        scheduler,
        on_tick=ticks.append,
        on_reload=lambda: reloads.append(1),
        start_at=start_at,
    )
    return countdown, scheduler, ticks, reloads


def test_counts_down_once_per_second_and_reloads_once() -> None:
    countdown, scheduler, ticks, reloads = _countdown()

    countdown.start()
    assert scheduler.pending[REBOOT_COUNTDOWN_KEY][0] == 1000
    while scheduler.is_scheduled(REBOOT_COUNTDOWN_KEY):
        scheduler.fire(REBOOT_COUNTDOWN_KEY)

    assert ticks == list(range(10, 0, -1))
    assert reloads == [1]
    assert countdown.remaining == 0


def test_second_start_while_running_is_ignored() -> None:
    countdown, scheduler, ticks, _ = _countdown(start_at=3)

    countdown.start()
    scheduler.fire(REBOOT_COUNTDOWN_KEY)
    countdown.start()

    assert ticks == [3, 2]
    assert countdown.remaining == 2


def test_late_tick_after_reload_is_a_no_op() -> None:
    countdown, scheduler, ticks, reloads = _countdown(start_at=1)
    countdown.start()
    _, callback = scheduler.pending[REBOOT_COUNTDOWN_KEY]
    scheduler.fire(REBOOT_COUNTDOWN_KEY)

    callback()

    assert reloads == [1]
    assert countdown.remaining == 0
    assert ticks == [1]
