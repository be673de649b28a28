"""Run firmware uploads off the Tk thread.

The upload job runs on a daemon thread and only enqueues what happens. The
queue is drained on the UI thread through the polling scheduler, so every
controller callback (progress ticks, completion, errors) runs on the thread
that owns the workflow state.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional, Tuple

from ..domain.ports import ProgressFn, SchedulerPort, UploadJob

log = logging.getLogger(__name__)

UPLOAD_DRAIN_KEY = "firmware_upload"
DRAIN_INTERVAL_MS = 50

_Event = Tuple[str, object]


class BackgroundUpload:
    """``UploadRunner`` that executes the job on a worker thread."""

    def __init__(self, scheduler: SchedulerPort, *, drain_interval_ms: int = DRAIN_INTERVAL_MS) -> None:
        self._scheduler = scheduler
        self.drain_interval_ms = drain_interval_ms
        self._events: "queue.Queue[_Event]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._on_progress: ProgressFn = lambda sent, total: None
        self._on_done: Callable[[], None] = lambda: None
        self._on_error: Callable[[Exception], None] = lambda exc: None

    @property
    def busy(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __call__(
        self,
        job: UploadJob,
        *,
        on_progress: ProgressFn,
        on_done: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        if self.busy:
            raise RuntimeError("A firmware upload is already running.")
        self._on_progress = on_progress
        self._on_done = on_done
        self._on_error = on_error
        self._thread = threading.Thread(
            target=self._run, args=(job,), name="firmware-upload", daemon=True
        )
        self._thread.start()
        self._scheduler.schedule(UPLOAD_DRAIN_KEY, self.drain_interval_ms, self.drain)

    def _run(self, job: UploadJob) -> None:
        try:
            job(lambda sent, total: self._events.put(("progress", (sent, total))))
        except Exception as exc:
            log.debug("Upload worker failed: %s", exc)
            self._events.put(("error", exc))
            return
        self._events.put(("done", None))

    def drain(self) -> bool:
        """Deliver queued events on the calling thread.

        Progress events are coalesced: one drain delivers at most one
        progress callback, carrying the newest byte count.

        Returns:
            ``True`` once the upload has finished (done or error).
        """
        latest: Optional[Tuple[int, int]] = None
        finished: Optional[_Event] = None
        while finished is None:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            if event[0] == "progress":
                latest = event[1]  # type: ignore[assignment]
            else:
                finished = event
        if latest is not None:
            self._on_progress(*latest)
        if finished is None:
            self._scheduler.schedule(UPLOAD_DRAIN_KEY, self.drain_interval_ms, self.drain)
            return False
        kind, payload = finished
        if kind == "done":
            self._on_done()
        else:
            self._on_error(payload)  # type: ignore[arg-type]
        return True

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)


__all__ = ["BackgroundUpload", "UPLOAD_DRAIN_KEY"]
