from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from edgelink.adapters.api_errors import ApiTransportError
from edgelink.adapters.device_mock import DeviceMock
from edgelink.domain.errors import DeviceReportedFailure, ValidationError
from edgelink.domain.events import StatusChanged, WorkflowCompleted
from edgelink.domain.workflows import StatusReading, WorkflowKind, interpret
from edgelink.usecases.poll_workflow_status import PollWorkflowStatus
from edgelink.usecases.reboot_countdown import REBOOT_COUNTDOWN_KEY
from edgelink.usecases.upload_firmware import UploadFirmware
from edgelink.usecases.workflow_controllers import FirmwareUpdateController


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


class _DeferredRunner:
    """Captures the upload callbacks so tests can replay them later."""

    def __init__(self) -> None:
        self.job: Optional[Callable[..., Any]] = None
        self.callbacks: Dict[str, Callable[..., Any]] = {}

    def __call__(self, job, *, on_progress, on_done, on_error) -> None:
        self.job = job
        self.callbacks = {"progress": on_progress, "done": on_done, "error": on_error}


class _ScriptedPoll:
    def __init__(self, steps: Sequence[Union[int, Exception]]) -> None:
        self._steps = list(steps)
        self.calls = 0

    def __call__(self, kind: WorkflowKind) -> StatusReading:
        self.calls += 1
        step = self._steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return interpret(kind, step)


@pytest.fixture()
def image(tmp_path: Path) -> Path:
    path = tmp_path / "app.bin"
    path.write_bytes(b"\xe9" * 32)
    return path


def _controller(device: DeviceMock, *, poll=None, runner=None, **extra):
    scheduler = _ManualScheduler()
    events: List[object] = []
    reloads: List[int] = []
    kwargs = dict(extra)
    if runner is not None:
        kwargs["runner"] = runner
    controller = FirmwareUpdateController(
        upload=UploadFirmware(device),
        scheduler=scheduler,
        poll_status=poll or PollWorkflowStatus(device, device, device),
        on_reload=lambda: reloads.append(1),
        emit=events.append,
        **kwargs,
    )
    return controller, scheduler, events, reloads


def _completed(events: List[object]) -> List[WorkflowCompleted]:
    return [e for e in events if isinstance(e, WorkflowCompleted)]


def _labels(events: List[object]) -> List[str]:
    return [e.label for e in events if isinstance(e, StatusChanged)]


def test_each_progress_event_polls_once_until_success(image: Path) -> None:
    device = DeviceMock(upload_chunks=4, ota_script=(0, 0, 1))
    controller, scheduler, events, _ = _controller(device)

    controller.start([str(image)])

    # Three progress ticks reach success; the fourth chunk and the final
    # tick arrive after the poller has stopped.
    assert device.calls.count("get_firmware_status") == 3
    assert device.uploaded == image
    assert _labels(events)[0] == "Uploading app.bin, Firmware Update in Progress..."
    done = _completed(events)
    assert len(done) == 1 and done[0].success is True
    assert "firmware_update" not in scheduler.pending
    assert scheduler.is_scheduled(REBOOT_COUNTDOWN_KEY)
    assert _labels(events)[-1].endswith("Rebooting in: 10")


def test_final_tick_after_upload_catches_late_success(image: Path) -> None:
    device = DeviceMock(upload_chunks=2, ota_script=(0, 0, 1))
    controller, _, events, _ = _controller(device)

    controller.start([image])

    assert device.calls.count("get_firmware_status") == 3
    assert _completed(events)[0].success is True
    assert controller.countdown.running


def test_countdown_reloads_exactly_once(image: Path) -> None:
    device = DeviceMock(upload_chunks=1, ota_script=(1,))
    controller, scheduler, events, reloads = _controller(device)
    controller.start([image])

    for _ in range(10):
        scheduler.fire(REBOOT_COUNTDOWN_KEY)

    assert reloads == [1]
    assert not controller.countdown.running
    assert controller.countdown.remaining == 0
    assert scheduler.pending == {}
    countdown = [label.rsplit(" ", 1)[-1] for label in _labels(events) if "Rebooting in" in label]
    assert countdown == [str(n) for n in range(10, 0, -1)]


def test_device_reported_failure_stops_listening(image: Path) -> None:
    device = DeviceMock(upload_chunks=3, ota_script=(0, -1))
    controller, scheduler, events, reloads = _controller(device)

    controller.start([image])

    assert device.calls.count("get_firmware_status") == 2
    done = _completed(events)
    assert len(done) == 1
    assert done[0].success is False
    assert done[0].reason == "!!! Upload Error !!!"
    assert isinstance(done[0].error, DeviceReportedFailure)
    assert scheduler.pending == {}
    assert reloads == []


def test_upload_transport_error_fails_the_workflow(image: Path) -> None:
    device = DeviceMock(fail_once={"upload_firmware"})
    controller, _, events, _ = _controller(device)

    controller.start([image])

    done = _completed(events)[0]
    assert done.success is False
    assert done.error is not None
    assert done.error.code == "REQUEST_TIMEOUT"
    assert "get_firmware_status" not in device.calls
    assert not controller.is_active


def test_transport_error_on_final_tick_is_failure(image: Path) -> None:
    poll = _ScriptedPoll([0, ApiTransportError("device rebooted")])
    device = DeviceMock(upload_chunks=1)
    controller, _, events, _ = _controller(device, poll=poll)

    controller.start([image])

    assert poll.calls == 2
    done = _completed(events)[0]
    assert done.success is False
    assert done.error is not None and done.error.code == "REQUEST_TIMEOUT"
    assert not controller.countdown.running


def test_transport_error_on_progress_tick_keeps_listening(image: Path) -> None:
    poll = _ScriptedPoll([ApiTransportError("busy"), 1])
    device = DeviceMock(upload_chunks=2)
    controller, _, events, _ = _controller(device, poll=poll)

    controller.start([image])

    assert poll.calls == 2
    assert _completed(events)[0].success is True


def test_invalid_selection_uploads_nothing(tmp_path: Path) -> None:
    device = DeviceMock()
    controller, scheduler, events, _ = _controller(device)

    with pytest.raises(ValidationError):
        controller.start([])
    with pytest.raises(ValidationError):
        controller.start([tmp_path / "missing.bin"])

    assert device.calls == []
    assert events == []
    assert not controller.is_active


def test_progress_after_stop_is_ignored(image: Path) -> None:
    device = DeviceMock(ota_script=(1,))
    runner = _DeferredRunner()
    controller, _, events, _ = _controller(device, runner=runner)
    controller.start([image])

    controller.stop()
    runner.callbacks["progress"](1, 2)
    runner.callbacks["done"]()

    assert "get_firmware_status" not in device.calls
    assert _completed(events) == []


def test_callbacks_from_previous_upload_are_ignored(image: Path) -> None:
    device = DeviceMock(ota_script=(0,))
    runner = _DeferredRunner()
    controller, _, _, _ = _controller(device, runner=runner)
    controller.start([image])
    stale = dict(runner.callbacks)
    controller.start([image])

    stale["progress"](1, 2)
    assert "get_firmware_status" not in device.calls

    runner.callbacks["progress"](1, 2)
    assert device.calls.count("get_firmware_status") == 1


def test_no_timer_is_registered_for_firmware_status(image: Path) -> None:
    device = DeviceMock(ota_script=(0,))
    runner = _DeferredRunner()
    controller, scheduler, _, _ = _controller(device, runner=runner)

    controller.start([image])
    runner.callbacks["progress"](1, 4)

    assert "firmware_update" not in scheduler.pending
    assert controller.is_active


def test_pending_status_after_upload_gives_up_after_follow_up_reads(image: Path) -> None:
    device = DeviceMock(upload_chunks=1, ota_script=(0,))
    controller, scheduler, events, reloads = _controller(
        device, settle_attempts=2, settle_interval_ms=500
    )

    controller.start([image])

    # progress tick + strict read right after the upload response
    assert device.calls.count("get_firmware_status") == 2
    assert controller.is_active
    assert scheduler.pending["firmware_update"][0] == 500
    assert _completed(events) == []

    scheduler.fire("firmware_update")
    scheduler.fire("firmware_update")

    assert device.calls.count("get_firmware_status") == 4
    done = _completed(events)
    assert len(done) == 1
    assert done[0].success is False
    assert done[0].error is not None and done[0].error.code == "FIRMWARE_STATUS_UNKNOWN"
    assert not controller.is_active
    assert scheduler.pending == {}
    assert reloads == []


def test_follow_up_read_catches_success_after_upload(image: Path) -> None:
    device = DeviceMock(upload_chunks=1, ota_script=(0, 0, 1))
    controller, scheduler, events, _ = _controller(device, settle_attempts=3)

    controller.start([image])
    scheduler.fire("firmware_update")

    assert _completed(events)[0].success is True
    assert "firmware_update" not in scheduler.pending
    assert controller.countdown.running


def test_unlisted_failure_code_ends_as_unknown_status(image: Path) -> None:
    # Some device builds report 2 for a failed flash.
    device = DeviceMock(upload_chunks=1, ota_script=(2,))
    controller, scheduler, events, _ = _controller(device, settle_attempts=1)

    controller.start([image])
    scheduler.fire("firmware_update")

    done = _completed(events)
    assert [d.error.code for d in done if d.error is not None] == ["FIRMWARE_STATUS_UNKNOWN"]
    assert not controller.is_active


def test_stop_cancels_follow_up_reads(image: Path) -> None:
    device = DeviceMock(upload_chunks=1, ota_script=(0,))
    controller, scheduler, events, _ = _controller(device, settle_attempts=3)
    controller.start([image])

    controller.stop()

    assert scheduler.pending == {}
    assert _completed(events) == []
