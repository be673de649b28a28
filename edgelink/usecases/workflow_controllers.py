"""Per-kind workflow controllers: trigger, poll, and completion handling.

One controller instance exists per workflow kind. Each owns its
``StatusPoller`` (and through it the single timer for that kind) and exposes
``start``/``stop``/``tick`` as the only entry points. Presentation code
receives ``StatusChanged`` and ``WorkflowCompleted`` events through the
injected sink and never sees raw device codes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from edgelink.domain.errors import DeviceReportedFailure
from edgelink.domain.events import EventSink, StatusChanged, WorkflowCompleted, discard_event
from edgelink.domain.models import ConnectionInfo
from edgelink.domain.ports import ProgressFn, SchedulerPort, UploadJob, UploadRunner, UseCaseError
from edgelink.domain.validation import EthernetRequest, WifiCredentials
from edgelink.domain.workflows import Outcome, StatusReading, WorkflowKind
from edgelink.usecases.connect_ethernet import ConnectEthernet
from edgelink.usecases.connect_wifi import ConnectWifi
from edgelink.usecases.disconnect_link import DisconnectEthernet, DisconnectWifi
from edgelink.usecases.error_mapping import map_api_error
from edgelink.usecases.fetch_connection_info import FetchConnectionInfo
from edgelink.usecases.reboot_countdown import RebootCountdown
from edgelink.usecases.status_poller import PollerState, StatusPoller
from edgelink.usecases.upload_firmware import UploadFirmware

PollFn = Callable[[WorkflowKind], StatusReading]

WIFI_POLL_INTERVAL_MS = 2800
ETH_POLL_INTERVAL_MS = 2000
DISCONNECTED_REASON = "disconnected"
REBOOT_LABEL = "OTA Firmware Update Complete. This page will close shortly, Rebooting in: {seconds}"
# Follow-up status reads after the upload response, before giving up.
SETTLE_ATTEMPTS = 5
SETTLE_INTERVAL_MS = 1000
STATUS_UNKNOWN_MESSAGE = "Firmware status unknown after upload."


def run_inline(
    job: UploadJob,
    *,
    on_progress: ProgressFn,
    on_done: Callable[[], None],
    on_error: Callable[[Exception], None],
) -> None:
    """Run an upload job on the calling thread."""
    try:
        job(on_progress)
    except Exception as exc:
        on_error(exc)
        return
    on_done()


class WorkflowController:
    """Shared completion handling for one workflow kind."""

    kind: WorkflowKind

    def __init__(
        self,
        *,
        scheduler: SchedulerPort,
        poll_status: PollFn,
        emit: Optional[EventSink] = None,
        interval_ms: Optional[int] = None,
    ) -> None:
        self._log = logging.getLogger(f"{__name__}.{self.kind.value}")
        self._emit = emit or discard_event
        self.poller = StatusPoller(
            self.kind,
            scheduler,
            poll_status,
            interval_ms=interval_ms,
            on_status=self._on_status,
            on_terminal=self._on_terminal,
            on_error=self._on_poll_error,
        )

    @property
    def state(self) -> PollerState:
        return self.poller.state

    @property
    def is_active(self) -> bool:
        return self.poller.is_active

    def stop(self) -> None:
        """Cancel polling for this kind (user navigated away or closed)."""
        self.poller.stop()

    def tick(self) -> Optional[StatusReading]:
        return self.poller.tick()

    # ------------------------------------------------------------------
    def _emit_status(self, label: str) -> None:
        self._emit(StatusChanged(kind=self.kind, label=label))

    def _on_status(self, reading: StatusReading) -> None:
        self._emit_status(reading.label)

    def _on_terminal(self, reading: StatusReading) -> None:
        self.poller.stop()
        if reading.outcome is Outcome.SUCCESS:
            self._on_success(reading)
        elif reading.outcome is Outcome.DISCONNECTED:
            self._on_disconnected(reading)
        else:
            self._on_failure(reading)

    def _on_success(self, reading: StatusReading) -> None:
        self._emit(WorkflowCompleted(kind=self.kind, success=True))

    def _on_failure(self, reading: StatusReading) -> None:
        failure = DeviceReportedFailure(self.kind, reading.code, reading.label)
        self._log.info("Device reported failure: %s", reading.label)
        self._emit(
            WorkflowCompleted(kind=self.kind, success=False, reason=reading.label, error=failure)
        )

    def _on_disconnected(self, reading: StatusReading) -> None:
        self._emit(
            WorkflowCompleted(kind=self.kind, success=False, reason=DISCONNECTED_REASON, neutral=True)
        )

    def _on_poll_error(self, exc: Exception) -> None:
        mapped = map_api_error(exc, default_code="STATUS_UNAVAILABLE", default_message="Status unavailable.")
        self._emit(
            WorkflowCompleted(kind=self.kind, success=False, reason=mapped.message, error=mapped)
        )


class _LinkController(WorkflowController):
    """Completion handling shared by the Wi-Fi and Ethernet joins."""

    def __init__(self, *, fetch_info: FetchConnectionInfo, **kwargs) -> None:
        super().__init__(**kwargs)
        self._fetch_info = fetch_info
        self.info: Optional[ConnectionInfo] = None

    def _on_success(self, reading: StatusReading) -> None:
        info: Optional[ConnectionInfo] = None
        try:
            info = self._fetch_info(self.kind)
        except UseCaseError as exc:
            self._log.warning("Connected, but reading connection info failed: %s", exc.message)
        if info is not None:
            self.info = info
        self._emit(WorkflowCompleted(kind=self.kind, success=True, info=info))


class WifiJoinController(_LinkController):
    """Join a Wi-Fi network and follow ``/wifiConnectStatus``."""

    kind = WorkflowKind.WIFI_JOIN

    def __init__(
        self,
        *,
        connect: ConnectWifi,
        disconnect: DisconnectWifi,
        fetch_info: FetchConnectionInfo,
        scheduler: SchedulerPort,
        poll_status: PollFn,
        emit: Optional[EventSink] = None,
        interval_ms: int = WIFI_POLL_INTERVAL_MS,
    ) -> None:
        super().__init__(
            fetch_info=fetch_info,
            scheduler=scheduler,
            poll_status=poll_status,
            emit=emit,
            interval_ms=interval_ms,
        )
        self._connect = connect
        self._disconnect = disconnect

    def start(self, ssid: Optional[str], password: Optional[str]) -> WifiCredentials:
        """Send credentials and start polling.

        Raises:
            ValidationError: Empty SSID or password; nothing is sent or started.
        """
        credentials = self._connect(ssid=ssid, password=password)
        self._emit_status("Connecting...")
        self.poller.start()
        return credentials

    def disconnect(self) -> None:
        """Stop polling and ask the device to leave the network.

        Raises:
            UseCaseError: If the disconnect request failed.
        """
        self.poller.stop()
        self._disconnect()
        self.info = None
        self._emit(
            WorkflowCompleted(kind=self.kind, success=False, reason=DISCONNECTED_REASON, neutral=True)
        )


class EthernetJoinController(_LinkController):
    """Apply Ethernet addressing and follow ``/ethConnectStatus``."""

    kind = WorkflowKind.ETH_JOIN

    def __init__(
        self,
        *,
        connect: ConnectEthernet,
        disconnect: DisconnectEthernet,
        fetch_info: FetchConnectionInfo,
        scheduler: SchedulerPort,
        poll_status: PollFn,
        emit: Optional[EventSink] = None,
        interval_ms: int = ETH_POLL_INTERVAL_MS,
    ) -> None:
        super().__init__(
            fetch_info=fetch_info,
            scheduler=scheduler,
            poll_status=poll_status,
            emit=emit,
            interval_ms=interval_ms,
        )
        self._connect = connect
        self._disconnect = disconnect

    def start(
        self,
        mode: Optional[str],
        *,
        ip: str = "",
        subnet: str = "",
        gateway: str = "",
        dns: str = "",
    ) -> EthernetRequest:
        """Send the addressing request and start polling once it is accepted.

        Raises:
            ValidationError: Malformed static addressing; nothing is sent.
            UseCaseError: The request failed; polling is not started.
        """
        request = self._connect(mode=mode, ip=ip, subnet=subnet, gateway=gateway, dns=dns)
        self._emit_status("Connecting...")
        self.poller.start()
        return request

    def disconnect(self) -> None:
        """Ask the device to drop the link, then stop polling.

        Raises:
            UseCaseError: If the request failed; polling state is unchanged.
        """
        self._disconnect()
        self.poller.stop()
        self.info = None
        self._emit(
            WorkflowCompleted(kind=self.kind, success=False, reason=DISCONNECTED_REASON, neutral=True)
        )


class FirmwareUpdateController(WorkflowController):
    """Upload an OTA image and poll ``/OTAstatus`` on upload progress.

    There is no polling interval for this kind: every progress event reported
    by the upload transport triggers one status tick. Once the upload
    finishes, status is read strictly right away and then up to
    ``settle_attempts`` more times, ``settle_interval_ms`` apart, on the
    poller's own timer key. If none of those reads is terminal the workflow
    fails with ``FIRMWARE_STATUS_UNKNOWN``. Success hands over to the reboot
    countdown.
    """

    kind = WorkflowKind.FIRMWARE_UPDATE

    def __init__(
        self,
        *,
        upload: UploadFirmware,
        scheduler: SchedulerPort,
        poll_status: PollFn,
        on_reload: Callable[[], None],
        emit: Optional[EventSink] = None,
        runner: UploadRunner = run_inline,
        countdown_start: int = 10,
        countdown_tick_ms: int = 1000,
        settle_attempts: int = SETTLE_ATTEMPTS,
        settle_interval_ms: int = SETTLE_INTERVAL_MS,
    ) -> None:
        super().__init__(scheduler=scheduler, poll_status=poll_status, emit=emit, interval_ms=None)
        self._scheduler = scheduler
        self._upload = upload
        self._runner = runner
        self.settle_attempts = settle_attempts
        self.settle_interval_ms = settle_interval_ms
        self._upload_generation: Optional[int] = None
        self.countdown = RebootCountdown(
            scheduler,
            on_tick=lambda seconds: self._emit_status(REBOOT_LABEL.format(seconds=seconds)),
            on_reload=on_reload,
            start_at=countdown_start,
            tick_ms=countdown_tick_ms,
        )

    def start(self, paths: Sequence[str | Path]) -> Path:
        """Validate the selection, start the upload, and begin listening.

        Raises:
            ValidationError: Unless exactly one existing file is selected.
            UseCaseError: While a previous update is counting down to reboot.
        """
        path = self._upload.validate(paths)
        if self.countdown.running:
            raise UseCaseError("FIRMWARE_REBOOTING", "Device is rebooting into new firmware.")
        self.poller.start()
        generation = self.poller.generation
        self._upload_generation = generation
        self._emit_status(f"Uploading {path.name}, Firmware Update in Progress...")
        self._runner(
            lambda progress: self._upload(path, progress),
            on_progress=lambda sent, total: self._on_upload_progress(generation, sent, total),
            on_done=lambda: self._on_upload_done(generation),
            on_error=lambda exc: self._on_upload_error(generation, exc),
        )
        return path

    # ------------------------------------------------------------------
    def _owns(self, generation: int) -> bool:
        return self.poller.is_active and self._upload_generation == generation

    def _on_upload_progress(self, generation: int, sent: int, total: int) -> None:
        if not self._owns(generation):
            return
        self._log.debug("Upload progress %d/%d", sent, total)
        self.poller.tick()

    def _on_upload_done(self, generation: int) -> None:
        self._settle(generation, self.settle_attempts)

    def _settle(self, generation: int, remaining: int) -> None:
        if not self._owns(generation):
            return
        self.poller.tick(strict=True)
        if not self._owns(generation):
            return
        if remaining > 0:
            # Shares the poller key so stop() and restarts cancel it.
            self._scheduler.schedule(
                self.poller.key,
                self.settle_interval_ms,
                lambda: self._settle(generation, remaining - 1),
            )
            return
        self.poller.stop()
        error = UseCaseError("FIRMWARE_STATUS_UNKNOWN", STATUS_UNKNOWN_MESSAGE)
        self._log.warning("No terminal OTA status after upload; giving up")
        self._emit(
            WorkflowCompleted(kind=self.kind, success=False, reason=error.message, error=error)
        )

    def _on_upload_error(self, generation: int, exc: Exception) -> None:
        if not self._owns(generation):
            return
        self.poller.stop()
        mapped = map_api_error(exc, default_code="FIRMWARE_UPLOAD_FAILED", default_message=str(exc))
        self._log.warning("Firmware upload failed: %s", mapped.message)
        self._emit(
            WorkflowCompleted(kind=self.kind, success=False, reason=mapped.message, error=mapped)
        )

    def _on_success(self, reading: StatusReading) -> None:
        self._emit(WorkflowCompleted(kind=self.kind, success=True))
        self.countdown.start()


__all__ = [
    "ETH_POLL_INTERVAL_MS",
    "EthernetJoinController",
    "FirmwareUpdateController",
    "SETTLE_ATTEMPTS",
    "SETTLE_INTERVAL_MS",
    "WIFI_POLL_INTERVAL_MS",
    "WifiJoinController",
    "WorkflowController",
    "run_inline",
]
