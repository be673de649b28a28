"""Adapter, use-case and workflow wiring for the console runtime.

This module owns lazy construction of the device adapter, the use cases built
on it, and the three workflow controllers. Everything depends on values in
:class:`edgelink.viewmodels.settings_vm.SettingsVM` and on the scheduler the
app layer provides.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from ..adapters.device_mock import DeviceMock
from ..adapters.device_rest import DeviceRestAdapter
from ..domain.events import EventSink, discard_event
from ..domain.ports import SchedulerPort, UploadRunner
from ..usecases.connect_ethernet import ConnectEthernet
from ..usecases.connect_wifi import ConnectWifi
from ..usecases.disconnect_link import DisconnectEthernet, DisconnectWifi
from ..usecases.fetch_connection_info import FetchConnectionInfo
from ..usecases.fetch_device_overview import FetchDeviceOverview
from ..usecases.poll_workflow_status import PollWorkflowStatus
from ..usecases.upload_firmware import UploadFirmware
from ..usecases.workflow_controllers import (
    EthernetJoinController,
    FirmwareUpdateController,
    WifiJoinController,
    run_inline,
)
from ..viewmodels.settings_vm import SettingsVM

log = logging.getLogger(__name__)

DeviceAdapter = Union[DeviceRestAdapter, DeviceMock]


class AppController:
    """Create and cache runtime adapters, use cases and workflow controllers.

    Call chain:
        ``edgelink.app.main.App`` creates one instance, hands it the event sink
        and reload action, then calls ``ensure_ready`` before any device
        operation. ``reset`` drops everything so a changed device URL takes
        effect on the next ``ensure_ready``.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        scheduler: SchedulerPort,
        *,
        emit: Optional[EventSink] = None,
        on_reload: Optional[Callable[[], None]] = None,
        upload_runner: Optional[UploadRunner] = None,
        demo: bool = False,
    ) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings_vm: Settings holding the device URL, timeouts and
                polling intervals.
            scheduler: Keyed timer service shared by all workflows.
            emit: Sink for workflow events.
            on_reload: Action run when the post-update countdown reaches zero.
            upload_runner: Executes firmware uploads; inline by default.
            demo: Use the scripted ``DeviceMock`` instead of HTTP.
        """
        self.settings_vm = settings_vm
        self.scheduler = scheduler
        self.emit = emit or discard_event
        self.on_reload = on_reload or (lambda: None)
        self.upload_runner = upload_runner or run_inline
        self.demo = demo
        self._device: Optional[DeviceAdapter] = None
        self.uc_poll: Optional[PollWorkflowStatus] = None
        self.uc_overview: Optional[FetchDeviceOverview] = None
        self.uc_info: Optional[FetchConnectionInfo] = None
        self.wifi: Optional[WifiJoinController] = None
        self.ethernet: Optional[EthernetJoinController] = None
        self.firmware: Optional[FirmwareUpdateController] = None

    @property
    def device_adapter(self) -> Optional[DeviceAdapter]:
        """Return the cached adapter used for every device request."""
        return self._device

    def reset(self) -> None:
        """Stop all workflows and drop cached objects."""
        self.stop_all()
        self._device = None
        self.uc_poll = None
        self.uc_overview = None
        self.uc_info = None
        self.wifi = None
        self.ethernet = None
        self.firmware = None

    def ensure_ready(self) -> bool:
        """Ensure adapters, use cases and controllers are available.

        Returns:
            ``True`` when dependencies are available, ``False`` when no device
            URL is configured.
        """
        if self._device is not None and self.wifi and self.ethernet and self.firmware:
            return True

        if self.demo:
            self._device = DeviceMock(local_time="12:00:00")
        else:
            base_url = (self.settings_vm.device_url or "").strip()
            if not base_url:
                return False
            self._device = DeviceRestAdapter(
                base_url,
                request_timeout_s=self.settings_vm.request_timeout_s,
            )
        log.debug("Device adapter ready: %s", type(self._device).__name__)

        device = self._device
        config = self.settings_vm.config
        self.uc_poll = PollWorkflowStatus(device, device, device)
        self.uc_overview = FetchDeviceOverview(device, device, device)
        self.uc_info = FetchConnectionInfo(device, device)

        self.wifi = WifiJoinController(
            connect=ConnectWifi(device),
            disconnect=DisconnectWifi(device),
            fetch_info=self.uc_info,
            scheduler=self.scheduler,
            poll_status=self.uc_poll,
            emit=self.emit,
            interval_ms=config.wifi_poll_interval_ms,
        )
        self.ethernet = EthernetJoinController(
            connect=ConnectEthernet(device),
            disconnect=DisconnectEthernet(device),
            fetch_info=self.uc_info,
            scheduler=self.scheduler,
            poll_status=self.uc_poll,
            emit=self.emit,
            interval_ms=config.eth_poll_interval_ms,
        )
        self.firmware = FirmwareUpdateController(
            upload=UploadFirmware(device),
            scheduler=self.scheduler,
            poll_status=self.uc_poll,
            on_reload=self.on_reload,
            emit=self.emit,
            runner=self.upload_runner,
            countdown_start=config.reboot_countdown_s,
            countdown_tick_ms=config.reboot_tick_ms,
        )
        return True

    def stop_all(self) -> None:
        """Stop every polling workflow (window close or settings change)."""
        for controller in (self.wifi, self.ethernet, self.firmware):
            if controller is not None:
                controller.stop()


__all__ = ["AppController"]
