from __future__ import annotations

from typing import Callable, Dict, List, Tuple

import pytest

from edgelink.adapters.device_mock import DeviceMock
from edgelink.domain.errors import DeviceReportedFailure, ValidationError
from edgelink.domain.events import StatusChanged, WorkflowCompleted
from edgelink.domain.ports import UseCaseError
from edgelink.usecases.connect_ethernet import ConnectEthernet
from edgelink.usecases.connect_wifi import ConnectWifi
from edgelink.usecases.disconnect_link import DisconnectEthernet, DisconnectWifi
from edgelink.usecases.fetch_connection_info import FetchConnectionInfo
from edgelink.usecases.poll_workflow_status import PollWorkflowStatus
from edgelink.usecases.status_poller import PollerState
from edgelink.usecases.workflow_controllers import EthernetJoinController, WifiJoinController


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


def _wifi(device: DeviceMock):
    scheduler = _ManualScheduler()
    events: List[object] = []
    controller = WifiJoinController(
        connect=ConnectWifi(device),
        disconnect=DisconnectWifi(device),
        fetch_info=FetchConnectionInfo(device, device),
        scheduler=scheduler,
        poll_status=PollWorkflowStatus(device, device, device),
        emit=events.append,
    )
    return controller, scheduler, events


def _ethernet(device: DeviceMock):
    scheduler = _ManualScheduler()
    events: List[object] = []
    controller = EthernetJoinController(
        connect=ConnectEthernet(device),
        disconnect=DisconnectEthernet(device),
        fetch_info=FetchConnectionInfo(device, device),
        scheduler=scheduler,
        poll_status=PollWorkflowStatus(device, device, device),
        emit=events.append,
    )
    return controller, scheduler, events


def _completed(events: List[object]) -> List[WorkflowCompleted]:
    return [e for e in events if isinstance(e, WorkflowCompleted)]


def _labels(events: List[object]) -> List[str]:
    return [e.label for e in events if isinstance(e, StatusChanged)]


# ---------------------------------------------------------------- Wi-Fi


def test_wifi_join_polls_until_connected_and_reports_address() -> None:
    device = DeviceMock(wifi_script=(1, 1, 3))
    controller, scheduler, events = _wifi(device)

    controller.start("home", "secret")
    assert _labels(events) == ["Connecting..."]
    assert scheduler.pending["wifi_join"][0] == 2800

    for _ in range(3):
        scheduler.fire("wifi_join")

    done = _completed(events)
    assert len(done) == 1
    assert done[0].success is True
    assert done[0].info is not None
    assert done[0].info.label == "home"
    assert controller.info == done[0].info
    assert controller.state is PollerState.IDLE
    assert scheduler.pending == {}
    assert device.calls.count("get_wifi_status") == 3


def test_wifi_validation_error_sends_nothing() -> None:
    device = DeviceMock()
    controller, scheduler, events = _wifi(device)

    with pytest.raises(ValidationError):
        controller.start("home", "")

    assert device.calls == []
    assert scheduler.pending == {}
    assert events == []
    assert not controller.is_active


def test_wifi_connect_transport_error_still_starts_polling() -> None:
    device = DeviceMock(fail_once={"connect_wifi"})
    controller, scheduler, _ = _wifi(device)

    controller.start("home", "secret")

    assert controller.is_active
    assert scheduler.is_scheduled("wifi_join")


def test_wifi_sends_truncated_ssid() -> None:
    device = DeviceMock()
    controller, _, _ = _wifi(device)

    controller.start("A" * 40, "secret")

    assert device.wifi_credentials == ("A" * 32, "secret")


def test_wifi_failure_status_completes_with_device_failure() -> None:
    device = DeviceMock(wifi_script=(1, 2))
    controller, scheduler, events = _wifi(device)
    controller.start("home", "wrong")

    scheduler.fire("wifi_join")
    scheduler.fire("wifi_join")

    done = _completed(events)[0]
    assert done.success is False
    assert done.neutral is False
    assert isinstance(done.error, DeviceReportedFailure)
    assert done.error.status_code == 2
    assert "credentials" in (done.reason or "")
    assert scheduler.pending == {}


def test_wifi_info_failure_still_reports_success() -> None:
    device = DeviceMock(wifi_script=(3,), fail_once={"get_wifi_info"})
    controller, scheduler, events = _wifi(device)
    controller.start("home", "secret")

    scheduler.fire("wifi_join")

    done = _completed(events)[0]
    assert done.success is True
    assert done.info is None


def test_wifi_disconnect_stops_polling_and_emits_neutral_completion() -> None:
    device = DeviceMock(wifi_script=(1,))
    controller, scheduler, events = _wifi(device)
    controller.start("home", "secret")

    controller.disconnect()

    assert scheduler.pending == {}
    assert "disconnect_wifi" in device.calls
    done = _completed(events)[0]
    assert done.neutral is True
    assert done.reason == "disconnected"


def test_stop_mid_flight_discards_late_reading() -> None:
    device = DeviceMock(wifi_script=(3,))
    controller, scheduler, events = _wifi(device)
    controller.start("home", "secret")
    _, callback = scheduler.pending.pop("wifi_join")

    controller.stop()
    callback()

    assert _completed(events) == []
    assert "get_wifi_status" not in device.calls


# ---------------------------------------------------------------- Ethernet


def test_ethernet_static_join_sends_headers_and_completes() -> None:
    device = DeviceMock(eth_script=(1, 3))
    controller, scheduler, events = _ethernet(device)

    request = controller.start("static", ip="10.0.0.20", subnet="255.255.255.0", gateway="10.0.0.1")
    assert request.is_static
    assert device.eth_headers["static-ip"] == "10.0.0.20"
    assert scheduler.pending["eth_join"][0] == 2000

    scheduler.fire("eth_join")
    scheduler.fire("eth_join")

    done = _completed(events)[0]
    assert done.success is True
    assert done.info is not None
    assert done.info.address == "10.0.0.20"


def test_ethernet_start_failure_surfaces_and_does_not_poll() -> None:
    device = DeviceMock(fail_once={"connect_ethernet"})
    controller, scheduler, events = _ethernet(device)

    with pytest.raises(UseCaseError) as info:
        controller.start("dhcp")

    assert info.value.code == "REQUEST_TIMEOUT"
    assert not controller.is_active
    assert scheduler.pending == {}
    assert events == []


def test_ethernet_disconnected_status_is_neutral() -> None:
    device = DeviceMock(eth_script=(1, 4))
    controller, scheduler, events = _ethernet(device)
    controller.start("dhcp")

    scheduler.fire("eth_join")
    scheduler.fire("eth_join")

    done = _completed(events)[0]
    assert done.success is False
    assert done.neutral is True
    assert done.error is None
    assert not controller.is_active


def test_ethernet_failed_status_is_error() -> None:
    device = DeviceMock(eth_script=(2,))
    controller, scheduler, events = _ethernet(device)
    controller.start("dhcp")

    scheduler.fire("eth_join")

    done = _completed(events)[0]
    assert done.neutral is False
    assert done.reason == "Failed"


def test_ethernet_disconnect_failure_keeps_polling() -> None:
    device = DeviceMock(eth_script=(1,), fail_once={"disconnect_ethernet"})
    controller, scheduler, _ = _ethernet(device)
    controller.start("dhcp")

    with pytest.raises(UseCaseError):
        controller.disconnect()

    assert controller.is_active
    assert scheduler.is_scheduled("eth_join")


def test_workflows_are_independent() -> None:
    device = DeviceMock(wifi_script=(1,), eth_script=(1,))
    wifi, wifi_scheduler, _ = _wifi(device)
    eth, eth_scheduler, _ = _ethernet(device)
    wifi.start("home", "secret")
    eth.start("dhcp")

    wifi.stop()

    assert eth.is_active
    assert eth_scheduler.is_scheduled("eth_join")
    assert wifi_scheduler.pending == {}
