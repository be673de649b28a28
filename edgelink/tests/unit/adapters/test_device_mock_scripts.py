from __future__ import annotations

from pathlib import Path

import pytest

from edgelink.adapters.api_errors import ApiTransportError
from edgelink.adapters.device_mock import DeviceMock


def test_status_script_repeats_last_value() -> None:
    device = DeviceMock(wifi_script=(1, 3))

    assert [device.get_wifi_status() for _ in range(4)] == [1, 3, 3, 3]


def test_connect_resets_script_and_records_credentials() -> None:
    device = DeviceMock(wifi_script=(1, 3))
    device.get_wifi_status()
    device.get_wifi_status()

    device.connect_wifi("home", "pw")

    assert device.get_wifi_status() == 1
    assert device.wifi_credentials == ("home", "pw")
    info = device.get_wifi_info()
    assert info is not None and info.label == "home"


def test_fail_once_raises_a_single_transport_error() -> None:
    device = DeviceMock(eth_script=(3,), fail_once={"get_ethernet_status"})

    with pytest.raises(ApiTransportError):
        device.get_ethernet_status()
    assert device.get_ethernet_status() == 3
    assert device.calls == ["get_ethernet_status", "get_ethernet_status"]


def test_upload_reports_progress_chunks(tmp_path: Path) -> None:
    device = DeviceMock(upload_chunks=3)
    progress = []

    device.upload_firmware(tmp_path / "fw.bin", lambda sent, total: progress.append((sent, total)))

    assert progress == [(1, 3), (2, 3), (3, 3)]
    assert device.uploaded == tmp_path / "fw.bin"


def test_ethernet_info_reflects_static_headers() -> None:
    device = DeviceMock()
    assert device.get_ethernet_info() is None

    device.connect_ethernet({"ip-mode": "static", "static-ip": "10.1.1.5"})
    info = device.get_ethernet_info()

    assert info is not None
    assert info.address == "10.1.1.5"
    assert info.label == "Static"
