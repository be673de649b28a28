from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from edgelink.adapters.api_errors import ApiTransportError
from edgelink.adapters.http_client import ProgressFn
from edgelink.domain.models import ConnectionInfo, EthernetConfig, FirmwareStatus
from edgelink.domain.ports import EthernetPort, FirmwarePort, WifiPort


class _Script:
    """Replays a status sequence, repeating the last value once exhausted."""

    def __init__(self, codes: Sequence[int]) -> None:
        self._codes: Tuple[int, ...] = tuple(codes) or (0,)
        self._index = 0

    def reset(self) -> None:
        self._index = 0

    def next(self) -> int:
        code = self._codes[min(self._index, len(self._codes) - 1)]
        self._index += 1
        return code


@dataclass
class DeviceMock(WifiPort, EthernetPort, FirmwarePort):
    """Offline substitute for ``DeviceRestAdapter`` with scripted responses.

    ``fail_once`` names operations whose next call raises ``ApiTransportError``,
    mimicking a device that briefly drops off the network.
    """

    wifi_script: Sequence[int] = (1, 1, 3)
    eth_script: Sequence[int] = (1, 3)
    ota_script: Sequence[int] = (0, 1)
    upload_chunks: int = 4
    ap_ssid: str = "ESP32_AP"
    local_time: str = ""
    fail_once: Set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.calls: List[str] = []
        self.wifi_credentials: Optional[Tuple[str, str]] = None
        self.eth_headers: Dict[str, str] = {}
        self.uploaded: Optional[Path] = None
        self._wifi = _Script(self.wifi_script)
        self._eth = _Script(self.eth_script)
        self._ota = _Script(self.ota_script)
        self._eth_config = EthernetConfig(mac="24:0a:c4:00:00:01")

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_once:
            self.fail_once.discard(name)
            raise ApiTransportError(f"Could not reach device: {name}", context=name)

    # ---------- WifiPort ----------

    def connect_wifi(self, ssid: str, password: str) -> None:
        self._record("connect_wifi")
        self.wifi_credentials = (ssid, password)
        self._wifi.reset()

    def get_wifi_status(self) -> int:
        self._record("get_wifi_status")
        return self._wifi.next()

    def get_wifi_info(self) -> Optional[ConnectionInfo]:
        self._record("get_wifi_info")
        if self.wifi_credentials is None:
            return None
        return ConnectionInfo(
            address="192.168.1.50",
            subnet_mask="255.255.255.0",
            gateway="192.168.1.1",
            label=self.wifi_credentials[0],
        )

    def disconnect_wifi(self) -> None:
        self._record("disconnect_wifi")
        self.wifi_credentials = None

    def get_ap_ssid(self) -> str:
        self._record("get_ap_ssid")
        return self.ap_ssid

    def get_local_time(self) -> str:
        self._record("get_local_time")
        return self.local_time

    # ---------- EthernetPort ----------

    def connect_ethernet(self, headers: Dict[str, str]) -> None:
        self._record("connect_ethernet")
        self.eth_headers = dict(headers)
        self._eth.reset()

    def get_ethernet_status(self) -> int:
        self._record("get_ethernet_status")
        return self._eth.next()

    def get_ethernet_info(self) -> Optional[ConnectionInfo]:
        self._record("get_ethernet_info")
        if not self.eth_headers:
            return None
        static = self.eth_headers.get("ip-mode") == "static"
        return ConnectionInfo(
            address=self.eth_headers.get("static-ip", "10.0.0.20"),
            subnet_mask=self.eth_headers.get("static-subnet", "255.255.255.0"),
            gateway=self.eth_headers.get("static-gateway", "10.0.0.1"),
            label="Static" if static else "DHCP",
        )

    def get_ethernet_config(self) -> EthernetConfig:
        self._record("get_ethernet_config")
        return self._eth_config

    def disconnect_ethernet(self) -> None:
        self._record("disconnect_ethernet")
        self.eth_headers = {}

    # ---------- FirmwarePort ----------

    def upload_firmware(self, path: Path, on_progress: Optional[ProgressFn] = None) -> None:
        self._record("upload_firmware")
        self.uploaded = Path(path)
        self._ota.reset()
        total = max(1, self.upload_chunks)
        for sent in range(1, total + 1):
            if on_progress is not None:
                on_progress(sent, total)

    def get_firmware_status(self) -> FirmwareStatus:
        self._record("get_firmware_status")
        return FirmwareStatus(code=self._ota.next(), compile_date="Jul  6 2024", compile_time="12:00:00")


__all__ = ["DeviceMock"]
