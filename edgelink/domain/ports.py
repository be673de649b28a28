from __future__ import annotations
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol

from .models import ConnectionInfo, EthernetConfig, FirmwareStatus

ProgressFn = Callable[[int, int], None]  # (bytes_sent, bytes_total)


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, meta: Optional[Dict] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta


# ---- Ports (Hexagonal boundaries) ----
class WifiPort(Protocol):
    """Station-mode Wi-Fi operations on the device."""

    def connect_wifi(self, ssid: str, password: str) -> None: ...
    def get_wifi_status(self) -> int: ...  # raw wifi_connect_status
    def get_wifi_info(self) -> Optional[ConnectionInfo]: ...
    def disconnect_wifi(self) -> None: ...
    def get_ap_ssid(self) -> str: ...
    def get_local_time(self) -> str: ...


class EthernetPort(Protocol):
    """Wired interface operations on the device."""

    def connect_ethernet(self, headers: Dict[str, str]) -> None: ...
    def get_ethernet_status(self) -> int: ...  # raw eth_connect_status
    def get_ethernet_info(self) -> Optional[ConnectionInfo]: ...
    def get_ethernet_config(self) -> EthernetConfig: ...
    def disconnect_ethernet(self) -> None: ...


class FirmwarePort(Protocol):
    """OTA firmware upload and status."""

    def upload_firmware(self, path: Path, on_progress: Optional[ProgressFn] = None) -> None: ...
    def get_firmware_status(self) -> FirmwareStatus: ...


class SchedulerPort(Protocol):
    """Keyed, cancellable one-shot timers (one pending timer per key)."""

    def schedule(self, key: str, delay_ms: int, callback: Callable[[], None]) -> None: ...
    def cancel(self, key: str) -> None: ...
    def is_scheduled(self, key: str) -> bool: ...


UploadJob = Callable[[ProgressFn], None]


class UploadRunner(Protocol):
    """Runs an upload job and reports its progress/completion/failure.

    Implementations must invoke the callbacks on the thread that owns the
    workflow controllers.
    """

    def __call__(
        self,
        job: UploadJob,
        *,
        on_progress: ProgressFn,
        on_done: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> None: ...
