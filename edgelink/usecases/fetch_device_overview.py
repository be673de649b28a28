"""Use case for the snapshot shown when the console opens or reloads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, TypeVar

from edgelink.domain.models import DeviceOverview
from edgelink.domain.ports import EthernetPort, FirmwarePort, WifiPort
from edgelink.usecases.error_mapping import map_api_error

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DeviceOverviewResult:
    """Overview plus the parts that could not be read."""

    overview: DeviceOverview
    failures: Dict[str, str] = field(default_factory=dict)


@dataclass
class FetchDeviceOverview:
    """Read AP SSID, clock, Ethernet config, firmware build and Wi-Fi info.

    Each part is best-effort: a failing request is recorded in ``failures``
    and the remaining parts are still returned.
    """

    wifi_port: WifiPort
    ethernet_port: EthernetPort
    firmware_port: FirmwarePort

    def __call__(self) -> DeviceOverviewResult:
        failures: Dict[str, str] = {}

        def _part(name: str, fetch: Callable[[], T], default: T) -> T:
            try:
                return fetch()
            except Exception as exc:
                mapped = map_api_error(
                    exc,
                    default_code="OVERVIEW_FAILED",
                    default_message=f"Failed to read {name}.",
                )
                log.debug("Overview part %s failed: %s", name, mapped.message)
                failures[name] = mapped.message
                return default

        overview = DeviceOverview(
            ap_ssid=_part("ap_ssid", self.wifi_port.get_ap_ssid, ""),
            local_time=_part("local_time", self.wifi_port.get_local_time, ""),
            ethernet=_part("ethernet", self.ethernet_port.get_ethernet_config, None),
            firmware=_part("firmware", self.firmware_port.get_firmware_status, None),
            wifi=_part("wifi", self.wifi_port.get_wifi_info, None),
        )
        return DeviceOverviewResult(overview=overview, failures=failures)


__all__ = ["DeviceOverviewResult", "FetchDeviceOverview"]
