"""Value objects read from the device's info endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

ETH_MODE_DHCP = 1
ETH_MODE_STATIC = 2


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return str(value).strip() if value is not None else ""


@dataclass(frozen=True)
class ConnectionInfo:
    """Addressing of an established link.

    Attributes:
        address: IPv4 address assigned to the device.
        subnet_mask: Netmask of the link.
        gateway: Default gateway.
        label: Joined AP name for Wi-Fi, addressing mode for Ethernet.
    """

    address: str
    subnet_mask: str
    gateway: str
    label: str = ""

    @classmethod
    def from_wifi_payload(cls, payload: Mapping[str, Any]) -> Optional["ConnectionInfo"]:
        """Build from ``/wifiConnectInfo.json``; empty payload means not connected."""
        if not payload or not _text(payload, "ip"):
            return None
        return cls(
            address=_text(payload, "ip"),
            subnet_mask=_text(payload, "netmask"),
            gateway=_text(payload, "gw"),
            label=_text(payload, "ap"),
        )

    @classmethod
    def from_eth_payload(cls, payload: Mapping[str, Any]) -> Optional["ConnectionInfo"]:
        """Build from ``/ethConnectInfo.json``; empty payload means not connected."""
        if not payload or not _text(payload, "ip"):
            return None
        return cls(
            address=_text(payload, "ip"),
            subnet_mask=_text(payload, "netmask"),
            gateway=_text(payload, "gw"),
            label=_text(payload, "mode"),
        )


@dataclass(frozen=True)
class EthernetConfig:
    """Stored Ethernet addressing configuration from ``/ethConfig.json``."""

    mode: int = ETH_MODE_DHCP
    ip: str = ""
    subnet: str = ""
    gateway: str = ""
    mac: str = ""
    dns: str = ""

    @property
    def is_static(self) -> bool:
        return self.mode == ETH_MODE_STATIC

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EthernetConfig":
        try:
            mode = int(payload.get("mode", ETH_MODE_DHCP))
        except (TypeError, ValueError):
            mode = ETH_MODE_DHCP
        return cls(
            mode=mode,
            ip=_text(payload, "ip"),
            subnet=_text(payload, "subnet"),
            gateway=_text(payload, "gateway"),
            mac=_text(payload, "mac"),
            dns=_text(payload, "dns"),
        )


@dataclass(frozen=True)
class FirmwareStatus:
    """Parsed ``/OTAstatus`` response."""

    code: int
    compile_date: str = ""
    compile_time: str = ""

    @property
    def build_label(self) -> str:
        """Return the running firmware build as ``"<date> - <time>"``."""
        return f"{self.compile_date} - {self.compile_time}"


@dataclass(frozen=True)
class DeviceOverview:
    """Initial snapshot shown when the console opens or reloads."""

    ap_ssid: str = ""
    local_time: str = ""
    ethernet: Optional[EthernetConfig] = None
    firmware: Optional[FirmwareStatus] = None
    wifi: Optional[ConnectionInfo] = None


__all__ = [
    "ConnectionInfo",
    "DeviceOverview",
    "ETH_MODE_DHCP",
    "ETH_MODE_STATIC",
    "EthernetConfig",
    "FirmwareStatus",
]
