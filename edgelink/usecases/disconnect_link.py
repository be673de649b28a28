"""Use cases for tearing down the Wi-Fi station link or the Ethernet link."""

from __future__ import annotations

from dataclasses import dataclass

from edgelink.domain.ports import EthernetPort, WifiPort
from edgelink.usecases.error_mapping import map_api_error


@dataclass
class DisconnectWifi:
    """Issue ``DELETE /wifiDisconnect.json``."""

    wifi_port: WifiPort

    def __call__(self) -> None:
        try:
            self.wifi_port.disconnect_wifi()
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="WIFI_DISCONNECT_FAILED",
                default_message="Failed to disconnect Wi-Fi.",
            ) from exc


@dataclass
class DisconnectEthernet:
    """Issue ``DELETE /ethDisconnect.json``."""

    ethernet_port: EthernetPort

    def __call__(self) -> None:
        try:
            self.ethernet_port.disconnect_ethernet()
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="ETH_DISCONNECT_FAILED",
                default_message="Failed to disconnect Ethernet.",
            ) from exc


__all__ = ["DisconnectEthernet", "DisconnectWifi"]
