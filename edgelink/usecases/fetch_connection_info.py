"""Use case for the one-shot address lookup after a successful join."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from edgelink.domain.models import ConnectionInfo
from edgelink.domain.ports import EthernetPort, UseCaseError, WifiPort
from edgelink.domain.workflows import WorkflowKind
from edgelink.usecases.error_mapping import map_api_error


@dataclass
class FetchConnectionInfo:
    """Read ``/wifiConnectInfo.json`` or ``/ethConnectInfo.json``."""

    wifi_port: WifiPort
    ethernet_port: EthernetPort

    def __call__(self, kind: WorkflowKind) -> Optional[ConnectionInfo]:
        """Return the link addressing, or ``None`` while the link is down.

        Raises:
            UseCaseError: For firmware kinds or when the request failed.
        """
        kind = WorkflowKind(kind)
        try:
            if kind is WorkflowKind.WIFI_JOIN:
                return self.wifi_port.get_wifi_info()
            if kind is WorkflowKind.ETH_JOIN:
                return self.ethernet_port.get_ethernet_info()
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="INFO_FETCH_FAILED",
                default_message="Failed to read connection info.",
            ) from exc
        raise UseCaseError("INFO_UNSUPPORTED", f"No connection info for {kind.value}.")


__all__ = ["FetchConnectionInfo"]
