"""Use case for one status request of a workflow."""

from __future__ import annotations

from dataclasses import dataclass

from edgelink.domain.ports import EthernetPort, FirmwarePort, WifiPort
from edgelink.domain.workflows import StatusReading, WorkflowKind, interpret


@dataclass
class PollWorkflowStatus:
    """Fetch the raw status code for ``kind`` and interpret it.

    Adapter errors propagate unchanged; the status poller decides whether a
    failed request counts as "keep polling".
    """

    wifi_port: WifiPort
    ethernet_port: EthernetPort
    firmware_port: FirmwarePort

    def __call__(self, kind: WorkflowKind) -> StatusReading:
        kind = WorkflowKind(kind)
        if kind is WorkflowKind.WIFI_JOIN:
            code = self.wifi_port.get_wifi_status()
        elif kind is WorkflowKind.ETH_JOIN:
            code = self.ethernet_port.get_ethernet_status()
        else:
            code = self.firmware_port.get_firmware_status().code
        return interpret(kind, code)


__all__ = ["PollWorkflowStatus"]
