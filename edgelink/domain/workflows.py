"""Workflow kinds, device status codes, and the status interpreter.

The device reports connection and update progress as small integers whose
meaning depends on the endpoint that produced them. The same value means
different things for different workflows, so every raw code is converted into
a per-kind enum at the boundary and classified here; nothing past this module
branches on raw integers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional, Tuple, Type, Union


class WorkflowKind(str, Enum):
    """The three independent device workflows."""

    WIFI_JOIN = "wifi_join"
    ETH_JOIN = "eth_join"
    FIRMWARE_UPDATE = "firmware_update"


class Outcome(Enum):
    """Decision produced for one status tick."""

    CONTINUE = "continue"
    SUCCESS = "success"
    FAILURE = "failure"
    DISCONNECTED = "disconnected"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.CONTINUE


class WifiConnectStatus(IntEnum):
    """Codes returned by ``/wifiConnectStatus``."""

    NONE = 0
    CONNECTING = 1
    FAILED = 2
    CONNECTED = 3


class EthConnectStatus(IntEnum):
    """Codes returned by ``/ethConnectStatus``."""

    IDLE = 0
    CONNECTING = 1
    FAILED = 2
    CONNECTED = 3
    DISCONNECTED = 4


class OtaUpdateStatus(IntEnum):
    """Codes returned by ``/OTAstatus``.

    ``PENDING`` is informational only; the endpoint doubles as the
    "latest firmware" query.
    """

    PENDING = 0
    SUCCESSFUL = 1
    FAILED = -1


DeviceStatus = Union[WifiConnectStatus, EthConnectStatus, OtaUpdateStatus]

_STATUS_ENUMS: Dict[WorkflowKind, Type[IntEnum]] = {
    WorkflowKind.WIFI_JOIN: WifiConnectStatus,
    WorkflowKind.ETH_JOIN: EthConnectStatus,
    WorkflowKind.FIRMWARE_UPDATE: OtaUpdateStatus,
}

# Keyed per kind: IntEnum members of different kinds hash to the same int.
_TABLES: Dict[WorkflowKind, Dict[int, Tuple[Outcome, str]]] = {
    WorkflowKind.WIFI_JOIN: {
        WifiConnectStatus.NONE: (Outcome.CONTINUE, "Connecting..."),
        WifiConnectStatus.CONNECTING: (Outcome.CONTINUE, "Connecting..."),
        WifiConnectStatus.FAILED: (
            Outcome.FAILURE,
            "Failed to connect. Please check your AP credentials and compatibility.",
        ),
        WifiConnectStatus.CONNECTED: (Outcome.SUCCESS, "Connection success!"),
    },
    WorkflowKind.ETH_JOIN: {
        EthConnectStatus.IDLE: (Outcome.CONTINUE, "Idle"),
        EthConnectStatus.CONNECTING: (Outcome.CONTINUE, "Connecting..."),
        EthConnectStatus.FAILED: (Outcome.FAILURE, "Failed"),
        EthConnectStatus.CONNECTED: (Outcome.SUCCESS, "Connected"),
        EthConnectStatus.DISCONNECTED: (Outcome.DISCONNECTED, "Disconnected"),
    },
    WorkflowKind.FIRMWARE_UPDATE: {
        OtaUpdateStatus.PENDING: (Outcome.CONTINUE, "Firmware update in progress..."),
        OtaUpdateStatus.SUCCESSFUL: (Outcome.SUCCESS, "OTA firmware update complete."),
        OtaUpdateStatus.FAILED: (Outcome.FAILURE, "!!! Upload Error !!!"),
    },
}

# Shown for codes a kind does not know about.
IN_PROGRESS_LABELS: Dict[WorkflowKind, str] = {
    WorkflowKind.WIFI_JOIN: "Connecting...",
    WorkflowKind.ETH_JOIN: "Connecting...",
    WorkflowKind.FIRMWARE_UPDATE: "Firmware update in progress...",
}


@dataclass(frozen=True)
class StatusReading:
    """One decoded and classified status response."""

    kind: WorkflowKind
    code: int
    status: Optional[DeviceStatus]
    outcome: Outcome
    label: str

    @property
    def is_known(self) -> bool:
        return self.status is not None


def decode_status(kind: WorkflowKind, code: int) -> Optional[DeviceStatus]:
    """Return the kind-specific enum member for ``code`` or ``None`` if unknown."""
    enum_cls = _STATUS_ENUMS[WorkflowKind(kind)]
    try:
        return enum_cls(int(code))  # type: ignore[return-value]
    except ValueError:
        return None


def classify(kind: WorkflowKind, code: int) -> Outcome:
    """Map a raw device code to continue/success/failure/disconnected.

    Unknown codes are never treated as failures; they keep the workflow
    polling until a recognized terminal code arrives or the caller cancels.
    """
    status = decode_status(kind, code)
    if status is None:
        return Outcome.CONTINUE
    return _TABLES[WorkflowKind(kind)][status][0]


def interpret(kind: WorkflowKind, code: int) -> StatusReading:
    """Decode, classify, and label one raw status code."""
    kind = WorkflowKind(kind)
    status = decode_status(kind, code)
    if status is None:
        return StatusReading(
            kind=kind,
            code=int(code),
            status=None,
            outcome=Outcome.CONTINUE,
            label=IN_PROGRESS_LABELS[kind],
        )
    outcome, label = _TABLES[kind][status]
    return StatusReading(kind=kind, code=int(code), status=status, outcome=outcome, label=label)


__all__ = [
    "DeviceStatus",
    "EthConnectStatus",
    "IN_PROGRESS_LABELS",
    "OtaUpdateStatus",
    "Outcome",
    "StatusReading",
    "WifiConnectStatus",
    "WorkflowKind",
    "classify",
    "decode_status",
    "interpret",
]
