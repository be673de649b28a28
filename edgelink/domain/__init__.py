
"""Domain package exports for workflow types and value objects."""

from .events import StatusChanged, WorkflowCompleted, WorkflowEvent
from .models import ConnectionInfo, DeviceOverview, EthernetConfig, FirmwareStatus
from .workflows import (
    EthConnectStatus,
    OtaUpdateStatus,
    Outcome,
    StatusReading,
    WifiConnectStatus,
    WorkflowKind,
    classify,
    interpret,
)

__all__ = [
    "ConnectionInfo",
    "DeviceOverview",
    "EthConnectStatus",
    "EthernetConfig",
    "FirmwareStatus",
    "OtaUpdateStatus",
    "Outcome",
    "StatusChanged",
    "StatusReading",
    "WifiConnectStatus",
    "WorkflowCompleted",
    "WorkflowEvent",
    "WorkflowKind",
    "classify",
    "interpret",
]
