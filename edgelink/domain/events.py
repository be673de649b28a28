"""Events emitted by workflow controllers to the presentation layer.

The presentation layer only ever sees these two shapes; it never needs to
know raw device codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from .models import ConnectionInfo
from .ports import UseCaseError
from .workflows import WorkflowKind


@dataclass(frozen=True)
class StatusChanged:
    """A new human-readable status label for a workflow."""

    kind: WorkflowKind
    label: str


@dataclass(frozen=True)
class WorkflowCompleted:
    """Terminal notification for one workflow run.

    ``neutral`` marks a non-error stop (Ethernet disconnect) that callers may
    render differently from a failure. ``error`` carries the typed cause of a
    failed run (``DeviceReportedFailure`` or a mapped transport error).
    """

    kind: WorkflowKind
    success: bool
    info: Optional[ConnectionInfo] = None
    reason: Optional[str] = None
    neutral: bool = False
    error: Optional[UseCaseError] = None


WorkflowEvent = Union[StatusChanged, WorkflowCompleted]
EventSink = Callable[[WorkflowEvent], None]


def discard_event(_: WorkflowEvent) -> None:
    """Default sink used when no presenter is attached."""


__all__ = [
    "EventSink",
    "StatusChanged",
    "WorkflowCompleted",
    "WorkflowEvent",
    "discard_event",
]
