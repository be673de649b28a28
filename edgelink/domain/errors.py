"""Domain-level error types for use-case and adapter mapping.

Transport and protocol failures live in ``edgelink.adapters.api_errors``;
the types here never carry transport details.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from .ports import UseCaseError
from .workflows import WorkflowKind


class ValidationError(UseCaseError):
    """User input rejected before any request is made.

    ``problems`` holds one human-readable line per rejected field so the
    presentation layer can render them as a list.
    """

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems: Tuple[str, ...] = tuple(problems)
        super().__init__("INVALID_INPUT", " ".join(self.problems) or "Invalid input.")


class DeviceReportedFailure(UseCaseError):
    """The device answered with a recognized terminal-failure status."""

    def __init__(self, kind: WorkflowKind, code: int, label: str) -> None:
        super().__init__("DEVICE_FAILURE", label, meta={"kind": kind.value, "code": code})
        self.kind = kind
        self.status_code = code


__all__ = ["DeviceReportedFailure", "ValidationError"]
