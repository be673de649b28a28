from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..domain.events import StatusChanged, WorkflowCompleted, WorkflowEvent
from ..domain.models import ConnectionInfo, DeviceOverview
from ..domain.ports import UseCaseError
from ..domain.workflows import WorkflowKind

InfoRow = Tuple[str, str]


class Banner(Enum):
    NONE = "none"
    SUCCESS = "success"
    NEUTRAL = "neutral"
    ERROR = "error"


@dataclass(frozen=True)
class PanelState:
    """Everything one workflow panel renders."""

    status: str = ""
    banner: Banner = Banner.NONE
    busy: bool = False
    info_rows: Tuple[InfoRow, ...] = ()

    @property
    def can_start(self) -> bool:
        return not self.busy


def info_rows(info: Optional[ConnectionInfo]) -> Tuple[InfoRow, ...]:
    """Return label/value rows for a connection info block."""
    if info is None:
        return ()
    rows: List[InfoRow] = []
    if info.label:
        rows.append(("Network", info.label))
    rows.extend(
        [
            ("IP Address", info.address),
            ("Subnet Mask", info.subnet_mask),
            ("Gateway", info.gateway),
        ]
    )
    return tuple(rows)


@dataclass
class WorkflowVM:
    """Turns workflow events into per-panel display state."""

    on_update: Optional[Callable[[WorkflowKind, PanelState], None]] = None
    on_overview: Optional[Callable[[Dict[str, str]], None]] = None
    panels: Dict[WorkflowKind, PanelState] = field(
        default_factory=lambda: {kind: PanelState() for kind in WorkflowKind}
    )

    def panel(self, kind: WorkflowKind) -> PanelState:
        return self.panels[WorkflowKind(kind)]

    def reset(self) -> None:
        """Clear every panel (console reload)."""
        for kind in WorkflowKind:
            self._set(kind, PanelState())

    def mark_started(self, kind: WorkflowKind) -> None:
        self._set(kind, replace(self.panel(kind), banner=Banner.NONE, busy=True, info_rows=()))

    def show_error(self, kind: WorkflowKind, error: UseCaseError) -> None:
        """Show a rejected start (validation or request failure)."""
        self._set(kind, replace(self.panel(kind), status=error.message, banner=Banner.ERROR, busy=False))

    def handle_event(self, event: WorkflowEvent) -> None:
        if isinstance(event, StatusChanged):
            self._set(event.kind, replace(self.panel(event.kind), status=event.label))
            return
        if isinstance(event, WorkflowCompleted):
            self._set(event.kind, self._completed_state(event))
            return
        raise TypeError(f"Unsupported workflow event: {event!r}")

    def apply_overview(self, overview: DeviceOverview) -> Dict[str, str]:
        """Publish the header fields and seed panels from an overview read."""
        summary = {
            "ap_ssid": overview.ap_ssid,
            "local_time": overview.local_time,
            "firmware": overview.firmware.build_label if overview.firmware else "",
            "eth_mode": "",
        }
        if overview.ethernet is not None:
            summary["eth_mode"] = "Static" if overview.ethernet.is_static else "DHCP"
        if overview.wifi is not None:
            wifi_panel = self.panel(WorkflowKind.WIFI_JOIN)
            if not wifi_panel.busy:
                self._set(WorkflowKind.WIFI_JOIN, replace(wifi_panel, info_rows=info_rows(overview.wifi)))
        if self.on_overview:
            self.on_overview(summary)
        return summary

    # ------------------------------------------------------------------
    def _completed_state(self, event: WorkflowCompleted) -> PanelState:
        current = self.panel(event.kind)
        if event.success:
            rows = info_rows(event.info) if event.info is not None else current.info_rows
            # Firmware stays busy through the reboot countdown.
            busy = event.kind is WorkflowKind.FIRMWARE_UPDATE
            return replace(current, banner=Banner.SUCCESS, busy=busy, info_rows=rows)
        if event.neutral:
            return replace(
                current,
                status=(event.reason or "").capitalize(),
                banner=Banner.NEUTRAL,
                busy=False,
                info_rows=(),
            )
        status = event.reason or (event.error.message if event.error else "Failed")
        return replace(current, status=status, banner=Banner.ERROR, busy=False)

    def _set(self, kind: WorkflowKind, state: PanelState) -> None:
        kind = WorkflowKind(kind)
        self.panels[kind] = state
        if self.on_update:
            self.on_update(kind, state)


__all__ = ["Banner", "InfoRow", "PanelState", "WorkflowVM", "info_rows"]
