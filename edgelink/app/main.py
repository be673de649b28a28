# edgelink/app/main.py
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

# ---- Views (UI-only) ----
from .views.console_window import ConsoleWindow

# ---- App wiring ----
from .controller import AppController
from .polling_scheduler import PollingScheduler
from .upload_worker import BackgroundUpload

# ---- ViewModels ----
from ..viewmodels.settings_vm import SettingsVM
from ..viewmodels.workflow_vm import PanelState, WorkflowVM

# ---- Adapters & domain ----
from ..adapters.storage_local import StorageLocal
from ..domain.ports import UseCaseError
from ..domain.workflows import WorkflowKind
from ..utils import logging as logging_utils

logging_utils.configure_root()

DEFAULT_SETTINGS_DIR = Path.home() / ".edgelink"


class App:
    """Bootstrap: wire the console window, view models, controllers and timers."""

    def __init__(
        self,
        *,
        demo: bool = False,
        device_url: Optional[str] = None,
        settings_dir: Optional[str] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)

        # ---- Settings (persisted < environment < command line) ----
        self.storage = StorageLocal(settings_dir or str(DEFAULT_SETTINGS_DIR))
        self.settings_vm = SettingsVM(on_save=self.storage.save_user_settings)
        self._load_settings()
        self.settings_vm.apply_env()
        if device_url:
            self.settings_vm.device_url = device_url
        logging_utils.apply_gui_preferences(self.settings_vm.debug_logging)

        # ---- Window ----
        self.win = ConsoleWindow(
            on_wifi_connect=self._on_wifi_connect,
            on_wifi_disconnect=self._on_wifi_disconnect,
            on_eth_connect=self._on_eth_connect,
            on_eth_disconnect=self._on_eth_disconnect,
            on_firmware_update=self._on_firmware_update,
            on_reload=self._on_reload,
            on_close=self._on_close,
        )

        # ---- Timers, view models and controllers ----
        self.scheduler = PollingScheduler(self.win.after, self.win.after_cancel)
        self.workflow_vm = WorkflowVM(
            on_update=self._render_panel,
            on_overview=self.win.render_overview,
        )
        self.controller = AppController(
            self.settings_vm,
            self.scheduler,
            emit=self.workflow_vm.handle_event,
            on_reload=self._on_reload,
            upload_runner=BackgroundUpload(self.scheduler),
            demo=demo,
        )
        self.win.after(0, self._on_reload)

    # ------------------------------------------------------------------
    def _load_settings(self) -> None:
        try:
            payload = self.storage.load_user_settings()
            if payload:
                self.settings_vm.apply_dict(payload)
        except (OSError, ValueError) as exc:
            self._log.warning("Ignoring stored settings (%s): %s", self.storage.settings_path, exc)

    def _render_panel(self, kind: WorkflowKind, state: PanelState) -> None:
        self.win.render_panel(
            kind.value,
            status=state.status,
            banner=state.banner.value,
            busy=state.busy,
            rows=state.info_rows,
        )

    def _ready(self, kind: WorkflowKind) -> bool:
        if self.controller.ensure_ready():
            return True
        self.workflow_vm.show_error(kind, UseCaseError("NO_DEVICE_URL", "Configure the device URL first."))
        return False

    # ---- Wi-Fi ----
    def _on_wifi_connect(self) -> None:
        kind = WorkflowKind.WIFI_JOIN
        if not self._ready(kind):
            return
        self.workflow_vm.mark_started(kind)
        try:
            self.controller.wifi.start(self.win.ssid_var.get(), self.win.password_var.get())
        except UseCaseError as err:
            self.workflow_vm.show_error(kind, err)

    def _on_wifi_disconnect(self) -> None:
        kind = WorkflowKind.WIFI_JOIN
        if not self._ready(kind):
            return
        try:
            self.controller.wifi.disconnect()
        except UseCaseError as err:
            self.workflow_vm.show_error(kind, err)

    # ---- Ethernet ----
    def _on_eth_connect(self) -> None:
        kind = WorkflowKind.ETH_JOIN
        if not self._ready(kind):
            return
        self.workflow_vm.mark_started(kind)
        try:
            self.controller.ethernet.start(
                self.win.eth_mode_var.get(),
                ip=self.win.eth_ip_var.get(),
                subnet=self.win.eth_subnet_var.get(),
                gateway=self.win.eth_gateway_var.get(),
                dns=self.win.eth_dns_var.get(),
            )
        except UseCaseError as err:
            self.workflow_vm.show_error(kind, err)

    def _on_eth_disconnect(self) -> None:
        kind = WorkflowKind.ETH_JOIN
        if not self._ready(kind):
            return
        try:
            self.controller.ethernet.disconnect()
        except UseCaseError as err:
            self.workflow_vm.show_error(kind, err)

    # ---- Firmware ----
    def _on_firmware_update(self) -> None:
        kind = WorkflowKind.FIRMWARE_UPDATE
        if not self._ready(kind):
            return
        self.workflow_vm.mark_started(kind)
        try:
            self.controller.firmware.start(self.win.firmware_selection())
        except UseCaseError as err:
            self.workflow_vm.show_error(kind, err)
        except RuntimeError as err:
            self.workflow_vm.show_error(kind, UseCaseError("FIRMWARE_BUSY", str(err)))

    # ---- Lifecycle ----
    def _on_reload(self) -> None:
        """Drop all workflow state and read the device overview again."""
        self.controller.reset()
        self.workflow_vm.reset()
        if not self.controller.ensure_ready():
            self._log.info("No device URL configured; skipping overview")
            return
        result = self.controller.uc_overview()
        for part, message in result.failures.items():
            self._log.info("Overview %s unavailable: %s", part, message)
        self.workflow_vm.apply_overview(result.overview)

    def _on_close(self) -> None:
        self.controller.stop_all()
        self.scheduler.cancel_all()


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="edgelink", description="Device network and firmware console.")
    parser.add_argument("--device-url", help="Device root URL, e.g. http://192.168.0.1")
    parser.add_argument("--demo", action="store_true", help="Run against a scripted offline device.")
    parser.add_argument("--settings-dir", help="Directory holding user_settings.json.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    app = App(demo=args.demo, device_url=args.device_url, settings_dir=args.settings_dir)
    app.win.mainloop()


if __name__ == "__main__":
    main()
