from __future__ import annotations

import tkinter as tk
from tkinter import filedialog, ttk
from typing import Callable, Dict, Iterable, Optional, Tuple

OnVoid = Optional[Callable[[], None]]

_BANNER_COLORS = {
    "none": "black",
    "success": "#2e7d32",
    "neutral": "#555555",
    "error": "#c62828",
}


class _StatusBlock:
    """Status line plus a small label/value table."""

    def __init__(self, parent: tk.Widget, row: int) -> None:
        self.status_var = tk.StringVar(value="")
        self.status = ttk.Label(parent, textvariable=self.status_var, wraplength=420)
        self.status.grid(row=row, column=0, columnspan=3, sticky="w", pady=(6, 0))
        self.info = ttk.Frame(parent)
        self.info.grid(row=row + 1, column=0, columnspan=3, sticky="w")

    def render(self, status: str, banner: str, rows: Iterable[Tuple[str, str]]) -> None:
        self.status_var.set(status)
        self.status.configure(foreground=_BANNER_COLORS.get(banner, "black"))
        for child in self.info.winfo_children():
            child.destroy()
        for idx, (label, value) in enumerate(rows):
            ttk.Label(self.info, text=f"{label}:").grid(row=idx, column=0, sticky="w")
            ttk.Label(self.info, text=value).grid(row=idx, column=1, sticky="w", padx=(8, 0))


class ConsoleWindow(tk.Tk):
    """Main console window (UI-only): header, Wi-Fi, Ethernet and firmware panels."""

    def __init__(
        self,
        *,
        on_wifi_connect: OnVoid = None,
        on_wifi_disconnect: OnVoid = None,
        on_eth_connect: OnVoid = None,
        on_eth_disconnect: OnVoid = None,
        on_firmware_update: OnVoid = None,
        on_reload: OnVoid = None,
        on_close: OnVoid = None,
    ) -> None:
        super().__init__()
        self.title("EdgeLink Device Console")
        self._on_close = on_close
        self.protocol("WM_DELETE_WINDOW", self._on_close_clicked)

        self.ap_ssid_var = tk.StringVar(value="")
        self.local_time_var = tk.StringVar(value="")
        self.firmware_var = tk.StringVar(value="")
        self.ssid_var = tk.StringVar(value="")
        self.password_var = tk.StringVar(value="")
        self.eth_mode_var = tk.StringVar(value="dhcp")
        self.eth_ip_var = tk.StringVar(value="")
        self.eth_subnet_var = tk.StringVar(value="")
        self.eth_gateway_var = tk.StringVar(value="")
        self.eth_dns_var = tk.StringVar(value="")
        self.firmware_path_var = tk.StringVar(value="")

        self._buttons: Dict[str, Tuple[ttk.Button, ...]] = {}
        self._blocks: Dict[str, _StatusBlock] = {}
        self._build_ui(
            on_wifi_connect,
            on_wifi_disconnect,
            on_eth_connect,
            on_eth_disconnect,
            on_firmware_update,
            on_reload,
        )

    # ------------------------------------------------------------------
    def _build_ui(
        self,
        on_wifi_connect: OnVoid,
        on_wifi_disconnect: OnVoid,
        on_eth_connect: OnVoid,
        on_eth_disconnect: OnVoid,
        on_firmware_update: OnVoid,
        on_reload: OnVoid,
    ) -> None:
        pad = dict(padx=8, pady=6)
        self.columnconfigure(0, weight=1)

        header = ttk.Frame(self)
        header.grid(row=0, column=0, sticky="ew", **pad)
        ttk.Label(header, text="AP:").grid(row=0, column=0, sticky="w")
        ttk.Label(header, textvariable=self.ap_ssid_var).grid(row=0, column=1, sticky="w", padx=(4, 16))
        ttk.Label(header, text="Time:").grid(row=0, column=2, sticky="w")
        ttk.Label(header, textvariable=self.local_time_var).grid(row=0, column=3, sticky="w", padx=(4, 16))
        ttk.Label(header, text="Firmware:").grid(row=0, column=4, sticky="w")
        ttk.Label(header, textvariable=self.firmware_var).grid(row=0, column=5, sticky="w", padx=(4, 16))
        ttk.Button(header, text="Reload", command=lambda: self._safe(on_reload)).grid(row=0, column=6)

        wifi = ttk.Labelframe(self, text="Wi-Fi")
        wifi.grid(row=1, column=0, sticky="ew", **pad)
        ttk.Label(wifi, text="SSID:").grid(row=0, column=0, sticky="w")
        ttk.Entry(wifi, textvariable=self.ssid_var, width=32).grid(row=0, column=1, sticky="w")
        ttk.Label(wifi, text="Password:").grid(row=1, column=0, sticky="w")
        ttk.Entry(wifi, textvariable=self.password_var, width=32, show="*").grid(row=1, column=1, sticky="w")
        wifi_connect = ttk.Button(wifi, text="Connect", command=lambda: self._safe(on_wifi_connect))
        wifi_connect.grid(row=0, column=2, padx=(8, 0))
        wifi_disconnect = ttk.Button(wifi, text="Disconnect", command=lambda: self._safe(on_wifi_disconnect))
        wifi_disconnect.grid(row=1, column=2, padx=(8, 0))
        self._buttons["wifi_join"] = (wifi_connect,)
        self._blocks["wifi_join"] = _StatusBlock(wifi, row=2)

        eth = ttk.Labelframe(self, text="Ethernet")
        eth.grid(row=2, column=0, sticky="ew", **pad)
        modes = ttk.Frame(eth)
        modes.grid(row=0, column=0, columnspan=3, sticky="w")
        ttk.Radiobutton(modes, text="DHCP", value="dhcp", variable=self.eth_mode_var).pack(side="left")
        ttk.Radiobutton(modes, text="Static", value="static", variable=self.eth_mode_var).pack(side="left")
        for row, (label, var) in enumerate(
            (
                ("IP:", self.eth_ip_var),
                ("Subnet:", self.eth_subnet_var),
                ("Gateway:", self.eth_gateway_var),
                ("DNS:", self.eth_dns_var),
            ),
            start=1,
        ):
            ttk.Label(eth, text=label).grid(row=row, column=0, sticky="w")
            ttk.Entry(eth, textvariable=var, width=20).grid(row=row, column=1, sticky="w")
        eth_connect = ttk.Button(eth, text="Connect", command=lambda: self._safe(on_eth_connect))
        eth_connect.grid(row=1, column=2, padx=(8, 0))
        eth_disconnect = ttk.Button(eth, text="Disconnect", command=lambda: self._safe(on_eth_disconnect))
        eth_disconnect.grid(row=2, column=2, padx=(8, 0))
        self._buttons["eth_join"] = (eth_connect,)
        self._blocks["eth_join"] = _StatusBlock(eth, row=5)

        fw = ttk.Labelframe(self, text="Firmware Update")
        fw.grid(row=3, column=0, sticky="ew", **pad)
        ttk.Entry(fw, textvariable=self.firmware_path_var, width=40).grid(row=0, column=0, sticky="w")
        ttk.Button(fw, text="Browse...", command=self._browse_firmware).grid(row=0, column=1, padx=(8, 0))
        fw_update = ttk.Button(fw, text="Update Firmware", command=lambda: self._safe(on_firmware_update))
        fw_update.grid(row=0, column=2, padx=(8, 0))
        self._buttons["firmware_update"] = (fw_update,)
        self._blocks["firmware_update"] = _StatusBlock(fw, row=1)

    # ------------------------------------------------------------------
    def render_panel(
        self,
        key: str,
        *,
        status: str,
        banner: str,
        busy: bool,
        rows: Iterable[Tuple[str, str]] = (),
    ) -> None:
        self._blocks[key].render(status, banner, rows)
        for button in self._buttons.get(key, ()):
            button.state(["disabled"] if busy else ["!disabled"])

    def render_overview(self, summary: Dict[str, str]) -> None:
        self.ap_ssid_var.set(summary.get("ap_ssid", ""))
        self.local_time_var.set(summary.get("local_time", ""))
        self.firmware_var.set(summary.get("firmware", ""))
        mode = summary.get("eth_mode", "")
        if mode:
            self.eth_mode_var.set(mode.lower())

    def firmware_selection(self) -> Tuple[str, ...]:
        path = self.firmware_path_var.get().strip()
        return (path,) if path else ()

    def _browse_firmware(self) -> None:
        path = filedialog.askopenfilename(
            parent=self,
            title="Select firmware image",
            filetypes=[("Firmware image", "*.bin"), ("All files", "*.*")],
        )
        if path:
            self.firmware_path_var.set(path)

    def _safe(self, callback: OnVoid) -> None:
        if callback:
            callback()

    def _on_close_clicked(self) -> None:
        if self._on_close:
            self._on_close()
        self.destroy()


__all__ = ["ConsoleWindow"]
