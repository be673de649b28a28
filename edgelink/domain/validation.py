"""Pure validation helpers for workflow trigger inputs.

Nothing here performs I/O. Each ``validate_*`` function either returns the
normalized request ready to be sent or raises ``ValidationError`` with one
problem line per rejected field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .errors import ValidationError

MAX_SSID_BYTES = 32
MAX_PASSWORD_BYTES = 64

ETH_IP_MODE_DHCP = "dhcp"
ETH_IP_MODE_STATIC = "static"

_IPV4_PATTERN = re.compile(r"([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})")


def is_ipv4(value: Optional[str]) -> bool:
    """Return whether ``value`` is a dotted-quad IPv4 literal (octets 0-255)."""
    if not isinstance(value, str):
        return False
    match = _IPV4_PATTERN.fullmatch(value.strip())
    if not match:
        return False
    return all(int(octet) <= 255 for octet in match.groups())


def truncate_utf8(value: str, max_bytes: int) -> str:
    """Cut ``value`` to at most ``max_bytes`` UTF-8 bytes without splitting a character."""
    encoded = value.encode("utf-8")
    if len(encoded) <= max_bytes:
        return value
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


@dataclass(frozen=True)
class WifiCredentials:
    """Station credentials as they will be sent to the device."""

    ssid: str
    password: str


@dataclass(frozen=True)
class EthernetRequest:
    """Ethernet addressing request.

    Attributes:
        mode: ``"dhcp"`` or ``"static"``.
        ip, subnet, gateway: Required for static mode.
        dns: Optional static DNS server; the device falls back to its own
            default when omitted.
    """

    mode: str = ETH_IP_MODE_DHCP
    ip: str = ""
    subnet: str = ""
    gateway: str = ""
    dns: str = ""

    @property
    def is_static(self) -> bool:
        return self.mode == ETH_IP_MODE_STATIC

    def to_headers(self) -> Dict[str, str]:
        """Return the header set ``/ethConnect.json`` expects."""
        headers = {"ip-mode": self.mode}
        if self.is_static:
            headers["static-ip"] = self.ip
            headers["static-subnet"] = self.subnet
            headers["static-gateway"] = self.gateway
            if self.dns:
                headers["static-dns"] = self.dns
        return headers


def validate_wifi_credentials(ssid: Optional[str], password: Optional[str]) -> WifiCredentials:
    """Check SSID/password and truncate them to the device limits.

    Raises:
        ValidationError: If either value is empty.
    """
    ssid_text = ssid or ""
    password_text = password or ""
    problems: List[str] = []
    if not ssid_text:
        problems.append("SSID cannot be empty.")
    if not password_text:
        problems.append("Password cannot be empty.")
    if problems:
        raise ValidationError(problems)
    return WifiCredentials(
        ssid=truncate_utf8(ssid_text, MAX_SSID_BYTES),
        password=truncate_utf8(password_text, MAX_PASSWORD_BYTES),
    )


def validate_ethernet_request(
    mode: Optional[str],
    *,
    ip: str = "",
    subnet: str = "",
    gateway: str = "",
    dns: str = "",
) -> EthernetRequest:
    """Validate an Ethernet addressing request.

    DHCP needs nothing else. Static mode requires address, subnet and gateway
    to be IPv4 literals; a DNS server is checked only when supplied.

    Raises:
        ValidationError: On an unknown mode or any malformed address.
    """
    normalized = str(mode or ETH_IP_MODE_DHCP).strip().lower()
    if normalized not in (ETH_IP_MODE_DHCP, ETH_IP_MODE_STATIC):
        raise ValidationError([f"Unknown IP mode '{mode}'."])
    if normalized == ETH_IP_MODE_DHCP:
        return EthernetRequest(mode=ETH_IP_MODE_DHCP)

    fields = (
        ("IP address", (ip or "").strip()),
        ("Subnet mask", (subnet or "").strip()),
        ("Gateway", (gateway or "").strip()),
    )
    problems = [f"{name} '{value}' is not a valid IPv4 address." for name, value in fields if not is_ipv4(value)]
    dns_text = (dns or "").strip()
    if dns_text and not is_ipv4(dns_text):
        problems.append(f"DNS server '{dns_text}' is not a valid IPv4 address.")
    if problems:
        raise ValidationError(problems)
    return EthernetRequest(
        mode=ETH_IP_MODE_STATIC,
        ip=fields[0][1],
        subnet=fields[1][1],
        gateway=fields[2][1],
        dns=dns_text,
    )


def validate_firmware_selection(paths: Sequence[str | Path]) -> Path:
    """Require exactly one existing firmware file; content stays opaque.

    Raises:
        ValidationError: If zero or several files are selected, or the single
            selection is missing or a directory.
    """
    selected = [p for p in (paths or ()) if str(p).strip()]
    if len(selected) != 1:
        raise ValidationError(["Select a file first."])
    path = Path(selected[0]).expanduser()
    if not path.exists():
        raise ValidationError([f"Firmware file not found: {path}"])
    if path.is_dir():
        raise ValidationError([f"Firmware path is a directory: {path}"])
    return path


__all__ = [
    "ETH_IP_MODE_DHCP",
    "ETH_IP_MODE_STATIC",
    "EthernetRequest",
    "MAX_PASSWORD_BYTES",
    "MAX_SSID_BYTES",
    "WifiCredentials",
    "is_ipv4",
    "truncate_utf8",
    "validate_ethernet_request",
    "validate_firmware_selection",
    "validate_wifi_credentials",
]
