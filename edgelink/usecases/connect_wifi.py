"""Use case for sending station credentials to the device."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from edgelink.adapters.api_errors import ApiError
from edgelink.domain.ports import WifiPort
from edgelink.domain.validation import WifiCredentials, validate_wifi_credentials

log = logging.getLogger(__name__)


@dataclass
class ConnectWifi:
    """Validate credentials and issue ``/wifiConnect.json``."""

    wifi_port: WifiPort

    def __call__(self, *, ssid: Optional[str], password: Optional[str]) -> WifiCredentials:
        """Send (possibly truncated) credentials to the device.

        An ``ApiError`` here is logged and swallowed: the device drops the
        HTTP response while it switches its radio to station mode, so polling
        is started regardless and the status endpoint decides the outcome.

        Raises:
            ValidationError: If SSID or password is empty. No request is made.
        """
        credentials = validate_wifi_credentials(ssid, password)
        try:
            self.wifi_port.connect_wifi(credentials.ssid, credentials.password)
        except ApiError as exc:
            log.warning("Wi-Fi connect request for '%s' failed: %s", credentials.ssid, exc)
        return credentials


__all__ = ["ConnectWifi"]
