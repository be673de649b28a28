"""REST adapter implementing ``WifiPort``, ``EthernetPort`` and ``FirmwarePort``.

Every call maps to exactly one device endpoint. Responses are checked for
HTTP status and JSON shape here; raw status integers are returned unchanged
and interpreted by ``edgelink.domain.workflows``.

Dependencies:
    - ``DeviceSession``/``HttpConfig`` for shared HTTP policy.
    - ``api_errors`` helpers for status-to-error conversion.

Call context:
    - Wired by ``edgelink/app/controller.py`` and invoked by use cases.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import requests

from edgelink.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiProtocolError,
    ApiServerError,
    build_error_message,
    parse_error_payload,
)
from edgelink.adapters.http_client import DeviceSession, HttpConfig, ProgressFn
from edgelink.domain.models import ConnectionInfo, EthernetConfig, FirmwareStatus
from edgelink.domain.ports import EthernetPort, FirmwarePort, WifiPort

log = logging.getLogger(__name__)

# Opaque markers the device expects as POST bodies on its status endpoints.
WIFI_STATUS_MARKER = "wifi_connect_status"
OTA_STATUS_MARKER = "ota_update_status"


class DeviceRestAdapter(WifiPort, EthernetPort, FirmwarePort):
    """HTTP/JSON transport for one device."""

    def __init__(
        self,
        base_url: str,
        *,
        request_timeout_s: Optional[float] = None,
        retries: int = 0,
    ) -> None:
        """Create adapter for the device at ``base_url``.

        Args:
            base_url: Device root URL, e.g. ``http://192.168.0.1``.
            request_timeout_s: Timeout for every request, ``None`` for none.
            retries: Retry count for transport failures.

        Raises:
            ValueError: If ``base_url`` is empty.
        """
        if not base_url or not str(base_url).strip():
            raise ValueError("DeviceRestAdapter requires a device URL")
        self.base_url = str(base_url).strip().rstrip("/")
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = DeviceSession(self.cfg)

    # ---------- WifiPort ----------

    def connect_wifi(self, ssid: str, password: str) -> None:
        # Sent as UTF-8 bytes; the device reads the raw header value.
        headers = {
            "my-connect-ssid": ssid.encode("utf-8"),
            "my-connect-pwd": password.encode("utf-8"),
        }
        resp = self.session.post(self._make_url("/wifiConnect.json"), headers=headers)
        self._ensure_ok(resp, "connect_wifi")

    def get_wifi_status(self) -> int:
        resp = self.session.post(self._make_url("/wifiConnectStatus"), data=WIFI_STATUS_MARKER)
        self._ensure_ok(resp, "get_wifi_status")
        return self._int_field(self._json_dict(resp, "get_wifi_status"), "wifi_connect_status", "get_wifi_status")

    def get_wifi_info(self) -> Optional[ConnectionInfo]:
        resp = self.session.get(self._make_url("/wifiConnectInfo.json"))
        self._ensure_ok(resp, "get_wifi_info")
        return ConnectionInfo.from_wifi_payload(self._json_dict(resp, "get_wifi_info", allow_empty=True))

    def disconnect_wifi(self) -> None:
        form = {"timestamp": str(int(time.time() * 1000))}
        resp = self.session.delete(self._make_url("/wifiDisconnect.json"), data=form)
        self._ensure_ok(resp, "disconnect_wifi")

    def get_ap_ssid(self) -> str:
        resp = self.session.get(self._make_url("/apSSID.json"))
        self._ensure_ok(resp, "get_ap_ssid")
        data = self._json_dict(resp, "get_ap_ssid", allow_empty=True)
        return str(data.get("ssid") or "")

    def get_local_time(self) -> str:
        resp = self.session.get(self._make_url("/localTime.json"))
        self._ensure_ok(resp, "get_local_time")
        # Empty until the device has synced its clock over SNTP.
        data = self._json_dict(resp, "get_local_time", allow_empty=True)
        return str(data.get("time") or "")

    # ---------- EthernetPort ----------

    def connect_ethernet(self, headers: Dict[str, str]) -> None:
        resp = self.session.post(self._make_url("/ethConnect.json"), headers=dict(headers))
        self._ensure_ok(resp, "connect_ethernet")

    def get_ethernet_status(self) -> int:
        resp = self.session.post(self._make_url("/ethConnectStatus"))
        self._ensure_ok(resp, "get_ethernet_status")
        return self._int_field(
            self._json_dict(resp, "get_ethernet_status"), "eth_connect_status", "get_ethernet_status"
        )

    def get_ethernet_info(self) -> Optional[ConnectionInfo]:
        resp = self.session.get(self._make_url("/ethConnectInfo.json"))
        self._ensure_ok(resp, "get_ethernet_info")
        return ConnectionInfo.from_eth_payload(self._json_dict(resp, "get_ethernet_info", allow_empty=True))

    def get_ethernet_config(self) -> EthernetConfig:
        resp = self.session.get(self._make_url("/ethConfig.json"))
        self._ensure_ok(resp, "get_ethernet_config")
        return EthernetConfig.from_payload(self._json_dict(resp, "get_ethernet_config", allow_empty=True))

    def disconnect_ethernet(self) -> None:
        resp = self.session.delete(self._make_url("/ethDisconnect.json"))
        self._ensure_ok(resp, "disconnect_ethernet")

    # ---------- FirmwarePort ----------

    def upload_firmware(self, path: Path, on_progress: Optional[ProgressFn] = None) -> None:
        """Upload an OTA image.

        The device answers with a binary stream that carries no status; the
        outcome is read from ``/OTAstatus`` afterwards.

        Side Effects:
            Reads the whole image into memory and streams it to the device.
        """
        path = Path(path)
        content = path.read_bytes()
        log.info("Uploading firmware %s (%d bytes)", path.name, len(content))
        resp = self.session.post_multipart(
            self._make_url("/OTAupdate"),
            field="file",
            filename=path.name,
            content=content,
            on_progress=on_progress,
        )
        self._ensure_ok(resp, "upload_firmware")

    def get_firmware_status(self) -> FirmwareStatus:
        resp = self.session.post(self._make_url("/OTAstatus"), data=OTA_STATUS_MARKER)
        self._ensure_ok(resp, "get_firmware_status")
        data = self._json_dict(resp, "get_firmware_status")
        return FirmwareStatus(
            code=self._int_field(data, "ota_update_status", "get_firmware_status"),
            compile_date=str(data.get("compile_date") or ""),
            compile_time=str(data.get("compile_time") or ""),
        )

    # ------------------------------------------------------------------
    def _make_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        """Raise typed adapter errors for non-2xx responses.

        Raises:
            ApiClientError: For HTTP 4xx responses.
            ApiServerError: For HTTP 5xx responses.
            ApiError: For all other non-2xx responses.
        """
        if 200 <= resp.status_code < 300:
            return
        status = resp.status_code
        payload = parse_error_payload(resp)
        message = build_error_message(ctx, status, payload)
        if 400 <= status < 500:
            hint = payload.strip() if isinstance(payload, str) else None
            raise ApiClientError(message, status=status, hint=hint, payload=payload, context=ctx)
        if 500 <= status < 600:
            raise ApiServerError(message, status=status, payload=payload, context=ctx)
        raise ApiError(message, status=status, payload=payload, context=ctx)

    @staticmethod
    def _json_dict(resp: requests.Response, ctx: str, *, allow_empty: bool = False) -> Dict[str, Any]:
        """Parse a JSON object body.

        Info endpoints answer with an empty body while the link is down;
        ``allow_empty`` turns that into ``{}``.

        Raises:
            ApiProtocolError: If the body is not a JSON object.
        """
        text = getattr(resp, "text", "") or ""
        if allow_empty and not text.strip():
            return {}
        try:
            data = resp.json()
        except Exception:
            raise ApiProtocolError(f"{ctx}: invalid JSON response: {text[:400]}", context=ctx)
        if not isinstance(data, dict):
            raise ApiProtocolError(f"{ctx}: expected a JSON object", payload=data, context=ctx)
        return data

    @staticmethod
    def _int_field(data: Mapping[str, Any], key: str, ctx: str) -> int:
        value = data.get(key)
        if isinstance(value, bool) or value is None:
            raise ApiProtocolError(f"{ctx}: missing integer '{key}'", payload=dict(data), context=ctx)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ApiProtocolError(f"{ctx}: '{key}' is not an integer", payload=dict(data), context=ctx)


__all__ = ["DeviceRestAdapter", "OTA_STATUS_MARKER", "WIFI_STATUS_MARKER"]
