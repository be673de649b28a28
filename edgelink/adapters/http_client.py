"""Shared HTTP transport utilities for the device REST adapter.

This module provides a thin wrapper around ``requests.Session`` so adapter
methods share one timeout policy and one mapping of transport failures onto
``ApiTransportError``.

Dependencies:
    - ``requests`` for network I/O.
    - ``urllib3`` for multipart body encoding of firmware uploads.

Call context:
    - Constructed by ``edgelink/adapters/device_rest.py``.
    - Used only inside adapter layer methods; use cases interact through ports.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

import requests
from requests import exceptions as req_exc
from urllib3 import encode_multipart_formdata

from edgelink.adapters.api_errors import ApiTransportError

ProgressFn = Callable[[int, int], None]
HeaderValue = Union[str, bytes]


@dataclass
class HttpConfig:
    """Timeout and retry configuration for device HTTP calls.

    Attributes:
        request_timeout_s: Timeout in seconds, ``None`` waits indefinitely.
            The device answers with unpredictable latency while switching
            radios, so no timeout is the default.
        retries: Number of retry attempts after the initial request.
    """
    request_timeout_s: Optional[float] = None
    retries: int = 0


class ProgressBody(io.BytesIO):
    """In-memory request body that reports every chunk the transport reads."""

    def __init__(self, payload: bytes, on_progress: Optional[ProgressFn] = None) -> None:
        super().__init__(payload)
        self.total = len(payload)
        self.sent = 0
        self._on_progress = on_progress

    def read(self, size: Optional[int] = -1) -> bytes:
        chunk = super().read(size)
        if chunk:
            self.sent += len(chunk)
            if self._on_progress is not None:
                self._on_progress(self.sent, self.total)
        return chunk

    def rewind(self) -> None:
        self.seek(0)
        self.sent = 0


class DeviceSession:
    """Shared requests wrapper for device endpoints.

    This class is intentionally transport-only. Callers provide endpoint URLs
    and decide how to map non-2xx responses into adapter errors.
    """

    def __init__(self, cfg: HttpConfig) -> None:
        """Create a session.

        Args:
            cfg: Shared timeout and retry settings.

        Side Effects:
            Creates a persistent ``requests.Session`` object.
        """
        self.session = requests.Session()
        self.cfg = cfg

    @staticmethod
    def _headers(
        accept: str = "application/json", extra: Optional[Dict[str, HeaderValue]] = None
    ) -> Dict[str, HeaderValue]:
        headers: Dict[str, HeaderValue] = {"Accept": accept, "Cache-Control": "no-cache"}
        if extra:
            headers.update(extra)
        return headers

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send one request with retries on timeout/connectivity failures.

        Raises:
            ApiTransportError: If all attempts fail at the transport level.
        """
        context = f"{method} {url}"
        last_err: ApiTransportError | None = None
        attempts = self.cfg.retries + 1
        body = kwargs.get("data")
        for _ in range(attempts):
            if isinstance(body, ProgressBody):
                # Each attempt must send the full payload from the beginning.
                body.rewind()
            try:
                return self.session.request(
                    method,
                    url,
                    timeout=self.cfg.request_timeout_s,
                    **kwargs,
                )
            except (req_exc.Timeout, req_exc.ConnectionError, req_exc.ChunkedEncodingError) as exc:
                last_err = ApiTransportError(
                    f"Could not reach device at {url}: {exc}", context=context
                )
        raise last_err

    def get(self, url: str, *, accept: str = "application/json") -> requests.Response:
        """Send a GET request."""
        return self._send("GET", url, headers=self._headers(accept=accept))

    def post(
        self,
        url: str,
        *,
        data: Any = None,
        headers: Optional[Dict[str, HeaderValue]] = None,
    ) -> requests.Response:
        """Send a POST request with an opaque text body and optional headers.

        Args:
            url: Absolute endpoint URL.
            data: Body passed straight to ``requests`` (marker text or form).
            headers: Extra headers, used by the device for connect parameters.
                ``bytes`` values go out unchanged, which is how non-ASCII
                credentials reach the device.
        """
        return self._send("POST", url, data=data, headers=self._headers(extra=headers))

    def delete(self, url: str, *, data: Any = None) -> requests.Response:
        """Send a DELETE request with an optional form body."""
        return self._send("DELETE", url, data=data, headers=self._headers())

    def post_multipart(
        self,
        url: str,
        *,
        field: str,
        filename: str,
        content: bytes,
        on_progress: Optional[ProgressFn] = None,
    ) -> requests.Response:
        """Upload one file as ``multipart/form-data`` reporting send progress.

        The body is encoded up front and wrapped in ``ProgressBody`` so the
        transport streams it with a known ``Content-Length`` and every chunk
        read triggers ``on_progress(sent, total)``.
        """
        payload, content_type = encode_multipart_formdata(
            {field: (filename, content, "application/octet-stream")}
        )
        body = ProgressBody(payload, on_progress)
        headers = self._headers(accept="*/*", extra={"Content-Type": content_type})
        return self._send("POST", url, data=body, headers=headers)


__all__ = ["DeviceSession", "HttpConfig", "ProgressBody"]
