from __future__ import annotations

from edgelink.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiProtocolError,
    ApiServerError,
    ApiTransportError,
)
from edgelink.domain.ports import UseCaseError
from edgelink.usecases.error_mapping import map_api_error


def test_transport_error_keeps_adapter_text() -> None:
    err = map_api_error(
        ApiTransportError("Could not reach device at http://192.168.0.1/ethConnect.json"),
        default_code="X",
    )

    assert err.code == "REQUEST_TIMEOUT"
    assert "http://192.168.0.1/ethConnect.json" in err.message


def test_client_error_uses_hint() -> None:
    err = map_api_error(
        ApiClientError("ctx: HTTP 400", status=400, hint="missing ip-mode"),
        default_code="X",
    )

    assert err.code == "REQUEST_FAILED"
    assert err.message == "Request failed (HTTP 400): missing ip-mode"


def test_server_protocol_and_generic_api_errors() -> None:
    assert map_api_error(ApiServerError("boom", status=500), default_code="X").code == "SERVER_ERROR"
    assert map_api_error(ApiProtocolError("bad json"), default_code="X").code == "PROTOCOL_ERROR"
    assert map_api_error(ApiError("odd", status=302), default_code="X").code == "API_ERROR"


def test_use_case_errors_pass_through() -> None:
    original = UseCaseError("INVALID_INPUT", "SSID cannot be empty.")

    assert map_api_error(original, default_code="X") is original


def test_unknown_exceptions_use_defaults() -> None:
    err = map_api_error(OSError(), default_code="FIRMWARE_UPLOAD_FAILED", default_message="Firmware upload failed.")

    assert err.code == "FIRMWARE_UPLOAD_FAILED"
    assert err.message == "Firmware upload failed."
