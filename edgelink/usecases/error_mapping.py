"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional, Tuple, Type

from edgelink.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiProtocolError,
    ApiServerError,
    ApiTransportError,
)
from edgelink.domain.ports import UseCaseError

# Checked in order; subclasses must come before ApiError.
_DETAILED: Tuple[Tuple[Type[ApiError], str, str], ...] = (
    (ApiTransportError, "REQUEST_TIMEOUT", "Device unreachable"),
    (ApiProtocolError, "PROTOCOL_ERROR", "Unexpected device response"),
)


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Transport and protocol errors keep the raw adapter text so the user sees
    what actually failed (for example the unreachable URL).

    Args:
        exc (Exception): Error raised by an adapter or use case.
        default_code (str): Code used for exceptions outside the adapter taxonomy.
        default_message (Optional[str]): Message used for those exceptions.

    Returns:
        UseCaseError: Value returned to the caller.
    """
    if isinstance(exc, UseCaseError):
        return exc
    for error_type, code, label in _DETAILED:
        if isinstance(exc, error_type):
            return UseCaseError(code, _with_hint(label, str(exc)))
    if isinstance(exc, ApiClientError):
        label = f"Request failed (HTTP {exc.status})" if exc.status else "Request failed"
        return UseCaseError("REQUEST_FAILED", _with_hint(label, exc.hint))
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", "Device error, try again.")
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))
    return UseCaseError(default_code, default_message or str(exc) or "Unexpected error.")


def _with_hint(label: str, hint: Optional[str]) -> str:
    detail = (hint or "").strip()
    if detail:
        return f"{label}: {detail}"
    return label if label.endswith(".") else label + "."


__all__ = ["map_api_error"]
