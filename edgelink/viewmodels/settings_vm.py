from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional

from ..utils.logging import env_requests_debug

DEVICE_URL_ENV = "EDGELINK_DEVICE_URL"
DEFAULT_DEVICE_URL = "http://192.168.0.1"


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    device_url: str = DEFAULT_DEVICE_URL
    request_timeout_s: Optional[int] = None
    wifi_poll_interval_ms: int = 2800
    eth_poll_interval_ms: int = 2000
    reboot_countdown_s: int = 10
    reboot_tick_ms: int = 1000


def _default_debug_logging() -> bool:
    return env_requests_debug()


class SettingsVM:
    """Keeps console settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save
        self.debug_logging: bool = _default_debug_logging()

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def device_url(self) -> str:
        return self.config.device_url

    @device_url.setter
    def device_url(self, value: str) -> None:
        self.config = replace(self.config, device_url=self._coerce_url(value))

    @property
    def request_timeout_s(self) -> Optional[int]:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: Any) -> None:
        coerced = self._coerce_optional_int("request_timeout_s", value)
        self.config = replace(self.config, request_timeout_s=coerced)

    @property
    def wifi_poll_interval_ms(self) -> int:
        return self.config.wifi_poll_interval_ms

    @wifi_poll_interval_ms.setter
    def wifi_poll_interval_ms(self, value: Any) -> None:
        coerced = self._coerce_int("wifi_poll_interval_ms", value, minimum=1)
        self.config = replace(self.config, wifi_poll_interval_ms=coerced)

    @property
    def eth_poll_interval_ms(self) -> int:
        return self.config.eth_poll_interval_ms

    @eth_poll_interval_ms.setter
    def eth_poll_interval_ms(self, value: Any) -> None:
        coerced = self._coerce_int("eth_poll_interval_ms", value, minimum=1)
        self.config = replace(self.config, eth_poll_interval_ms=coerced)

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        return bool(self.device_url) and self.config.reboot_countdown_s >= 1

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Let ``EDGELINK_DEVICE_URL`` override the persisted device URL."""
        env = os.environ if environ is None else environ
        override = env.get(DEVICE_URL_ENV, "").strip()
        if override:
            self.device_url = override

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed_flat_keys = {*SettingsConfig.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed_flat_keys
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for cfg_key in SettingsConfig.__annotations__.keys():
            if cfg_key in payload:
                updates[cfg_key] = self._coerce_config_value(cfg_key, payload[cfg_key])

        if updates:
            self.config = replace(self.config, **updates)

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    def set_debug_logging(self, enabled: bool) -> None:
        self.debug_logging = self._coerce_bool(enabled)

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key == "device_url":
            return self._coerce_url(raw)
        if key == "request_timeout_s":
            return self._coerce_optional_int(key, raw)
        if key in {"wifi_poll_interval_ms", "eth_poll_interval_ms", "reboot_countdown_s", "reboot_tick_ms"}:
            return self._coerce_int(key, raw, minimum=1)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_url(value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("device_url must be a string.")
        normalized = value.strip().rstrip("/")
        if not normalized:
            raise ValueError("device_url must not be empty.")
        if "://" not in normalized:
            normalized = f"http://{normalized}"
        return normalized

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, minimum: Optional[int] = None) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if minimum is not None and coerced < minimum:
            raise ValueError(f"{name} must be at least {minimum}.")
        return coerced

    @classmethod
    def _coerce_optional_int(cls, name: str, value: Any) -> Optional[int]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return cls._coerce_int(name, value, minimum=1)


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM().to_dict()
