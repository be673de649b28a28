"""Root logger setup for the console.

``EDGELINK_LOG_LEVEL`` (a level name or number) takes precedence over the
``EDGELINK_DEBUG`` flag, and both take precedence over the debug toggle kept in
the user settings.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LEVEL_ENV = "EDGELINK_LOG_LEVEL"
DEBUG_ENV = "EDGELINK_DEBUG"

# Per-request connection chatter is only interesting when debugging the adapter.
_QUIET_LOGGERS = ("urllib3.connectionpool",)
_TRUTHY = frozenset({"1", "true", "yes", "on"})

LevelLike = Union[int, str]


def parse_level(value: Optional[LevelLike], fallback: int = logging.INFO) -> int:
    """Return a numeric level for ``value`` or ``fallback`` when it is unusable."""
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if text.isdigit():
        return int(text)
    resolved = logging.getLevelName(text.upper()) if text else None
    return resolved if isinstance(resolved, int) else fallback


def env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced by the environment, or ``None`` when nothing is set."""
    env = os.environ if environ is None else environ
    explicit = env.get(LEVEL_ENV)
    if explicit:
        return parse_level(explicit)
    if (env.get(DEBUG_ENV) or "").strip().lower() in _TRUTHY:
        return logging.DEBUG
    return None


def _set_root_level(level: int) -> None:
    logging.getLogger().setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def configure_root(default_level: LevelLike = logging.INFO) -> int:
    """Install the console log format once and set the effective root level."""
    forced = env_level()
    level = forced if forced is not None else parse_level(default_level)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    _set_root_level(level)
    return level


def apply_gui_preferences(debug_enabled: bool) -> int:
    """Follow the settings debug toggle unless the environment pins a level."""
    forced = env_level()
    if forced is not None:
        level = forced
    else:
        level = logging.DEBUG if debug_enabled else logging.INFO
    _set_root_level(level)
    return level


def env_requests_debug() -> bool:
    forced = env_level()
    return forced is not None and forced <= logging.DEBUG


__all__ = [
    "DEBUG_ENV",
    "LEVEL_ENV",
    "apply_gui_preferences",
    "configure_root",
    "env_level",
    "env_requests_debug",
    "parse_level",
]
