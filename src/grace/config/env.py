"""Typed reads of GRACE_* environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _to_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(value)


def _to_path(value: str) -> Path:
    return Path(value).expanduser()


class EnvReader:
    """Reads configuration overrides from the environment.

    Unset and blank variables read as the default. A value that does not
    parse is logged and also reads as the default, so a typo in one
    variable never stops the server from starting.

    Pass ``env`` to read from a plain mapping instead of os.environ.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _raw(self, var: str) -> str | None:
        value = self._env.get(var, "").strip()
        return value or None

    def _parse(
        self, var: str, convert: Callable[[str], T], kind: str, default: T | None
    ) -> T | None:
        raw = self._raw(var)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: expected %s", var, raw, kind)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        raw = self._raw(var)
        return default if raw is None else raw

    def get_int(self, var: str, default: int | None = None) -> int | None:
        return self._parse(var, int, "an integer", default)

    def get_float(self, var: str, default: float | None = None) -> float | None:
        return self._parse(var, float, "a number", default)

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Accepts 1/0, true/false, yes/no and on/off, in any case."""
        return self._parse(var, _to_bool, "a boolean", default)

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        return self._parse(var, _to_path, "a path", default)

    def get_list(
        self, var: str, separator: str = ",", default: list[str] | None = None
    ) -> list[str] | None:
        """Split on separator, dropping blank items.

        "/healthz, /ready" reads as ["/healthz", "/ready"].
        """
        raw = self._raw(var)
        if raw is None:
            return default
        return [item.strip() for item in raw.split(separator) if item.strip()]
