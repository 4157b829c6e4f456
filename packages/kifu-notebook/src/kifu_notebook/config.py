from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


ENV_PREFIX = "KIFU_NOTEBOOK_"


@dataclass(frozen=True, slots=True)
class NotebookConfig:
    path: str = "notebook.json"
    indent: int | None = 2
    log_level: str = "WARNING"


def _indent(value: Any) -> int | None:
    if value in (None, "", "none"):
        return None
    try:
        n = int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"indent: expected an integer, got {value!r}") from e
    return n if n > 0 else None


def _log_level(value: Any) -> str:
    level = str(value).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"log_level: unknown level {value!r}")
    return level


def load_config(
    options: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> NotebookConfig:
    """Explicit options win over KIFU_NOTEBOOK_* environment variables, which win over defaults."""
    env = os.environ if env is None else env
    merged: dict[str, Any] = {}
    for key in ("path", "indent", "log_level"):
        value = env.get(ENV_PREFIX + key.upper())
        if value is not None:
            merged[key] = value
    merged.update({k: v for k, v in (options or {}).items() if v is not None})

    defaults = NotebookConfig()
    return NotebookConfig(
        path=str(merged.get("path", defaults.path)),
        indent=_indent(merged["indent"]) if "indent" in merged else defaults.indent,
        log_level=_log_level(merged.get("log_level", defaults.log_level)),
    )
