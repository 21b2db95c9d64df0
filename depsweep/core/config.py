"""Run settings read from the environment (CLI options override them)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from depsweep.engine.exemptions import BUILTIN_TOOL_PREFIXES
from depsweep.exceptions import ConfigError

DEFAULT_MAX_FILE_BYTES = 2_000_000


def _default_concurrency() -> int:
    return min(8, os.cpu_count() or 1)


def _env_list(key: str) -> list[str]:
    raw = os.environ.get(key, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{key} must be >= 1, got {value}")
    return value


@dataclass
class Settings:
    exclude: list[str] = field(default_factory=list)
    concurrency: int = field(default_factory=_default_concurrency)
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    extra_tool_prefixes: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables.

        DEPSWEEP_EXCLUDE              comma-separated package ids to drop
        DEPSWEEP_CONCURRENCY          worker threads for the file pass
        DEPSWEEP_MAX_FILE_BYTES       larger candidate files are skipped
        DEPSWEEP_EXTRA_TOOL_PREFIXES  comma-separated extra tool-package prefixes
        """
        return cls(
            exclude=_env_list("DEPSWEEP_EXCLUDE"),
            concurrency=_env_int("DEPSWEEP_CONCURRENCY", _default_concurrency()),
            max_file_bytes=_env_int("DEPSWEEP_MAX_FILE_BYTES", DEFAULT_MAX_FILE_BYTES),
            extra_tool_prefixes=_env_list("DEPSWEEP_EXTRA_TOOL_PREFIXES"),
        )

    @property
    def tool_prefixes(self) -> list[str]:
        return [*BUILTIN_TOOL_PREFIXES, *self.extra_tool_prefixes]
