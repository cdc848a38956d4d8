"""Run configuration — defaults layered under environment and CLI overrides.

Precedence (lowest to highest):
    1. Defaults in ``FnlocConfig``
    2. Environment variables (FNLOC_SORT, FNLOC_FORMAT, FNLOC_MIN_LINES,
       FNLOC_JOBS, FNLOC_EXCLUDE, FNLOC_CLOSURES)
    3. Command-line flags

Usage:
    config = FnlocConfig.from_env().with_overrides(sort="name")
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from fnloc.discovery import DEFAULT_EXCLUDE_DIRS
from fnloc.errors import ConfigError
from fnloc.report import FORMATS, SORT_KEYS


@dataclass(frozen=True)
class FnlocConfig:
    """Every option the command line can tune."""

    directory: str = "./src"
    sort: str = "code"
    output_format: str = "table"
    min_lines: int = 0
    min_complexity: int = 0
    min_nesting: int = 0
    limit: Optional[int] = None
    jobs: int = 1
    include_closures: bool = True
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS
    verbose: bool = False
    quiet: bool = False

    def __post_init__(self):
        if self.sort not in SORT_KEYS:
            raise ConfigError(
                f"invalid sort '{self.sort}' (choose from {', '.join(SORT_KEYS)})"
            )
        if self.output_format not in FORMATS:
            raise ConfigError(
                f"invalid format '{self.output_format}' (choose from {', '.join(FORMATS)})"
            )
        for name in ("min_lines", "min_complexity", "min_nesting"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if self.limit is not None and self.limit < 0:
            raise ConfigError("limit must not be negative")
        if self.jobs < 1:
            raise ConfigError("jobs must be at least 1")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FnlocConfig":
        """
        Build a config from defaults plus FNLOC_* environment variables.

        Args:
            environ: Mapping to read (default: os.environ)

        Raises:
            ConfigError: if a variable holds an invalid value
        """
        if environ is None:
            environ = os.environ

        values: dict = {}
        if "FNLOC_SORT" in environ:
            values["sort"] = environ["FNLOC_SORT"].strip().lower()
        if "FNLOC_FORMAT" in environ:
            values["output_format"] = environ["FNLOC_FORMAT"].strip().lower()
        if "FNLOC_MIN_LINES" in environ:
            values["min_lines"] = _parse_int("FNLOC_MIN_LINES", environ["FNLOC_MIN_LINES"])
        if "FNLOC_JOBS" in environ:
            values["jobs"] = _parse_int("FNLOC_JOBS", environ["FNLOC_JOBS"])
        if "FNLOC_EXCLUDE" in environ:
            values["exclude_dirs"] = tuple(
                d.strip() for d in environ["FNLOC_EXCLUDE"].split(",") if d.strip()
            )
        if "FNLOC_CLOSURES" in environ:
            raw = environ["FNLOC_CLOSURES"].strip().lower()
            if raw not in ("0", "1", "true", "false"):
                raise ConfigError(f"FNLOC_CLOSURES must be 0 or 1, got '{raw}'")
            values["include_closures"] = raw in ("1", "true")

        return cls(**values)

    def with_overrides(self, **overrides) -> "FnlocConfig":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"unknown options: {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'") from None
