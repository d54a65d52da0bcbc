"""
config.py

Responsibility: Defines the immutable Settings supplied once at startup, their
defaults, and validation of the raw option values.
Does NOT: read the command line or environment (see cli.py), or hold any
runtime state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from exceptions import ConfigError


# ---------------------------------------------------------------------------
# Default values: single source of truth for all optional settings
# ---------------------------------------------------------------------------

DEFAULTS: dict[str, Any] = {
    # second minute hour day month day_of_week year
    "schedule": "0 */5 * * * * *",
    "cache_ttl": 3600.0,
    "http_timeout": 30.0,
    "daemon": False,
    "debug": False,
    "run_on_start": False,
}


def parse_record_names(raw: str) -> tuple[str, ...]:
    """
    Splits a comma-delimited record list, e.g. "a.x.com, b.x.com".

    Whitespace around each name is stripped and empty items are dropped.
    Order and duplicates are kept.

    Args:
        raw: The comma-delimited list.

    Returns:
        The record names as a tuple.
    """
    return tuple(name.strip() for name in raw.split(",") if name.strip())


@dataclass(frozen=True)
class Settings:
    """
    Everything a run or a daemon needs, fixed for the life of the process.

    Construct with Settings.build() to get validation.
    """

    api_token: str
    zone: str
    records: tuple[str, ...]
    daemon: bool = DEFAULTS["daemon"]
    schedule: str = DEFAULTS["schedule"]

    # Seconds a resolved identifier stays cached; 0 disables caching
    cache_ttl: float = DEFAULTS["cache_ttl"]

    # Per-call network timeout in seconds
    http_timeout: float = DEFAULTS["http_timeout"]

    debug: bool = DEFAULTS["debug"]

    # Daemon mode only: run once immediately instead of waiting for the first tick
    run_on_start: bool = DEFAULTS["run_on_start"]

    @classmethod
    def build(
        cls,
        api_token: str,
        zone: str,
        records: str | tuple[str, ...] | list[str],
        **options: Any,
    ) -> Settings:
        """
        Validates raw option values and returns a Settings instance.

        Args:
            api_token: Cloudflare API token.
            zone: Zone name.
            records: Comma-delimited string or a sequence of record names.
            **options: Any other Settings field.

        Returns:
            A validated, frozen Settings.

        Raises:
            ConfigError: If a value cannot describe a run.
        """
        names = parse_record_names(records) if isinstance(records, str) else tuple(records)
        settings = cls(
            api_token=(api_token or "").strip(),
            zone=(zone or "").strip(),
            records=names,
            **options,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """
        Checks field values.

        Raises:
            ConfigError: On the first invalid field.
        """
        if not self.api_token:
            raise ConfigError("a Cloudflare API token is required")
        if not self.zone:
            raise ConfigError("a zone name is required")
        if not self.records:
            raise ConfigError("at least one record name is required")
        if self.cache_ttl < 0:
            raise ConfigError(f"cache TTL must not be negative, got {self.cache_ttl}")
        if self.http_timeout <= 0:
            raise ConfigError(f"HTTP timeout must be positive, got {self.http_timeout}")
        if not self.schedule.strip():
            raise ConfigError("schedule must not be empty")
