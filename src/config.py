"""Configuration for the payments engine."""

import logging
import os
from dataclasses import dataclass

from exceptions import ConfigurationError

_TRUE_VALUES = ("1", "true", "yes")


@dataclass
class EngineConfig:
    """Runtime settings, read from the environment by the CLI."""

    log_level: str = "WARNING"
    flush_every_n_rows: int = 100
    report_stats: bool = False

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"unknown log level {self.log_level!r}")
        if self.flush_every_n_rows < 1:
            raise ConfigurationError(f"flush_every_n_rows must be at least 1, got {self.flush_every_n_rows}")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        flush_every = os.getenv("PAYMENTS_FLUSH_EVERY_N_ROWS", "100")
        try:
            flush_every_n_rows = int(flush_every)
        except ValueError as e:
            raise ConfigurationError(f"PAYMENTS_FLUSH_EVERY_N_ROWS is not an integer: {flush_every!r}") from e

        return cls(
            log_level=os.getenv("PAYMENTS_LOG_LEVEL", "WARNING"),
            flush_every_n_rows=flush_every_n_rows,
            report_stats=os.getenv("PAYMENTS_REPORT_STATS", "false").lower() in _TRUE_VALUES,
        )
