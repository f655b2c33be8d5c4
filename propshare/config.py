"""Configuration for the property share ledger."""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import timedelta
import os

from .core import RENT_UPDATE_COOLDOWN, PropertyLedgerError
from .logging import setup_logging


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("standard", "json")


class ConfigurationError(PropertyLedgerError):
    """Raised when configuration is invalid."""
    pass


@dataclass
class LedgerConfig:
    """
    Settings for a PropertyLedger.

    Attributes:
        name: Ledger identifier (used in logs and notifications)
        rent_update_cooldown: Minimum time between rent-rate updates
        log_level: Level passed to setup_logging()
        log_format: "standard" or "json"
    """

    name: str = "propshare"
    rent_update_cooldown: timedelta = field(default_factory=lambda: RENT_UPDATE_COOLDOWN)
    log_level: str = "INFO"
    log_format: str = "standard"

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ConfigurationError("Ledger name cannot be empty")
        if self.rent_update_cooldown < timedelta(0):
            raise ConfigurationError(
                f"rent_update_cooldown cannot be negative, got {self.rent_update_cooldown}"
            )
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(f"Unknown log format: {self.log_format}")

    def configure_logging(self) -> None:
        """Apply log_level and log_format to the propshare logger."""
        setup_logging(self.log_level, self.log_format)

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from PROPSHARE_* environment variables."""
        days_str = os.getenv("PROPSHARE_RENT_COOLDOWN_DAYS")
        if days_str is None:
            cooldown = RENT_UPDATE_COOLDOWN
        else:
            try:
                cooldown = timedelta(days=float(days_str))
            except ValueError as e:
                raise ConfigurationError(
                    f"PROPSHARE_RENT_COOLDOWN_DAYS must be a number, got {days_str!r}"
                ) from e

        return cls(
            name=os.getenv("PROPSHARE_NAME", "propshare"),
            rent_update_cooldown=cooldown,
            log_level=os.getenv("PROPSHARE_LOG_LEVEL", "INFO"),
            log_format=os.getenv("PROPSHARE_LOG_FORMAT", "standard"),
        )
