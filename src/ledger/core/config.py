#!/usr/bin/env python3
"""
Configuration Management for the Finance Dashboard Ledger

Handles environment-based configuration with safe defaults and validation.
Supports multiple environments (development, test, production) and sets up
logging once per process.
"""

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class StorageConfig:
    """Snapshot storage settings."""

    state_dir: Path
    state_filename: str = "ledger_state.json"
    backup_filename: str = "ledger_state.backup.json"

    @property
    def state_file(self) -> Path:
        return self.state_dir / self.state_filename

    @property
    def backup_file(self) -> Path:
        return self.state_dir / self.backup_filename


@dataclass
class DisplayConfig:
    """Presentation settings used by reports and the CLI."""

    currency: str = "THB"
    cycle_range: int = 3  # Cycles shown either side of the active one


@dataclass
class Config:
    """
    Main configuration class for the ledger application.

    Loads configuration from environment variables with defaults
    and validation for each environment type.
    """

    environment: Environment

    # Core directories
    data_dir: Path

    # Component configurations
    storage: StorageConfig
    display: DisplayConfig

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("LEDGER_ENV", "development"))

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_ledger"
            base_dir = Path(os.getenv("LEDGER_DATA_DIR", str(default_test_dir)))
        else:
            base_dir = Path(os.getenv("LEDGER_DATA_DIR", "./data"))
        data_dir = base_dir.expanduser().resolve()

        data_dir.mkdir(parents=True, exist_ok=True)

        storage = StorageConfig(state_dir=data_dir)

        display = DisplayConfig(
            currency=os.getenv("LEDGER_CURRENCY", "THB").strip().upper(),
            cycle_range=int(os.getenv("LEDGER_CYCLE_RANGE", "3")),
        )

        return cls(
            environment=env,
            data_dir=data_dir,
            storage=storage,
            display=display,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.data_dir.exists():
            errors.append(f"data_dir does not exist: {self.data_dir}")

        if not re.fullmatch(r"[A-Z]{3}", self.display.currency):
            errors.append(f"Currency must be a three-letter code: {self.display.currency!r}")

        if not 0 <= self.display.cycle_range <= 24:
            errors.append("Cycle range must be between 0 and 24")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        # Configure format based on environment
        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        if self.debug:
            logging.getLogger("ledger").setLevel(logging.DEBUG)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a JSON-friendly dictionary."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dict__") and not isinstance(field_value, Enum):
                # Nested dataclass
                result[field_name] = {
                    nested_name: str(nested_value) if isinstance(nested_value, Path) else nested_value
                    for nested_name, nested_value in field_value.__dict__.items()
                }
            elif isinstance(field_value, Path):
                result[field_name] = str(field_value)
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            else:
                result[field_name] = field_value

        return result


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()


# Convenience functions
def get_data_dir() -> Path:
    """Get the data directory path."""
    return get_config().data_dir


def is_development() -> bool:
    """Check if running in development environment."""
    return get_config().environment == Environment.DEVELOPMENT


def is_test() -> bool:
    """Check if running in test environment."""
    return get_config().environment == Environment.TEST
