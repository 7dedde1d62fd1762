"""Configuration management for shelflists.

Loads configuration from environment variables and provides defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path

    # Principal used by the CLI when --owner is not given
    owner_id: Optional[str]

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "SHELFLISTS_DB_PATH",
            str(Path.home() / ".shelflists" / "shelflists.db"),
        )
        if db_path_str == ":memory:":
            db_path = Path(db_path_str)
        else:
            db_path = Path(db_path_str).expanduser()

        owner_id = os.environ.get("SHELFLISTS_OWNER", "").strip() or None

        return cls(
            db_path=db_path,
            owner_id=owner_id,
            log_level=os.environ.get("SHELFLISTS_LOG_LEVEL", "WARNING").upper(),
        )

    @property
    def is_memory(self) -> bool:
        return str(self.db_path) == ":memory:"

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.is_memory and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown log level: {self.log_level}")

        return errors


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
