"""
DAG Store Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional

from dagstore.constants import MAX_VARIABLE_COUNT, SQLITE_MAX_VARIABLE_NUMBER

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Storage configuration."""
    file: Optional[str] = None  # None: private temporary file
    trace: bool = False
    max_variable_count: int = MAX_VARIABLE_COUNT

    @property
    def path(self) -> Optional[Path]:
        return Path(self.file) if self.file else None

    def validate(self) -> List[str]:
        """Validate storage settings, returning a list of errors."""
        errors = []

        # One variable is always taken by the channel id
        if not 1 <= self.max_variable_count < SQLITE_MAX_VARIABLE_NUMBER:
            errors.append(
                f"max_variable_count must be between 1 and "
                f"{SQLITE_MAX_VARIABLE_NUMBER - 1}: {self.max_variable_count}"
            )

        if self.file is not None and not self.file:
            errors.append("file cannot be empty (use null for a temporary store)")

        return errors


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class StoreConfig:
    """
    Complete store configuration.

    All settings for running a message store in one process.
    """
    name: str = "dagstore"
    storage: StorageConfig = field(default_factory=StorageConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = self.storage.validate()

        if not isinstance(getattr(logging, self.log.level.upper(), None), int):
            errors.append(f"Invalid log level: {self.log.level}")

        if self.log.max_size_mb < 1:
            errors.append("max_size_mb must be at least 1")

        return errors

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "StoreConfig":
        """Load configuration from file."""
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls(name=data.get("name", "dagstore"))

        if "storage" in data:
            config.storage = StorageConfig(**data["storage"])

        if "log" in data:
            config.log = LogConfig(**data["log"])

        logger.info(f"Configuration loaded from {path}")
        return config

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "name": self.name,
            "storage": asdict(self.storage),
            "log": asdict(self.log),
        }


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
