"""Transfer settings management for Remote Transfer.

Provides the TransferSettings dataclass (timeouts, size limits and
codec options injected into every operation) and SettingsManager for
JSON persistence.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from src.config.paths import get_settings_path
from src.transfer.exceptions import InputInvalidError
from src.utils.validators import validate_size_limit, validate_timeout

logger = logging.getLogger("remote_transfer.settings")


# Wall-clock budget for one whole operation
DEFAULT_TIMEOUT = 30

# Largest payload read from a data channel (90 MiB)
DEFAULT_MAX_TRANSFER_SIZE = 90 * 1024 * 1024

# Block size for socket and SFTP reads/writes (8KB)
DEFAULT_BLOCK_SIZE = 8192


@dataclass
class TransferSettings:
    """Settings applied to every transfer operation."""

    timeout: float = DEFAULT_TIMEOUT
    max_transfer_size: int = DEFAULT_MAX_TRANSFER_SIZE
    block_size: int = DEFAULT_BLOCK_SIZE
    text_encoding: str = "utf-8"

    # Look up missing passwords in the system keyring
    use_keyring: bool = True

    def __post_init__(self):
        """Validate settings after initialization."""
        is_valid, error = validate_timeout(self.timeout)
        if not is_valid:
            raise InputInvalidError(error)
        self.timeout = float(self.timeout)
        is_valid, error = validate_size_limit(self.max_transfer_size)
        if not is_valid:
            raise InputInvalidError(error)
        if not isinstance(self.block_size, int) or self.block_size < 1:
            raise InputInvalidError(f"Block size must be positive, got {self.block_size}")
        try:
            "".encode(self.text_encoding)
        except LookupError:
            raise InputInvalidError(f"Unknown text encoding: {self.text_encoding}")

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TransferSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


class SettingsManager:
    """Loads and persists TransferSettings as JSON."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Settings file, defaults to the per-user location
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[TransferSettings] = None

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    @property
    def settings(self) -> TransferSettings:
        """Current settings, loaded on first access."""
        if self._settings is None:
            return self.load()
        return self._settings

    def load(self) -> TransferSettings:
        """
        Read settings from disk.

        A missing file yields defaults silently; an unreadable or invalid
        one yields defaults with a warning.
        """
        self._settings = TransferSettings()
        if not self._config_path.exists():
            return self._settings

        try:
            data = json.loads(self._config_path.read_text(encoding="utf-8"))
            self._settings = TransferSettings.from_dict(data)
        except (json.JSONDecodeError, OSError, TypeError, AttributeError, InputInvalidError) as e:
            logger.warning(f"Ignoring settings file {self._config_path}: {e}")

        return self._settings

    def save(self, settings: TransferSettings) -> None:
        """
        Write settings to disk.

        The file is replaced in one step so a crash never leaves it
        half written.
        """
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        staging = self._config_path.with_suffix(".tmp")
        staging.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
        os.replace(staging, self._config_path)
        self._settings = settings

    def reset(self) -> TransferSettings:
        """Delete the settings file and return defaults."""
        if self._config_path.exists():
            self._config_path.unlink()
        self._settings = TransferSettings()
        return self._settings

    def update(self, **kwargs) -> TransferSettings:
        """
        Change some fields and save.

        Unknown field names are ignored. Nothing is written if a new
        value is invalid.

        Raises:
            InputInvalidError: If a value fails validation
        """
        data = self.settings.to_dict()
        data.update({k: v for k, v in kwargs.items() if k in data})

        updated = TransferSettings.from_dict(data)
        self.save(updated)
        return updated
