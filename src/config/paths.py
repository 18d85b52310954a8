"""Per-user file locations for Remote Transfer.

Settings and logs live in one application directory. The location
follows platform conventions unless REMOTE_TRANSFER_HOME points
elsewhere.
"""

import os
import sys
from pathlib import Path


APP_NAME = "RemoteTransfer"

# Overrides the platform directory when set
HOME_ENV_VAR = "REMOTE_TRANSFER_HOME"

SETTINGS_FILE = "settings.json"
LOG_FILE = "transfer.log"


def _platform_base() -> Path:
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def get_app_data_dir() -> Path:
    """
    Get the application data directory, creating it if needed.

    Locations:
        - $REMOTE_TRANSFER_HOME when set
        - Windows: %APPDATA%/RemoteTransfer
        - Linux: $XDG_CONFIG_HOME/RemoteTransfer (~/.config by default)
        - macOS: ~/Library/Application Support/RemoteTransfer
    """
    override = os.environ.get(HOME_ENV_VAR)
    app_dir = Path(override) if override else _platform_base() / APP_NAME
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_settings_path() -> Path:
    """Path to the settings JSON file."""
    return get_app_data_dir() / SETTINGS_FILE


def get_log_file_path() -> Path:
    """Path to the log file used by --log-file without an argument."""
    log_dir = get_app_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / LOG_FILE
