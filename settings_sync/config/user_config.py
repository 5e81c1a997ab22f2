#region Imports
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional
#endregion


logger = logging.getLogger(__name__)


#region Constants
HOME_ENV_VAR = "SETTINGS_SYNC_HOME"
GIST_ID_ENV_VAR = "SETTINGS_SYNC_GIST_ID"
PROXY_ENV_VARS = ("SETTINGS_SYNC_PROXY", "HTTPS_PROXY", "https_proxy")

CONFIG_FILE = "config.json"

DEFAULT_CONFIG: dict[str, Any] = {
    "gist_id": None,
    "proxy": None,
    "timeout": 5.0,  # seconds
    "public": False,
}
#endregion


#region Paths
def get_app_data_dir() -> Path:
    """
    Get the application data directory.

    Returns:
        $SETTINGS_SYNC_HOME if set, otherwise ~/.config/settings-sync
    """
    override = os.getenv(HOME_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / ".config" / "settings-sync"


def get_config_path() -> Path:
    return get_app_data_dir() / CONFIG_FILE
#endregion


#region File Operations
def load_config() -> dict[str, Any]:
    """
    Load configuration from disk.

    Missing keys are filled with defaults. A missing or unreadable file
    yields the defaults.

    Returns:
        Configuration dictionary
    """
    config = dict(DEFAULT_CONFIG)
    path = get_config_path()

    if not path.exists():
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return config

    if isinstance(data, dict):
        config.update({key: value for key, value in data.items() if key in DEFAULT_CONFIG})
    return config


def save_config(config: dict[str, Any]) -> None:
    """
    Save configuration to disk.

    Args:
        config: Configuration dictionary
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
#endregion


#region Accessors
def get_gist_id() -> Optional[str]:
    """Get the Gist ID ($SETTINGS_SYNC_GIST_ID overrides the config file)."""
    return os.getenv(GIST_ID_ENV_VAR) or load_config().get("gist_id")


def set_gist_id(gist_id: Optional[str]) -> None:
    config = load_config()
    config["gist_id"] = gist_id
    save_config(config)


def clear_gist_id() -> None:
    set_gist_id(None)


def get_proxy() -> Optional[str]:
    """Get the proxy URL, checking environment variables first."""
    for env_var in PROXY_ENV_VARS:
        value = os.getenv(env_var)
        if value:
            return value
    return load_config().get("proxy")


def get_timeout() -> float:
    value = load_config().get("timeout")
    try:
        return float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIG["timeout"]


def get_public() -> bool:
    return bool(load_config().get("public"))
#endregion
