"""Configuration file loader with validation"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any, Optional
from .errors import ConfigurationError

CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "wallet.yaml"
DEMO_CONFIG_PATH = CONFIG_DIR / "wallet_demo.yaml"

REQUIRED_KEYS = ['version', 'ledger', 'store', 'session', 'catalog']


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load YAML configuration file with validation.
    Automatically loads demo config if in demo mode.

    Args:
        config_path: Path to configuration file. Defaults to $SWIFTPAY_CONFIG,
            then config/wallet.yaml.

    Returns:
        Dictionary with configuration

    Raises:
        ConfigurationError: If file doesn't exist, is invalid YAML, or lacks required keys
    """
    if config_path is None:
        config_path = os.getenv("SWIFTPAY_CONFIG")

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
        # Auto-select demo config if in demo mode
        if os.getenv("DEMO_MODE") == "true":
            config_path = DEMO_CONFIG_PATH

    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}")

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration must be a mapping: {config_path}")

    missing_keys = [key for key in REQUIRED_KEYS if key not in config]
    if missing_keys:
        raise ConfigurationError(f"Missing required configuration keys: {missing_keys}")

    return config


def save_config(config_path: str, config: Dict[str, Any]) -> None:
    """
    Save configuration to YAML file

    Args:
        config_path: Path to configuration file
        config: Configuration dictionary

    Raises:
        ConfigurationError: If unable to write file
    """
    try:
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w') as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error saving configuration: {e}")


def get_section(config: Optional[Dict[str, Any]], section: str) -> Dict[str, Any]:
    """
    Get one top-level section of the configuration

    Args:
        config: Full configuration dictionary (None is treated as empty)
        section: Section name, e.g. "ledger"

    Returns:
        Section dictionary, or an empty dict if absent
    """
    if not config:
        return {}
    return config.get(section) or {}
