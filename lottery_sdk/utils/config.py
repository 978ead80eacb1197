"""
Configuration Management
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from lottery_sdk.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = Path("config") / "lottery.conf"

# environment prefix -> config section
ENV_SECTIONS = {
    "LOTTERY_": "lottery",
    "BLOCKCHAIN_": "blockchain",
    "INDEXER_": "indexer",
}


def load_config(config_file: Optional[Union[str, Path]] = None, *, load_env_file: bool = True) -> Dict[str, Any]:
    """Load configuration from a JSON file, a .env file and environment variables"""
    config: Dict[str, Any] = {}

    if load_env_file:
        load_dotenv()

    if config_file is None:
        config_file = os.getenv("LOTTERY_CONFIG_FILE") or DEFAULT_CONFIG_FILE
    config_file = Path(config_file)

    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config.update(json.load(f))
            logger.info("Loaded configuration from %s", config_file)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error loading config file %s: %s", config_file, e)
    else:
        logger.debug("Config file %s not found. Will only use environment variables.", config_file)

    config = _apply_env_overrides(config)
    logger.debug("Configuration sections after environment overrides: %s", sorted(config))

    return config


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration"""
    for key, value in os.environ.items():
        for prefix, section in ENV_SECTIONS.items():
            if key.startswith(prefix):
                break
        else:
            continue

        name = key[len(prefix):].lower()
        if section == "lottery" and name == "config_file":
            continue
        config.setdefault(section, {})[name] = value

    return config


def get_config_value(config: Dict[str, Any], key_path: str, default=None):
    """Get configuration value by dot-separated key path"""
    keys = key_path.split('.')
    value = config

    try:
        for key in keys:
            value = value[key]
        return value
    except (KeyError, TypeError):
        return default
