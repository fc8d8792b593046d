"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.sbclient/config.yaml), and builds the
ClientConfig used to construct a StoryblokClient.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional, Dict

import yaml
from dotenv import load_dotenv

from sbclient.domain.models.config import CacheConfig, ClientConfig, CLEAR_MANUAL

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".sbclient"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Test overrides (set_config_for_testing)
    2. Environment Variables
    3. .env file
    4. YAML configuration file

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(yaml_config)
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file (override=False: real environment variables take precedence)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (path not found).")

    _loaded = True
    logger.info("Configuration loading process completed.")


def _coerce(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def _lookup_nested(key: str) -> Any:
    """Resolves a dotted key against the loaded YAML mapping."""
    if key in _config:
        return _config[key]
    node: Any = _config
    for part in key.split('.'):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration
    2. Environment variable (key upper-cased, dots as underscores)
    3. YAML config (dotted keys walk nested mappings)
    4. Default value

    Args:
        key: The configuration key
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace('.', '_')
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    value = _lookup_nested(key)
    if value is not None:
        return value

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


# --- Convenience Functions ---

def get_access_token() -> Optional[str]:
    """Gets the delivery API token (STORYBLOK_ACCESS_TOKEN or storyblok.access_token)."""
    key = get_config('storyblok.access_token')
    return str(key) if key is not None else None


def get_oauth_token() -> Optional[str]:
    """Gets the management API token (STORYBLOK_OAUTH_TOKEN or storyblok.oauth_token)."""
    key = get_config('storyblok.oauth_token')
    return str(key) if key is not None else None


def load_client_config(**overrides: Any) -> ClientConfig:
    """Builds a ClientConfig from the layered configuration sources.

    Args:
        **overrides: ClientConfig fields that win over every source
            (None values are ignored).

    Returns:
        The assembled ClientConfig.
    """
    load_configuration()

    timeout = get_config('storyblok.timeout')
    rate_limit = get_config('storyblok.rate_limit')
    headers = get_config('storyblok.headers', {})
    values: Dict[str, Any] = {
        'access_token': get_access_token(),
        'oauth_token': get_oauth_token(),
        'region': get_config('storyblok.region'),
        'https': get_config('storyblok.https', True) is not False,
        'timeout': float(timeout) if timeout is not None else None,
        'proxy': get_config('storyblok.proxy'),
        'max_retries': int(get_config('storyblok.max_retries', 5)),
        'rate_limit': int(rate_limit) if rate_limit is not None else None,
        'cache': CacheConfig(
            type=get_config('storyblok.cache.type'),
            clear=get_config('storyblok.cache.clear', CLEAR_MANUAL),
        ),
        'headers': headers if isinstance(headers, dict) else {},
        'endpoint': get_config('storyblok.endpoint'),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    config = ClientConfig(**values)
    logger.debug(f"Client configuration: {config.as_dict()}")
    return config


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
