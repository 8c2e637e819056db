"""
Configuration for rdap-lookup.

Settings lookup order (first match wins):
1. Environment variables (RDAP_LOOKUP_*)
2. Config file (~/.config/rdap-lookup/config.json)
3. Built-in defaults
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

APP_NAME = "rdap-lookup"

DEFAULT_IP_BASE_URL = "https://rdap.org"

ENV_REGISTRY = "RDAP_LOOKUP_REGISTRY"
ENV_IP_BASE_URL = "RDAP_LOOKUP_IP_BASE_URL"
ENV_TIMEOUT = "RDAP_LOOKUP_TIMEOUT"
ENV_DEBUG = "RDAP_LOOKUP_DEBUG"
ENV_AUTO_UPDATE = "RDAP_LOOKUP_AUTO_UPDATE"


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    registry_path: Path | None = None
    ip_base_url: str = DEFAULT_IP_BASE_URL
    timeout: float | None = None
    debug: bool = False
    auto_update: bool = True


def get_config_dir() -> Path:
    """Get the config directory for this app."""
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('APPDATA', Path.home()))
    else:  # macOS, Linux
        base = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))

    return base / APP_NAME


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / 'config.json'


def get_user_registry_file() -> Path:
    """Get the path where `--update-registry` stores the IANA registry."""
    return get_config_dir() / 'rdap-servers.json'


def load_config() -> dict:
    """Load the config file, returning an empty dict if missing or invalid."""
    config_file = get_config_file()
    try:
        if config_file.exists():
            config = json.loads(config_file.read_text())
            if isinstance(config, dict):
                return config
            logger.warning("Ignoring %s: top level is not an object", config_file)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", config_file, e)
    return {}


def _parse_timeout(value) -> float | None:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid timeout %r", value)
        return None
    return timeout if timeout > 0 else None


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def get_registry_path(config: dict | None = None) -> Path | None:
    """
    Get the registry file to load instead of the packaged one.

    Lookup order:
    1. Environment variable (RDAP_LOOKUP_REGISTRY)
    2. Config file ("registry" key)
    3. User registry written by `rdap-lookup --update-registry`, if present
    """
    if path := os.environ.get(ENV_REGISTRY):
        return Path(path).expanduser()

    if config is None:
        config = load_config()
    if path := config.get('registry'):
        return Path(path).expanduser()

    user_registry = get_user_registry_file()
    if user_registry.exists():
        return user_registry

    return None


def get_settings() -> Settings:
    """Resolve settings from the environment and the config file."""
    config = load_config()

    ip_base_url = (
        os.environ.get(ENV_IP_BASE_URL)
        or config.get('ip_base_url')
        or DEFAULT_IP_BASE_URL
    )

    timeout = os.environ.get(ENV_TIMEOUT)
    if timeout is None:
        timeout = config.get('timeout')

    debug = os.environ.get(ENV_DEBUG)
    if debug is None:
        debug = config.get('debug', False)

    auto_update = os.environ.get(ENV_AUTO_UPDATE)
    if auto_update is None:
        auto_update = config.get('auto_update', True)

    return Settings(
        registry_path=get_registry_path(config),
        ip_base_url=ip_base_url.rstrip('/'),
        timeout=_parse_timeout(timeout),
        debug=_parse_bool(debug),
        auto_update=_parse_bool(auto_update),
    )


def get_setting_source(env_var: str, config_key: str) -> str:
    """Determine where a setting comes from (for display purposes)."""
    if os.environ.get(env_var):
        return "environment variable"
    if load_config().get(config_key) is not None:
        return "config file"
    return "default"
