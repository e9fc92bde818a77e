"""Configuration loading and CLI overrides for the packing run.

Sources in precedence order: CLI flags, the config file's ``include_modules``
section, built-in defaults. The section is either ``true`` (enable with
defaults) or a mapping of tunables::

    include_modules:
      package_path: ./package.json
      max_buffer: 409600
      timeout: 300
      workers: 2
      npm_command: npm
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants
from packer.errors import ConfigError
from packer.models import PackConfig

logger = logging.getLogger(__name__)

_SECTION_KEYS = {"package_path", "max_buffer", "timeout", "workers", "npm_command"}


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load a YAML or JSON configuration file.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not os.path.isfile(config_path):
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {config_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def get_include_modules_section(cfg: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the include_modules settings, or None when packing is not enabled."""
    section = cfg.get(Constants.CONFIG_SECTION)
    if section is None or section is False:
        return None
    if section is True:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{Constants.CONFIG_SECTION}' must be true or a mapping")
    unknown = set(section) - _SECTION_KEYS
    if unknown:
        logger.warning("Ignoring unknown %s keys: %s", Constants.CONFIG_SECTION, ", ".join(sorted(unknown)))
    return section


def _pick(cli_value: Any, section: Dict[str, Any], key: str, default: Any) -> Any:
    if cli_value is not None:
        return cli_value
    if section.get(key) is not None:
        return section[key]
    return default


def _as_int(value: Any, key: str, minimum: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e
    if number < minimum:
        raise ConfigError(f"{key} must be at least {minimum}, got {number}")
    return number


def build_pack_config(args, cfg: Optional[Dict[str, Any]] = None) -> PackConfig:
    """Merge CLI arguments and file configuration into a PackConfig.

    Args:
        args: Parsed CLI arguments namespace.
        cfg: Loaded config file contents; loaded from ``args.CONFIG`` when None.

    Raises:
        ConfigError: If a source is unreadable or a value is invalid.
    """
    if cfg is None:
        config_path = getattr(args, "CONFIG", None)
        cfg = load_config_file(config_path) if config_path else {}

    section = get_include_modules_section(cfg)
    enabled = bool(getattr(args, "INCLUDE_MODULES", False)) or section is not None
    section = section or {}

    project_root = os.path.abspath(getattr(args, "PROJECT_ROOT", None) or os.getcwd())
    package_path = _pick(getattr(args, "PACKAGE_PATH", None), section, "package_path", Constants.DEFAULT_PACKAGE_PATH)
    output_path = getattr(args, "OUTPUT_PATH", None) or Constants.DEFAULT_OUTPUT_PATH

    timeout = _pick(getattr(args, "TIMEOUT", None), section, "timeout", Constants.DEFAULT_TIMEOUT)
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"timeout must be a number, got {timeout!r}") from e
        if timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {timeout}")

    return PackConfig(
        enabled=enabled,
        project_root=project_root,
        manifest_path=os.path.normpath(os.path.join(project_root, package_path)),
        staging_dir=os.path.normpath(os.path.join(project_root, output_path, Constants.STAGING_DIR_NAME)),
        max_buffer=_as_int(
            _pick(getattr(args, "MAX_BUFFER", None), section, "max_buffer", Constants.DEFAULT_MAX_BUFFER),
            "max_buffer",
            1,
        ),
        timeout=timeout,
        workers=_as_int(
            _pick(getattr(args, "WORKERS", None), section, "workers", Constants.DEFAULT_WORKERS),
            "workers",
            1,
        ),
        verbose=bool(getattr(args, "VERBOSE", False)),
        npm_command=str(_pick(getattr(args, "NPM_COMMAND", None), section, "npm_command", Constants.NPM_COMMAND)),
    )
