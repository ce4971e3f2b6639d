# ops_setup/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the application.

Handles loading settings from Pydantic model defaults, YAML files,
environment variables, and command-line arguments, applying a specific
order of precedence:
1. Pydantic Model Defaults
2. Environment Variables (loaded by Pydantic's BaseSettings)
3. YAML Configuration File, then per-service files in config_files/
4. Command-Line Arguments
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .config_models import AppSettings

module_logger = logging.getLogger(__name__)

CONFIG_DIR = "config_files"

SERVICE_SECTIONS = ("cloudflared", "db_container")

# Replaced wholesale by an override instead of merged.
REPLACED_MAPPINGS = frozenset(["environment"])

# argparse dest -> (settings section or None for top level, field name)
CLI_FIELD_MAP: Dict[str, tuple] = {
    "log_prefix": (None, "log_prefix"),
    "dev_override_unsafe_password": (None, "dev_override_unsafe_password"),
    "container_runtime_command": (None, "container_runtime_command"),
    "cloudflared_binary": ("cloudflared", "binary"),
    "cloudflared_source_dir": ("cloudflared", "source_dir"),
    "cloudflared_target_dir": ("cloudflared", "target_dir"),
    "db_name": ("db_container", "name"),
    "db_image": ("db_container", "image"),
    "db_network": ("db_container", "network"),
    "db_host_port": ("db_container", "host_port"),
    "db_volume": ("db_container", "volume"),
}


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively update `source` in place with `overrides`. Nested dicts are
    merged, except keys in REPLACED_MAPPINGS which are swapped wholesale.
    A None override never replaces an existing value.
    """
    for key, value in overrides.items():
        if key in REPLACED_MAPPINGS and isinstance(value, dict):
            source[key] = dict(value)
        elif (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def _read_yaml_mapping(
    path: Path, logger_to_use: logging.Logger
) -> Dict[str, Any]:
    """
    Read a YAML file that should contain a mapping. Unreadable, unparsable or
    non-mapping files are reported and treated as empty.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{path}': {e}. Ignoring it."
        )
        return {}
    except OSError as e:
        logger_to_use.warning(
            f"Could not read config file '{path}': {e}. Ignoring it."
        )
        return {}

    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        logger_to_use.warning(
            f"Config file '{path}' does not contain a valid YAML dictionary. Ignoring."
        )
        return {}
    return yaml_data


def load_service_config(
    service_name: str,
    config_root: Path,
    current_logger: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Load `config_files/<service_name>.yaml` under config_root, if present.

    Returns:
        Dict[str, Any]: The service section, or an empty dict.
    """
    logger_to_use = current_logger if current_logger else module_logger
    service_config_path = config_root / CONFIG_DIR / f"{service_name}.yaml"

    if not service_config_path.is_file():
        logger_to_use.debug(
            f"No service-specific config file for '{service_name}' at {service_config_path}."
        )
        return {}

    service_config = _read_yaml_mapping(service_config_path, logger_to_use)
    if service_config:
        logger_to_use.info(
            f"Loaded configuration for {service_name} from {service_config_path}"
        )
    return service_config


def _cli_overrides(cli_args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for cli_key, cli_value in vars(cli_args).items():
        if cli_value is None or cli_key not in CLI_FIELD_MAP:
            continue
        section, field_name = CLI_FIELD_MAP[cli_key]
        if section is None:
            overrides[field_name] = cli_value
        else:
            overrides.setdefault(section, {})[field_name] = cli_value
    return overrides


def load_app_settings(
    cli_args: Optional[argparse.Namespace] = None,
    config_file_path: str = "config.yaml",
    current_logger: Optional[logging.Logger] = None,
) -> AppSettings:
    """
    Loads application settings with the precedence
    defaults < environment < YAML < CLI.

    Args:
        cli_args: Parsed command-line arguments (from argparse). Only options
            listed in CLI_FIELD_MAP with a non-None value are applied.
        config_file_path: Path to the main YAML configuration file. Relative
            paths are resolved against the current working directory, which is
            also where config_files/ is looked up.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        An instance of AppSettings with the fully resolved configuration.

    Raises:
        SystemExit: The merged configuration failed validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    try:
        current_values_dict = AppSettings().model_dump(exclude_defaults=False)
    except ValidationError as e:
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(f"Configuration error: {e}") from e

    yaml_config_path = Path(config_file_path)
    config_root = (
        yaml_config_path.parent
        if yaml_config_path.is_absolute()
        else Path.cwd()
    )
    if not yaml_config_path.is_absolute():
        yaml_config_path = config_root / yaml_config_path

    if yaml_config_path.is_file():
        yaml_data = _read_yaml_mapping(yaml_config_path, logger_to_use)
        if yaml_data:
            current_values_dict = _deep_update(current_values_dict, yaml_data)
            logger_to_use.info(
                f"Loaded main configuration from {yaml_config_path}"
            )
    else:
        logger_to_use.info(
            f"Configuration file '{yaml_config_path}' not found. Using defaults, environment variables, and CLI args."
        )

    for service in SERVICE_SECTIONS:
        service_config = load_service_config(
            service, config_root, logger_to_use
        )
        if service_config:
            current_values_dict = _deep_update(
                current_values_dict, {service: service_config}
            )

    if cli_args:
        current_values_dict = _deep_update(
            current_values_dict, _cli_overrides(cli_args)
        )

    try:
        final_settings = AppSettings(**current_values_dict)
    except ValidationError as e:
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(f"Configuration error: {e}") from e

    logger_to_use.debug("Successfully loaded and validated application settings")
    return final_settings
