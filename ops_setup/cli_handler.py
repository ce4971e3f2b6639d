# ops_setup/cli_handler.py
# -*- coding: utf-8 -*-
"""
Handles Command Line Interface (CLI) output for the host operations scripts.
"""

import datetime
import logging
from typing import Optional

from ops_common.command_utils import log_ops, redact_args
from ops_setup import config as static_config
from ops_setup.config_models import AppSettings
from ops_setup.services.database_container import build_run_command

module_logger = logging.getLogger(__name__)


def _db_password_display(app_config: AppSettings) -> str:
    if app_config.uses_default_db_password():
        if app_config.dev_override_unsafe_password:
            return "[DEFAULT - Dev override active]"
        return "[DEFAULT - Potentially Insecure! Override via ENV or YAML]"
    return "[FROM CONFIGURATION (ENV/YAML)]"


def format_configuration(app_config: AppSettings) -> str:
    """
    Render the effective configuration as text. Container environment values
    are never shown.
    """
    symbols = app_config.symbols
    cf = app_config.cloudflared
    db = app_config.db_container

    config_text = f"{symbols.get('info', 'ℹ️')} Current effective configuration values (CLI > YAML > ENV > Defaults):\n\n"
    config_text += f"  Log Prefix:                    {app_config.log_prefix}\n"
    config_text += f"  Container Runtime Command:     {app_config.container_runtime_command}\n\n"

    config_text += "  cloudflared Settings (cloudflared.*):\n"
    config_text += f"    Binary:                      {cf.binary}\n"
    config_text += f"    Service Unit:                {cf.service_name}.service\n"
    config_text += f"    Source Directory:            {cf.source_dir}\n"
    config_text += f"    Target Directory:            {cf.target_dir}\n"
    config_text += f"    Config File:                 {cf.config_file_name}\n"
    config_text += f"    Certificate File:            {cf.cert_file_name}\n"
    config_text += f"    Credentials Glob:            {cf.credentials_glob}\n"
    config_text += f"    File Mode:                   {cf.file_mode}\n\n"

    config_text += "  Database Container Settings (db_container.*):\n"
    config_text += f"    Name:                        {db.name}\n"
    config_text += f"    Image:                       {db.image}\n"
    config_text += f"    Network:                     {db.network} (create if missing: {db.create_network})\n"
    config_text += f"    Port Mapping:                {db.host_port}:{db.container_port}\n"
    config_text += f"    Volume:                      {db.volume}:{db.data_path}\n"
    config_text += f"    Restart Policy:              {db.restart_policy or 'none'}\n"
    config_text += f"    Environment Keys:            {', '.join(sorted(db.environment)) or 'none'}\n"
    config_text += f"    Password:                    {_db_password_display(app_config)}\n\n"

    run_preview = " ".join(redact_args(build_run_command(app_config), list(db.environment.values())))
    config_text += f"  Container Run Command:         {run_preview}\n\n"

    config_text += f"  Developer Override Unsafe PW:  {app_config.dev_override_unsafe_password}\n"
    config_text += f"  Script Version (static):       {static_config.SCRIPT_VERSION}\n"
    config_text += f"  Timestamp (current view):      {datetime.datetime.now().strftime('%Y-%m-%d-%H%M%S')}\n\n"
    config_text += "Configuration is loaded with precedence: CLI > YAML File > Environment Variables > Model Defaults."
    return config_text


def view_configuration(
    app_config: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """
    Logs the current effective configuration.
    """
    logger_to_use = current_logger if current_logger else module_logger
    log_ops(
        "Displaying current configuration:", "info", logger_to_use, app_config
    )
    log_ops(
        f"\n{format_configuration(app_config)}\n",
        "info",
        logger_to_use,
        app_config,
    )
