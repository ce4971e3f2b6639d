# ops_common/system_utils.py
# -*- coding: utf-8 -*-
"""
System-level utility functions: service manager reload and privilege checks.
"""

import logging
import os
import subprocess
from typing import Optional

from ops_common.command_utils import (
    get_symbols,
    log_ops,
    run_elevated_command,
)
from ops_setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def is_running_as_root() -> bool:
    return os.geteuid() == 0


def systemd_reload(
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Reload the systemd daemon so it forgets removed or changed unit files.

    Returns:
        bool: True if `systemctl daemon-reload` succeeded.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    log_ops(
        f"{symbols.get('gear', '⚙️')} Reloading systemd daemon...",
        "info",
        logger_to_use,
        app_settings,
    )
    try:
        run_elevated_command(
            ["systemctl", "daemon-reload"],
            app_settings,
            current_logger=logger_to_use,
        )
        log_ops(
            f"{symbols.get('success', '✅')} Systemd daemon reloaded.",
            "success",
            logger_to_use,
            app_settings,
        )
        return True
    except (subprocess.CalledProcessError, OSError) as e:
        log_ops(
            f"{symbols.get('error', '❌')} Failed to reload systemd: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        return False
