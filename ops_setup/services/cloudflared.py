# ops_setup/services/cloudflared.py
# -*- coding: utf-8 -*-
"""
Redeploys the cloudflared tunnel daemon's system configuration.

The operator keeps the tunnel configuration, origin certificate and tunnel
credentials in their own directory (normally ~/.cloudflared). The system
service reads them from /etc/cloudflared. A redeploy uninstalls the service,
replaces the system copy of those files, locks their permissions down and
installs the service again.

There is no rollback: a failure part way through leaves the system partially
reconfigured, and the failed steps are reported in the run's result.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ops_common.command_utils import (
    command_exists,
    get_symbols,
    log_ops,
    run_elevated_command,
)
from ops_common.file_utils import (
    elevated_chmod_directory_files,
    elevated_copy_files,
    elevated_make_directory,
    elevated_remove_file,
)
from ops_common.system_utils import systemd_reload
from ops_setup.config_models import AppSettings
from ops_setup.step_executor import StepDefinition, run_step_sequence

module_logger = logging.getLogger(__name__)


@dataclass
class OperatorFiles:
    """Files found in the operator's cloudflared directory."""

    config_file: Optional[Path] = None
    cert_file: Optional[Path] = None
    credential_files: List[Path] = field(default_factory=list)

    def all_files(self) -> List[Path]:
        files = [f for f in (self.config_file, self.cert_file) if f]
        return files + list(self.credential_files)


def discover_operator_files(app_settings: AppSettings) -> OperatorFiles:
    """
    Resolve the config file, certificate and credential files in the
    operator directory. Missing config or certificate are left as None.
    """
    cf_settings = app_settings.cloudflared
    source_dir = Path(cf_settings.source_dir).expanduser()

    config_file = source_dir / cf_settings.config_file_name
    cert_file = source_dir / cf_settings.cert_file_name
    credential_files: List[Path] = []
    if source_dir.is_dir():
        credential_files = sorted(
            p for p in source_dir.glob(cf_settings.credentials_glob) if p.is_file()
        )

    return OperatorFiles(
        config_file=config_file if config_file.is_file() else None,
        cert_file=cert_file if cert_file.is_file() else None,
        credential_files=credential_files,
    )


def preflight_check(app_settings: AppSettings) -> List[str]:
    """
    Collect problems that will make the redeploy fail or leave the tunnel
    without credentials. The caller decides what to do with them.
    """
    cf_settings = app_settings.cloudflared
    source_dir = Path(cf_settings.source_dir).expanduser()
    problems: List[str] = []

    if not source_dir.is_dir():
        problems.append(f"Operator directory {source_dir} does not exist.")
        return problems

    found = discover_operator_files(app_settings)
    if found.config_file is None:
        problems.append(
            f"Tunnel config {source_dir / cf_settings.config_file_name} is missing."
        )
    if found.cert_file is None:
        problems.append(
            f"Origin certificate {source_dir / cf_settings.cert_file_name} is missing."
        )
    if not found.credential_files:
        problems.append(
            f"No credential files matching '{cf_settings.credentials_glob}' in {source_dir}."
        )
    if not command_exists(cf_settings.binary):
        problems.append(f"'{cf_settings.binary}' was not found in PATH.")
    return problems


def _run_service_command(
    action: str,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger],
) -> bool:
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    try:
        run_elevated_command(
            [app_settings.cloudflared.binary, "service", action],
            app_settings,
            capture_output=True,
            current_logger=logger_to_use,
        )
    except (subprocess.CalledProcessError, OSError) as e:
        log_ops(
            f"{symbols.get('error', '❌')} cloudflared service {action} failed: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        return False
    log_ops(
        f"{symbols.get('success', '✅')} cloudflared service {action} done.",
        "success",
        logger_to_use,
        app_settings,
    )
    return True


def is_service_registered(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    True when systemd knows the tunnel service unit. A missing runtime or
    sudo counts as registered so the uninstall still runs and reports it.
    """
    logger_to_use = current_logger if current_logger else module_logger
    unit = f"{app_settings.cloudflared.service_name}.service"
    try:
        result = run_elevated_command(
            ["systemctl", "cat", unit],
            app_settings,
            check=False,
            capture_output=True,
            current_logger=logger_to_use,
        )
    except OSError:
        return True
    return result.returncode == 0


def uninstall_service(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    logger_to_use = current_logger if current_logger else module_logger
    if not is_service_registered(app_settings, logger_to_use):
        symbols = get_symbols(app_settings)
        log_ops(
            f"{symbols.get('info', 'ℹ️')} {app_settings.cloudflared.service_name}.service "
            f"is not installed; nothing to uninstall.",
            "info",
            logger_to_use,
            app_settings,
        )
        return True
    return _run_service_command("uninstall", app_settings, logger_to_use)


def remove_previous_config(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    cf_settings = app_settings.cloudflared
    return elevated_remove_file(
        Path(cf_settings.target_dir) / cf_settings.config_file_name,
        app_settings,
        current_logger,
    )


def reload_service_manager(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    return systemd_reload(app_settings, current_logger)


def ensure_target_directory(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    return elevated_make_directory(
        Path(app_settings.cloudflared.target_dir), app_settings, current_logger
    )


def copy_operator_files(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    Copy the config file, certificate and every credential file into the
    system directory. Files that exist are copied even when another is
    missing; a missing config or certificate still fails the step.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    cf_settings = app_settings.cloudflared
    source_dir = Path(cf_settings.source_dir).expanduser()
    found = discover_operator_files(app_settings)

    missing: List[str] = []
    if found.config_file is None:
        missing.append(cf_settings.config_file_name)
    if found.cert_file is None:
        missing.append(cf_settings.cert_file_name)
    for name in missing:
        log_ops(
            f"{symbols.get('error', '❌')} {source_dir / name} not found; it will not be deployed.",
            "error",
            logger_to_use,
            app_settings,
        )
    if not found.credential_files:
        log_ops(
            f"{symbols.get('warning', '!')} No credential files matching '{cf_settings.credentials_glob}' in {source_dir}.",
            "warning",
            logger_to_use,
            app_settings,
        )

    copied = True
    files = found.all_files()
    if files:
        copied = elevated_copy_files(
            files, Path(cf_settings.target_dir), app_settings, logger_to_use
        )
    return copied and not missing


def restrict_permissions(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    cf_settings = app_settings.cloudflared
    return elevated_chmod_directory_files(
        Path(cf_settings.target_dir),
        cf_settings.file_mode,
        app_settings,
        current_logger,
    )


def install_service(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    return _run_service_command("install", app_settings, current_logger)


REDEPLOY_STEPS: List[StepDefinition] = [
    ("CLOUDFLARED_UNINSTALL", "Uninstall cloudflared service", uninstall_service),
    ("CLOUDFLARED_REMOVE_CONFIG", "Remove previous system config file", remove_previous_config),
    ("CLOUDFLARED_SYSTEMD_RELOAD", "Reload systemd daemon", reload_service_manager),
    ("CLOUDFLARED_TARGET_DIR", "Create system config directory", ensure_target_directory),
    ("CLOUDFLARED_COPY_FILES", "Copy config, certificate and credentials", copy_operator_files),
    ("CLOUDFLARED_PERMISSIONS", "Restrict config file permissions", restrict_permissions),
    ("CLOUDFLARED_INSTALL", "Install cloudflared service", install_service),
]


def redeploy_cloudflared(
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
    strict: bool = False,
) -> bool:
    """
    Run the full redeploy sequence.

    Args:
        app_settings: The application settings.
        current_logger: Optional logger instance.
        strict: Stop at the first failed step instead of running the rest.

    Returns:
        True if every step succeeded.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    cf_settings = app_settings.cloudflared

    log_ops(
        f"{symbols.get('info', 'ℹ️')} Redeploying cloudflared from {Path(cf_settings.source_dir).expanduser()} to {cf_settings.target_dir}",
        "info",
        logger_to_use,
        app_settings,
    )
    for problem in preflight_check(app_settings):
        log_ops(
            f"{symbols.get('warning', '!')} Preflight: {problem}",
            "warning",
            logger_to_use,
            app_settings,
        )

    return run_step_sequence(
        "cloudflared redeploy",
        REDEPLOY_STEPS,
        app_settings,
        logger_to_use,
        strict=strict,
    )
