# ops_setup/services/database_container.py
# -*- coding: utf-8 -*-
"""
Starts the database container used by the web application stack.

Only the start is handled: the container is run detached, attached to a
named network, with a published port, its credentials passed as environment
variables and its data kept on a named volume. Stopping, backing up or
upgrading the container is left to the container runtime.
"""

import logging
import subprocess
from typing import List, Optional

from ops_common.command_utils import get_symbols, log_ops, run_command
from ops_setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def build_run_command(app_settings: AppSettings) -> List[str]:
    """
    Build the `<runtime> run` command for the configured container.

    Environment variables are emitted sorted by name.
    """
    db = app_settings.db_container
    command = [
        app_settings.container_runtime_command,
        "run",
        "-d",
        "--name",
        db.name,
        "--network",
        db.network,
        "-p",
        f"{db.host_port}:{db.container_port}",
    ]
    for key in sorted(db.environment):
        command.extend(["-e", f"{key}={db.environment[key]}"])
    command.extend(["-v", f"{db.volume}:{db.data_path}"])
    if db.restart_policy:
        command.extend(["--restart", db.restart_policy])
    command.append(db.image)
    return command


def _runtime_object_exists(
    object_kind: str,
    object_name: str,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger],
) -> bool:
    result = run_command(
        [app_settings.container_runtime_command, object_kind, "inspect", object_name],
        app_settings,
        check=False,
        capture_output=True,
        current_logger=current_logger,
    )
    return result.returncode == 0


def container_exists(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    return _runtime_object_exists(
        "container", app_settings.db_container.name, app_settings, current_logger
    )


def ensure_network(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    Create the container network if it does not exist yet.

    Returns:
        True if the network exists afterwards (or creation is disabled).
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    db = app_settings.db_container

    if not db.create_network:
        log_ops(
            f"{symbols.get('info', 'ℹ️')} Network creation disabled; assuming '{db.network}' exists.",
            "debug",
            logger_to_use,
            app_settings,
        )
        return True

    try:
        if _runtime_object_exists("network", db.network, app_settings, logger_to_use):
            log_ops(
                f"{symbols.get('info', 'ℹ️')} Container network '{db.network}' already exists.",
                "info",
                logger_to_use,
                app_settings,
            )
            return True
        run_command(
            [app_settings.container_runtime_command, "network", "create", db.network],
            app_settings,
            capture_output=True,
            current_logger=logger_to_use,
        )
    except (subprocess.CalledProcessError, OSError) as e:
        log_ops(
            f"{symbols.get('error', '❌')} Could not create container network '{db.network}': {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        return False

    log_ops(
        f"{symbols.get('success', '✅')} Created container network '{db.network}'.",
        "success",
        logger_to_use,
        app_settings,
    )
    return True


def start_database_container(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    Start the database container.

    An existing container with the same name is left alone and counts as
    success.

    Returns:
        True if the container was started or already existed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    db = app_settings.db_container

    if app_settings.uses_default_db_password():
        if app_settings.dev_override_unsafe_password:
            log_ops(
                f"{symbols.get('warning', '!')} DEV OVERRIDE: Using default database password.",
                "warning",
                logger_to_use,
                app_settings,
            )
        else:
            log_ops(
                f"{symbols.get('warning', '!')} WARNING: Using default database password. This is INSECURE.",
                "warning",
                logger_to_use,
                app_settings,
            )

    log_ops(
        f"{symbols.get('package', '📦')} Starting database container '{db.name}' from {db.image}...",
        "info",
        logger_to_use,
        app_settings,
    )

    try:
        if container_exists(app_settings, logger_to_use):
            log_ops(
                f"{symbols.get('warning', '!')} Container '{db.name}' already exists; not recreating it.",
                "warning",
                logger_to_use,
                app_settings,
            )
            return True
    except OSError as e:
        log_ops(
            f"{symbols.get('error', '❌')} Container runtime '{app_settings.container_runtime_command}' unavailable: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        return False

    if not ensure_network(app_settings, logger_to_use):
        return False

    try:
        result = run_command(
            build_run_command(app_settings),
            app_settings,
            capture_output=True,
            current_logger=logger_to_use,
            redact=list(db.environment.values()),
        )
    except subprocess.CalledProcessError as e:
        # str(e) would repeat the unredacted command line
        log_ops(
            f"{symbols.get('error', '❌')} Failed to start database container '{db.name}' (rc {e.returncode}).",
            "error",
            logger_to_use,
            app_settings,
        )
        return False
    except OSError as e:
        log_ops(
            f"{symbols.get('error', '❌')} Failed to start database container '{db.name}': {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        return False

    container_id = (result.stdout or "").strip()
    log_ops(
        f"{symbols.get('success', '✅')} Database container '{db.name}' started{f' ({container_id[:12]})' if container_id else ''}, "
        f"listening on host port {db.host_port}.",
        "success",
        logger_to_use,
        app_settings,
    )
    return True
