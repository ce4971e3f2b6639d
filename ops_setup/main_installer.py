# ops_setup/main_installer.py
# -*- coding: utf-8 -*-
"""
Main entry point for the host operations scripts.

Handles argument parsing, logging setup and configuration loading, then runs
the requested procedures in a fixed order: the cloudflared redeploy first,
then the database container start.
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional, Tuple

from ops_common.command_utils import log_ops
from ops_common.logging_config import setup_logging
from ops_common.system_utils import is_running_as_root
from ops_setup import config
from ops_setup.cli_handler import view_configuration
from ops_setup.config_loader import load_app_settings
from ops_setup.config_models import AppSettings
from ops_setup.services.cloudflared import redeploy_cloudflared
from ops_setup.services.database_container import start_database_container

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostops",
        description="Host operations: redeploy the cloudflared tunnel configuration and start the database container.",
        epilog="Example: hostops --redeploy-tunnel --strict",
    )
    parser.add_argument("--redeploy-tunnel", action="store_true",
                        help="Reinstall cloudflared with fresh config, certificate and credentials.")
    parser.add_argument("--start-db", action="store_true", help="Start the database container.")
    parser.add_argument("--all", action="store_true", help="Run the tunnel redeploy, then start the database.")
    parser.add_argument("--view-config", action="store_true", help="View current configuration settings and exit.")
    parser.add_argument("--strict", action="store_true",
                        help="Stop at the first failed step instead of continuing with the rest.")

    runtime_group = parser.add_argument_group("Runtime Options")
    runtime_group.add_argument("-c", "--config-file", default="config.yaml",
                               help="YAML configuration file (default: %(default)s).")
    runtime_group.add_argument("--log-level", default=None,
                               help="Log level (DEBUG, INFO, ...). Defaults to $LOGLEVEL or INFO.")
    runtime_group.add_argument("--log-file", default=None, help="Also write JSON log records to this file.")
    runtime_group.add_argument("-l", "--log-prefix", default=None, help="Prefix for console log lines.")

    cf_group = parser.add_argument_group("cloudflared Overrides")
    cf_group.add_argument("--cloudflared-binary", default=None, help="cloudflared executable.")
    cf_group.add_argument("--cloudflared-source-dir", default=None,
                          help="Operator directory with config.yml, cert.pem and credential files.")
    cf_group.add_argument("--cloudflared-target-dir", default=None, help="System configuration directory.")

    db_group = parser.add_argument_group("Database Container Overrides")
    db_group.add_argument("--container-runtime-command", default=None, help="Container runtime CLI (docker, podman).")
    db_group.add_argument("--db-name", default=None, help="Container name.")
    db_group.add_argument("--db-image", default=None, help="Image and tag.")
    db_group.add_argument("--db-network", default=None, help="Container network.")
    db_group.add_argument("--db-host-port", type=int, default=None, help="Published host port.")
    db_group.add_argument("--db-volume", default=None, help="Named data volume.")

    dev_group = parser.add_argument_group("Developer and Advanced Options")
    dev_group.add_argument("--dev-override-unsafe-password", action="store_true", default=None,
                           dest="dev_override_unsafe_password",
                           help="DEV FLAG: Allow the default database password and suppress related warnings.")
    return parser


def main_entry(args: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 2

    setup_logging(
        log_prefix=parsed_args.log_prefix or config.LOG_PREFIX,
        log_level=parsed_args.log_level,
        log_file_path=parsed_args.log_file,
    )

    try:
        app_settings = load_app_settings(
            cli_args=parsed_args,
            config_file_path=parsed_args.config_file,
            current_logger=logger,
        )
    except SystemExit as e:
        log_ops(f"{config.SYMBOLS['critical']} {e}", "critical", logger)
        return 1

    symbols = app_settings.symbols
    log_ops(
        f"{symbols.get('sparkles', '✨')} Starting host operations (Script Version: {config.SCRIPT_VERSION})...",
        "info",
        logger,
        app_settings,
    )

    if parsed_args.view_config:
        view_configuration(app_settings, current_logger=logger)
        return 0

    tasks: List[Tuple[str, Callable[[AppSettings, Optional[logging.Logger]], bool]]] = []
    if parsed_args.redeploy_tunnel or parsed_args.all:
        tasks.append((
            "cloudflared redeploy",
            lambda settings, log: redeploy_cloudflared(settings, log, strict=parsed_args.strict),
        ))
    if parsed_args.start_db or parsed_args.all:
        tasks.append(("database container start", start_database_container))

    if not tasks:
        log_ops(
            f"{symbols.get('info', 'ℹ️')} No action specified. Displaying help.",
            "info",
            logger,
            app_settings,
        )
        parser.print_help(file=sys.stderr)
        return 2

    if is_running_as_root():
        log_ops(f"{symbols.get('info', 'ℹ️')} Script is running as root.", "info", logger, app_settings)
    else:
        log_ops(
            f"{symbols.get('info', 'ℹ️')} Script not run as root. 'sudo' will be used for system changes.",
            "info",
            logger,
            app_settings,
        )

    overall_success = True
    for description, task_func in tasks:
        if not overall_success and parsed_args.strict:
            log_ops(
                f"{symbols.get('warning', '!')} Skipping '{description}' due to previous failure.",
                "warning",
                logger,
                app_settings,
            )
            continue
        if not task_func(app_settings, logger):
            overall_success = False
            log_ops(f"{symbols.get('error', '❌')} '{description}' failed.", "error", logger, app_settings)

    if not overall_success:
        log_ops(f"{symbols.get('critical', '🔥')} One or more operations failed.", "critical", logger, app_settings)
        return 1
    log_ops(
        f"{symbols.get('sparkles', '✨')} All requested operations completed successfully.",
        "success",
        logger,
        app_settings,
    )
    return 0


def main() -> None:
    sys.exit(main_entry())


if __name__ == "__main__":
    main()
