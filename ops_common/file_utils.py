# ops_common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions that act on root-owned locations.

Each helper runs the underlying command with elevated privileges, logs the
outcome and reports success as a boolean instead of raising.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from ops_setup.config_models import AppSettings

from .command_utils import get_symbols, log_ops, run_elevated_command

module_logger = logging.getLogger(__name__)


def elevated_remove_file(
    file_path: Path,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Remove a file with `rm -f`. A missing file is not an error.

    Returns:
        bool: True if the file is gone afterwards, False if `rm` failed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    try:
        run_elevated_command(
            ["rm", "-f", str(file_path)],
            app_settings,
            capture_output=True,
            current_logger=logger_to_use,
        )
        log_ops(
            f"{symbols.get('success', '✅')} Removed {file_path} (if present).",
            "success",
            logger_to_use,
            app_settings,
        )
        return True
    except (subprocess.CalledProcessError, OSError) as e:
        log_ops(
            f"{symbols.get('error', '❌')} Failed to remove {file_path}: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        return False


def elevated_make_directory(
    dir_path: Path,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """Create a directory and its parents with `mkdir -p`."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    try:
        run_elevated_command(
            ["mkdir", "-p", str(dir_path)],
            app_settings,
            capture_output=True,
            current_logger=logger_to_use,
        )
        log_ops(
            f"{symbols.get('success', '✅')} Ensured directory exists: {dir_path}",
            "success",
            logger_to_use,
            app_settings,
        )
        return True
    except (subprocess.CalledProcessError, OSError) as e:
        log_ops(
            f"{symbols.get('error', '❌')} Failed to create directory {dir_path}: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        return False


def elevated_copy_files(
    source_files: Sequence[Path],
    target_dir: Path,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Copy each file into target_dir with a separate `cp` call.

    Every file is attempted even when an earlier copy fails.

    Returns:
        bool: True only if every copy succeeded.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    all_copied = True

    for source in source_files:
        try:
            run_elevated_command(
                ["cp", str(source), f"{target_dir}/"],
                app_settings,
                capture_output=True,
                current_logger=logger_to_use,
            )
            log_ops(
                f"{symbols.get('success', '✅')} Copied {source} to {target_dir}",
                "success",
                logger_to_use,
                app_settings,
            )
        except (subprocess.CalledProcessError, OSError) as e:
            log_ops(
                f"{symbols.get('error', '❌')} Failed to copy {source} to {target_dir}: {e}",
                "error",
                logger_to_use,
                app_settings,
            )
            all_copied = False

    return all_copied


def elevated_chmod_directory_files(
    dir_path: Path,
    mode: str,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Apply `mode` to every regular file directly inside dir_path.

    Uses `find` so the directory listing also happens with elevated
    privileges; subdirectories are left untouched.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    try:
        run_elevated_command(
            [
                "find",
                str(dir_path),
                "-maxdepth",
                "1",
                "-type",
                "f",
                "-exec",
                "chmod",
                mode,
                "{}",
                "+",
            ],
            app_settings,
            capture_output=True,
            current_logger=logger_to_use,
        )
        log_ops(
            f"{symbols.get('success', '✅')} Set mode {mode} on files in {dir_path}",
            "success",
            logger_to_use,
            app_settings,
        )
        return True
    except (subprocess.CalledProcessError, OSError) as e:
        log_ops(
            f"{symbols.get('error', '❌')} Failed to set mode {mode} on files in {dir_path}: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        return False
