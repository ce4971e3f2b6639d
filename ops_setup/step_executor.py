# ops_setup/step_executor.py
# -*- coding: utf-8 -*-
"""
Provides functionality to execute setup steps and ordered step sequences.

A step is a callable taking (app_settings, logger). It fails when it returns
False or raises; any other return value counts as success.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

from ops_common.command_utils import get_symbols, log_ops
from ops_setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)

StepFunction = Callable[[AppSettings, Optional[logging.Logger]], Any]
StepDefinition = Tuple[str, str, StepFunction]


def execute_step(
    step_tag: str,
    step_description: str,
    step_function: StepFunction,
    app_settings: AppSettings,
    current_logger_instance: Optional[logging.Logger] = None,
) -> bool:
    """
    Execute a single step.

    Args:
        step_tag: A unique string identifier for the step.
        step_description: A human-readable description of the step.
        step_function: The function to call to execute the step.
        app_settings: The application settings object.
        current_logger_instance: The logger instance to use.

    Returns:
        True if the step succeeded, False if it returned False or raised.
    """
    logger_to_use = (
        current_logger_instance if current_logger_instance else module_logger
    )
    symbols = get_symbols(app_settings)

    log_ops(
        f"--- {symbols.get('step', '➡️')} Executing: {step_description} ({step_tag}) ---",
        "info",
        logger_to_use,
        app_settings,
    )
    try:
        step_result = step_function(app_settings, logger_to_use)
    except Exception as e:
        log_ops(
            f"{symbols.get('error', '❌')} FAILED: {step_description} ({step_tag})",
            "error",
            logger_to_use,
            app_settings,
        )
        log_ops(
            f"   Error details: {str(e)}",
            "error",
            logger_to_use,
            app_settings,
            exc_info=True,
        )
        return False

    if step_result is False:
        log_ops(
            f"{symbols.get('error', '❌')} Step function returned False: {step_description} ({step_tag})",
            "error",
            logger_to_use,
            app_settings,
        )
        return False

    log_ops(
        f"--- {symbols.get('success', '✅')} Successfully completed: {step_description} ({step_tag}) ---",
        "success",
        logger_to_use,
        app_settings,
    )
    return True


def run_step_sequence(
    sequence_name: str,
    steps: List[StepDefinition],
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
    strict: bool = False,
) -> bool:
    """
    Run steps in order.

    In best-effort mode (the default) every step runs regardless of earlier
    failures. In strict mode the remaining steps are skipped after the first
    failure.

    Returns:
        True only if every step that ran succeeded and none were skipped.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    failed_steps: List[str] = []

    log_ops(
        f"{symbols.get('rocket', '🚀')}====== Starting {sequence_name} ======",
        "info",
        logger_to_use,
        app_settings,
    )
    for tag, description, func_ref in steps:
        if failed_steps and strict:
            log_ops(
                f"{symbols.get('warning', '!')} Skipping '{description}' ({tag}) due to previous failure.",
                "warning",
                logger_to_use,
                app_settings,
            )
            continue
        if not execute_step(
            tag, description, func_ref, app_settings, logger_to_use
        ):
            failed_steps.append(tag)

    if failed_steps:
        log_ops(
            f"{symbols.get('critical', '🔥')} {sequence_name} finished with failed step(s): {', '.join(failed_steps)}",
            "critical",
            logger_to_use,
            app_settings,
        )
        return False

    log_ops(
        f"{symbols.get('sparkles', '✨')} {sequence_name} completed successfully.",
        "success",
        logger_to_use,
        app_settings,
    )
    return True
