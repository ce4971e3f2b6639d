from unittest.mock import MagicMock

from ops_setup.config_models import AppSettings
from ops_setup.step_executor import execute_step, run_step_sequence


def test_execute_step_success(mock_logger):
    step = MagicMock(return_value=None)
    settings = AppSettings()

    assert execute_step("TAG", "Do thing", step, settings, mock_logger) is True
    step.assert_called_once_with(settings, mock_logger)


def test_execute_step_false_return_is_failure(mock_logger):
    step = MagicMock(return_value=False)

    assert execute_step("TAG", "Do thing", step, AppSettings(), mock_logger) is False
    mock_logger.error.assert_called_once()


def test_execute_step_exception_is_failure(mock_logger):
    step = MagicMock(side_effect=RuntimeError("kaput"))

    assert execute_step("TAG", "Do thing", step, AppSettings(), mock_logger) is False
    mock_logger.error.assert_any_call("   Error details: kaput", exc_info=True)


def test_run_step_sequence_best_effort_runs_every_step(mock_logger):
    """Later steps still run after a failure when not strict."""
    calls = []
    steps = [
        ("ONE", "first", lambda s, log: calls.append("one")),
        ("TWO", "second", lambda s, log: calls.append("two") or False),
        ("THREE", "third", lambda s, log: calls.append("three")),
    ]

    result = run_step_sequence("seq", steps, AppSettings(), mock_logger)

    assert result is False
    assert calls == ["one", "two", "three"]
    mock_logger.critical.assert_called_once_with(
        "🔥 seq finished with failed step(s): TWO", exc_info=False
    )


def test_run_step_sequence_strict_stops_after_failure(mock_logger):
    calls = []
    steps = [
        ("ONE", "first", lambda s, log: calls.append("one") or False),
        ("TWO", "second", lambda s, log: calls.append("two")),
    ]

    result = run_step_sequence("seq", steps, AppSettings(), mock_logger, strict=True)

    assert result is False
    assert calls == ["one"]
    mock_logger.warning.assert_called_once()


def test_run_step_sequence_all_succeed(mock_logger):
    steps = [("ONE", "first", lambda s, log: True)]

    assert run_step_sequence("seq", steps, AppSettings(), mock_logger) is True
