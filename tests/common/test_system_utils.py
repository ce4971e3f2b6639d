import subprocess

from ops_common.system_utils import is_running_as_root, systemd_reload


def test_systemd_reload_success(mocker, mock_logger):
    mock_run = mocker.patch("ops_common.system_utils.run_elevated_command")

    assert systemd_reload(None, mock_logger) is True
    mock_run.assert_called_once_with(
        ["systemctl", "daemon-reload"],
        None,
        current_logger=mock_logger,
    )
    mock_logger.info.assert_any_call(
        "✅ Systemd daemon reloaded.", exc_info=False
    )


def test_systemd_reload_failure(mocker, mock_logger):
    mocker.patch(
        "ops_common.system_utils.run_elevated_command",
        side_effect=subprocess.CalledProcessError(1, ["systemctl"]),
    )

    assert systemd_reload(None, mock_logger) is False
    mock_logger.error.assert_called_once()


def test_is_running_as_root(mocker):
    mocker.patch("ops_common.system_utils.os.geteuid", return_value=0)
    assert is_running_as_root() is True
    mocker.patch("ops_common.system_utils.os.geteuid", return_value=1000)
    assert is_running_as_root() is False
