import subprocess

import pytest

from ops_setup.config_models import AppSettings, DatabaseContainerSettings
from ops_setup.services.database_container import (
    build_run_command,
    ensure_network,
    start_database_container,
)


def _completed(command, returncode=0, stdout=""):
    return subprocess.CompletedProcess(command, returncode, stdout=stdout, stderr="")


@pytest.fixture
def runtime(mocker):
    """
    Fake container runtime. `state` controls which objects exist and which
    commands fail.
    """
    state = {"container": False, "network": False, "run_fails": False}
    commands = []

    def fake_run_command(command, *args, **kwargs):
        commands.append(list(command))
        if command[1:3] == ["container", "inspect"]:
            return _completed(command, 0 if state["container"] else 1)
        if command[1:3] == ["network", "inspect"]:
            return _completed(command, 0 if state["network"] else 1)
        if command[1] == "run" and state["run_fails"]:
            raise subprocess.CalledProcessError(125, command, output="", stderr="port in use")
        return _completed(command, stdout="0123456789abcdef\n")

    mock = mocker.patch(
        "ops_setup.services.database_container.run_command",
        side_effect=fake_run_command,
    )
    mock.state = state
    mock.commands = commands
    return mock


def test_build_run_command_defaults():
    settings = AppSettings(
        db_container=DatabaseContainerSettings(environment={"MYSQL_ROOT_PASSWORD": "pw"})
    )

    assert build_run_command(settings) == [
        "docker", "run", "-d",
        "--name", "mariadb",
        "--network", "frappe_network",
        "-p", "3306:3306",
        "-e", "MYSQL_ROOT_PASSWORD=pw",
        "-v", "mariadb_data:/var/lib/mysql",
        "mariadb:10.6",
    ]


def test_build_run_command_sorted_env_and_restart_policy():
    settings = AppSettings(
        container_runtime_command="podman",
        db_container=DatabaseContainerSettings(
            name="db",
            image="postgres:16",
            network="backend",
            host_port=15432,
            container_port=5432,
            volume="pgdata",
            data_path="/var/lib/postgresql/data",
            environment={"POSTGRES_USER": "app", "POSTGRES_PASSWORD": "pw"},
            restart_policy="unless-stopped",
        ),
    )

    command = build_run_command(settings)

    assert command[0] == "podman"
    assert command[command.index("-p") + 1] == "15432:5432"
    env_values = [command[i + 1] for i, part in enumerate(command) if part == "-e"]
    assert env_values == ["POSTGRES_PASSWORD=pw", "POSTGRES_USER=app"]
    assert command[-3:] == ["--restart", "unless-stopped", "postgres:16"]


def test_start_creates_network_then_runs(app_settings, runtime, mock_logger):
    assert start_database_container(app_settings, mock_logger) is True

    assert runtime.commands == [
        ["docker", "container", "inspect", "mariadb"],
        ["docker", "network", "inspect", "frappe_network"],
        ["docker", "network", "create", "frappe_network"],
        build_run_command(app_settings),
    ]
    run_call = runtime.call_args_list[-1]
    assert run_call.kwargs["redact"] == ["s3cret"]


def test_start_skips_network_creation_when_present(app_settings, runtime, mock_logger):
    runtime.state["network"] = True

    assert start_database_container(app_settings, mock_logger) is True
    assert ["docker", "network", "create", "frappe_network"] not in runtime.commands


def test_start_leaves_existing_container_alone(app_settings, runtime, mock_logger):
    runtime.state["container"] = True

    assert start_database_container(app_settings, mock_logger) is True
    assert runtime.commands == [["docker", "container", "inspect", "mariadb"]]
    mock_logger.warning.assert_called_once_with(
        "! Container 'mariadb' already exists; not recreating it.", exc_info=False
    )


def test_start_run_failure(app_settings, runtime, mock_logger):
    runtime.state["run_fails"] = True

    assert start_database_container(app_settings, mock_logger) is False
    mock_logger.error.assert_called_once_with(
        "❌ Failed to start database container 'mariadb' (rc 125).", exc_info=False
    )


def test_start_runtime_missing(app_settings, mocker, mock_logger):
    mocker.patch(
        "ops_setup.services.database_container.run_command",
        side_effect=FileNotFoundError(2, "No such file", "docker"),
    )

    assert start_database_container(app_settings, mock_logger) is False


def test_start_warns_on_default_password(runtime, mock_logger):
    settings = AppSettings()
    runtime.state["network"] = True

    start_database_container(settings, mock_logger)

    mock_logger.warning.assert_any_call(
        "⚠️ WARNING: Using default database password. This is INSECURE.", exc_info=False
    )


def test_start_dev_override_on_default_password(runtime, mock_logger):
    settings = AppSettings(dev_override_unsafe_password=True)
    runtime.state["network"] = True

    start_database_container(settings, mock_logger)

    mock_logger.warning.assert_any_call(
        "⚠️ DEV OVERRIDE: Using default database password.", exc_info=False
    )


def test_ensure_network_disabled(app_settings, runtime):
    app_settings.db_container.create_network = False

    assert ensure_network(app_settings) is True
    assert runtime.commands == []


def test_ensure_network_create_failure(app_settings, mocker, mock_logger):
    def fake_run_command(command, *args, **kwargs):
        if command[2] == "inspect":
            return _completed(command, 1)
        raise subprocess.CalledProcessError(1, command)

    mocker.patch(
        "ops_setup.services.database_container.run_command",
        side_effect=fake_run_command,
    )

    assert ensure_network(app_settings, mock_logger) is False
    mock_logger.error.assert_called_once()
