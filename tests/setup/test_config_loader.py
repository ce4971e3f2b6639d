# -*- coding: utf-8 -*-
"""
Tests for the config_loader module.
"""

import argparse
from pathlib import Path

import pytest
import yaml

from ops_setup.config_loader import _deep_update, load_app_settings, load_service_config
from ops_setup.config_models import (
    CLOUDFLARED_TARGET_DIR_DEFAULT,
    DB_CONTAINER_IMAGE_DEFAULT,
    DB_ROOT_PASSWORD_DEFAULT,
)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_yaml(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


def test_deep_update_merges_nested_and_ignores_none():
    source = {"a": {"x": 1, "y": 2}, "b": 1}
    result = _deep_update(source, {"a": {"y": 3}, "b": None, "c": None})
    assert result == {"a": {"x": 1, "y": 3}, "b": 1, "c": None}


def test_deep_update_replaces_environment_mapping():
    source = {"db_container": {"environment": {"MYSQL_ROOT_PASSWORD": "x"}}}
    _deep_update(source, {"db_container": {"environment": {"MARIADB_ROOT_PASSWORD": "y"}}})
    assert source["db_container"]["environment"] == {"MARIADB_ROOT_PASSWORD": "y"}


def test_defaults_without_config_file(workdir, monkeypatch):
    monkeypatch.delenv("SUDO_USER", raising=False)
    settings = load_app_settings()

    assert settings.cloudflared.target_dir == Path(CLOUDFLARED_TARGET_DIR_DEFAULT)
    assert settings.cloudflared.source_dir == Path.home() / ".cloudflared"
    assert settings.db_container.image == DB_CONTAINER_IMAGE_DEFAULT
    assert settings.db_container.environment == {"MYSQL_ROOT_PASSWORD": DB_ROOT_PASSWORD_DEFAULT}
    assert settings.uses_default_db_password() is True


def test_environment_variables_are_read(workdir, monkeypatch):
    monkeypatch.setenv("DB_CONTAINER_IMAGE", "mariadb:11.4")
    monkeypatch.setenv("CLOUDFLARED_FILE_MODE", "640")

    settings = load_app_settings()

    assert settings.db_container.image == "mariadb:11.4"
    assert settings.cloudflared.file_mode == "640"


def test_yaml_overrides_environment(workdir, monkeypatch):
    monkeypatch.setenv("DB_CONTAINER_IMAGE", "mariadb:11.4")
    _write_yaml(
        workdir / "config.yaml",
        {
            "db_container": {
                "image": "mariadb:10.11",
                "environment": {"MARIADB_ROOT_PASSWORD": "strong"},
            },
            "cloudflared": {"target_dir": "/srv/cloudflared"},
        },
    )

    settings = load_app_settings()

    assert settings.db_container.image == "mariadb:10.11"
    assert settings.db_container.environment == {"MARIADB_ROOT_PASSWORD": "strong"}
    assert settings.uses_default_db_password() is False
    assert settings.cloudflared.target_dir == Path("/srv/cloudflared")
    assert settings.cloudflared.config_file_name == "config.yml"


def test_service_file_overrides_main_yaml(workdir):
    _write_yaml(workdir / "config.yaml", {"db_container": {"name": "from-main", "host_port": 3307}})
    _write_yaml(workdir / "config_files" / "db_container.yaml", {"name": "from-service-file"})

    settings = load_app_settings()

    assert settings.db_container.name == "from-service-file"
    assert settings.db_container.host_port == 3307


def test_cli_overrides_yaml(workdir):
    _write_yaml(workdir / "config.yaml", {"db_container": {"name": "from-yaml"}})
    cli_args = argparse.Namespace(
        db_name="from-cli",
        db_host_port=13306,
        cloudflared_target_dir=None,
        container_runtime_command="podman",
        redeploy_tunnel=True,
    )

    settings = load_app_settings(cli_args=cli_args)

    assert settings.db_container.name == "from-cli"
    assert settings.db_container.host_port == 13306
    assert settings.container_runtime_command == "podman"
    assert settings.cloudflared.target_dir == Path(CLOUDFLARED_TARGET_DIR_DEFAULT)


def test_explicit_absolute_config_path(tmp_path, workdir):
    other = tmp_path / "elsewhere"
    _write_yaml(other / "ops.yaml", {"container_runtime_command": "podman"})

    settings = load_app_settings(config_file_path=str(other / "ops.yaml"))

    assert settings.container_runtime_command == "podman"


def test_non_mapping_yaml_is_ignored(workdir, mock_logger):
    (workdir / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    settings = load_app_settings(current_logger=mock_logger)

    assert settings.db_container.image == DB_CONTAINER_IMAGE_DEFAULT
    mock_logger.warning.assert_called_once()


def test_invalid_yaml_is_ignored(workdir, mock_logger):
    (workdir / "config.yaml").write_text("db_container: [unclosed\n", encoding="utf-8")

    settings = load_app_settings(current_logger=mock_logger)

    assert settings.db_container.name == "mariadb"
    mock_logger.warning.assert_called_once()


def test_invalid_file_mode_aborts(workdir):
    _write_yaml(workdir / "config.yaml", {"cloudflared": {"file_mode": "rw-------"}})

    with pytest.raises(SystemExit, match="Configuration error"):
        load_app_settings()


@pytest.mark.parametrize("raw_mode", ["600", "0600"])
def test_unquoted_file_mode_is_rejected(workdir, raw_mode):
    (workdir / "config.yaml").write_text(f"cloudflared:\n  file_mode: {raw_mode}\n", encoding="utf-8")

    with pytest.raises(SystemExit, match="file_mode must be quoted"):
        load_app_settings()


def test_quoted_file_mode_with_leading_zero(workdir):
    (workdir / "config.yaml").write_text('cloudflared:\n  file_mode: "0600"\n', encoding="utf-8")

    assert load_app_settings().cloudflared.file_mode == "0600"


def test_default_source_dir_follows_sudo_user(workdir, monkeypatch, mocker):
    monkeypatch.setenv("HOME", "/root")
    monkeypatch.setenv("SUDO_USER", "operator")
    mocker.patch("ops_setup.config_models.os.geteuid", return_value=0)
    mock_getpwnam = mocker.patch("ops_setup.config_models.getpwnam")
    mock_getpwnam.return_value.pw_dir = "/home/operator"

    settings = load_app_settings()

    assert settings.cloudflared.source_dir == Path("/home/operator/.cloudflared")
    mock_getpwnam.assert_called_once_with("operator")


def test_default_source_dir_unknown_sudo_user_falls_back(workdir, monkeypatch, mocker):
    monkeypatch.setenv("HOME", "/root")
    monkeypatch.setenv("SUDO_USER", "ghost")
    mocker.patch("ops_setup.config_models.os.geteuid", return_value=0)
    mocker.patch("ops_setup.config_models.getpwnam", side_effect=KeyError("ghost"))

    assert load_app_settings().cloudflared.source_dir == Path("/root/.cloudflared")


def test_sudo_user_ignored_when_not_root(workdir, monkeypatch, mocker):
    monkeypatch.setenv("HOME", "/home/operator")
    monkeypatch.setenv("SUDO_USER", "someone")
    mocker.patch("ops_setup.config_models.os.geteuid", return_value=1000)
    mock_getpwnam = mocker.patch("ops_setup.config_models.getpwnam")

    assert load_app_settings().cloudflared.source_dir == Path("/home/operator/.cloudflared")
    mock_getpwnam.assert_not_called()


def test_load_service_config_missing_file(tmp_path):
    assert load_service_config("cloudflared", tmp_path) == {}
