import logging
from unittest.mock import MagicMock

import pytest

from ops_setup.config_models import (
    AppSettings,
    CloudflaredSettings,
    DatabaseContainerSettings,
)


@pytest.fixture
def mock_logger():
    """Fixture to create a mock logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def operator_dir(tmp_path):
    """An operator cloudflared directory with config, cert and two credentials."""
    source = tmp_path / "home" / ".cloudflared"
    source.mkdir(parents=True)
    (source / "config.yml").write_text("tunnel: abc\n")
    (source / "cert.pem").write_text("-----BEGIN CERTIFICATE-----\n")
    (source / "b-tunnel.json").write_text("{}")
    (source / "a-tunnel.json").write_text("{}")
    (source / "notes.txt").write_text("not deployed")
    return source


@pytest.fixture
def app_settings(tmp_path, operator_dir):
    """AppSettings pointing at temporary directories."""
    return AppSettings(
        cloudflared=CloudflaredSettings(
            source_dir=operator_dir,
            target_dir=tmp_path / "etc" / "cloudflared",
        ),
        db_container=DatabaseContainerSettings(
            environment={"MYSQL_ROOT_PASSWORD": "s3cret"},
        ),
        symbols={
            "success": "✅",
            "error": "❌",
            "warning": "!",
            "info": "ℹ️",
            "gear": "⚙️",
        },
    )
