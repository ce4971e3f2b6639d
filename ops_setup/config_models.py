# ops_setup/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for application configuration.

This module defines the structured settings for the host operations
scripts, including defaults, type annotations, and descriptions.
It utilizes Pydantic for data validation and settings management.
"""

import os
import re
from pathlib import Path
from pwd import getpwnam
from typing import Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ops_setup import config as static_config

# --- Default Static Values (can be overridden by config file/env/cli) ---
LOG_PREFIX_DEFAULT: str = static_config.LOG_PREFIX
CONTAINER_RUNTIME_COMMAND_DEFAULT: str = "docker"

CLOUDFLARED_BINARY_DEFAULT: str = "cloudflared"
CLOUDFLARED_SERVICE_NAME_DEFAULT: str = "cloudflared"
CLOUDFLARED_TARGET_DIR_DEFAULT: str = "/etc/cloudflared"
CLOUDFLARED_CONFIG_FILE_DEFAULT: str = "config.yml"
CLOUDFLARED_CERT_FILE_DEFAULT: str = "cert.pem"
CLOUDFLARED_CREDENTIALS_GLOB_DEFAULT: str = "*.json"
# cloudflared refuses credentials readable by other users
CLOUDFLARED_FILE_MODE_DEFAULT: str = "600"

DB_CONTAINER_NAME_DEFAULT: str = "mariadb"
DB_CONTAINER_IMAGE_DEFAULT: str = "mariadb:10.6"
DB_CONTAINER_NETWORK_DEFAULT: str = "frappe_network"
DB_CONTAINER_HOST_PORT_DEFAULT: int = 3306
DB_CONTAINER_PORT_DEFAULT: int = 3306
DB_CONTAINER_VOLUME_DEFAULT: str = "mariadb_data"
DB_CONTAINER_DATA_PATH_DEFAULT: str = "/var/lib/mysql"
DB_ROOT_PASSWORD_DEFAULT: str = "changeme"

SYMBOLS_DEFAULT: Dict[str, str] = dict(static_config.SYMBOLS)


def invoking_user_home() -> Path:
    """
    Home directory of the operator. Under sudo this is SUDO_USER's home,
    not root's, matching what `~` expands to in the operator's own shell.
    """
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user and os.geteuid() == 0:
        try:
            return Path(getpwnam(sudo_user).pw_dir)
        except KeyError:
            pass
    return Path.home()


def _default_cloudflared_source_dir() -> Path:
    return invoking_user_home() / ".cloudflared"


class CloudflaredSettings(BaseSettings):
    """Tunnel daemon redeploy settings."""
    model_config = SettingsConfigDict(
        env_prefix='CLOUDFLARED_',
        extra='ignore'
    )

    binary: str = Field(default=CLOUDFLARED_BINARY_DEFAULT, description="cloudflared executable name or path.")
    service_name: str = Field(default=CLOUDFLARED_SERVICE_NAME_DEFAULT,
                              description="systemd unit name created by 'cloudflared service install'.")
    source_dir: Path = Field(default_factory=_default_cloudflared_source_dir,
                             description="Operator directory holding config.yml, cert.pem and credential files.")
    target_dir: Path = Field(default=Path(CLOUDFLARED_TARGET_DIR_DEFAULT),
                             description="System directory read by the cloudflared service.")
    config_file_name: str = Field(default=CLOUDFLARED_CONFIG_FILE_DEFAULT, description="Tunnel configuration file.")
    cert_file_name: str = Field(default=CLOUDFLARED_CERT_FILE_DEFAULT, description="Origin certificate file.")
    credentials_glob: str = Field(default=CLOUDFLARED_CREDENTIALS_GLOB_DEFAULT,
                                  description="Glob matching tunnel credential files in source_dir.")
    file_mode: str = Field(default=CLOUDFLARED_FILE_MODE_DEFAULT,
                           description="Octal permission bits applied to every file in target_dir.")

    @field_validator("file_mode", mode="before")
    @classmethod
    def _validate_file_mode(cls, value):
        # YAML reads an unquoted 0600 as the octal integer 384
        if isinstance(value, int):
            raise ValueError(f"file_mode must be quoted (e.g. file_mode: \"0600\"), got the number {value}")
        value = str(value)
        if not re.fullmatch(r"[0-7]{3,4}", value):
            raise ValueError(f"file_mode must be an octal permission string, got '{value}'")
        return value


class DatabaseContainerSettings(BaseSettings):
    """Database container settings."""
    model_config = SettingsConfigDict(
        env_prefix='DB_CONTAINER_',
        extra='ignore'
    )

    name: str = Field(default=DB_CONTAINER_NAME_DEFAULT, description="Container name.")
    image: str = Field(default=DB_CONTAINER_IMAGE_DEFAULT, description="Image and tag to run.")
    network: str = Field(default=DB_CONTAINER_NETWORK_DEFAULT, description="Container network to attach to.")
    host_port: int = Field(default=DB_CONTAINER_HOST_PORT_DEFAULT, ge=1, le=65535, description="Published host port.")
    container_port: int = Field(default=DB_CONTAINER_PORT_DEFAULT, ge=1, le=65535,
                                description="Port the database listens on inside the container.")
    volume: str = Field(default=DB_CONTAINER_VOLUME_DEFAULT, description="Named volume for persistent data.")
    data_path: str = Field(default=DB_CONTAINER_DATA_PATH_DEFAULT, description="Data directory inside the container.")
    environment: Dict[str, str] = Field(
        default_factory=lambda: {"MYSQL_ROOT_PASSWORD": DB_ROOT_PASSWORD_DEFAULT},
        description="Environment variables passed with -e.",
    )
    restart_policy: Optional[str] = Field(default=None, description="Optional --restart policy (e.g. unless-stopped).")
    create_network: bool = Field(default=True, description="Create the network first if it does not exist.")


class AppSettings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(extra='ignore')

    log_prefix: str = Field(default=LOG_PREFIX_DEFAULT, description="Prefix for log messages.")
    dev_override_unsafe_password: bool = Field(default=False,
                                               description="DEV FLAG: Allow default database credentials without warnings.")
    container_runtime_command: str = Field(default=CONTAINER_RUNTIME_COMMAND_DEFAULT,
                                           description="Command for the container runtime CLI (e.g., docker, podman).")

    cloudflared: CloudflaredSettings = Field(default_factory=CloudflaredSettings)
    db_container: DatabaseContainerSettings = Field(default_factory=DatabaseContainerSettings)

    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))

    def uses_default_db_password(self) -> bool:
        return DB_ROOT_PASSWORD_DEFAULT in self.db_container.environment.values()
