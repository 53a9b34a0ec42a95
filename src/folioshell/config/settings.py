"""Configuration management for folioshell.

Loads settings from a YAML configuration file with environment variable
overrides for sensitive values (escalation secret, database credentials).
Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

import yaml
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings

from folioshell.domain.models import ClientConfig, LinkSpec, TerminalOptions

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/folioshell.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    static_dir: str | None = Field(default=None, description="Directory served at / when set")


class DatabaseConfig(BaseModel):
    url: str | None = Field(default=None, description="Full SQLAlchemy URL, wins over the parts below")
    user: str | None = Field(default=None)
    password: SecretStr = Field(default=SecretStr(""))
    host: str | None = Field(default=None)
    port: int = Field(default=5432, ge=1, le=65535)
    database: str | None = Field(default=None)
    ssl_cert: str | None = Field(default=None, description="CA certificate file for verify-full TLS")
    sqlite_path: str = Field(default="folioshell.db")

    def sqlalchemy_url(self) -> str:
        """Build the connection URL, PostgreSQL when host parts are set."""
        if self.url:
            return self.url
        if self.host and self.user and self.database:
            password = quote_plus(self.password.get_secret_value())
            ssl = "sslmode=require"
            if self.ssl_cert:
                ssl = f"sslmode=verify-full&sslrootcert={quote_plus(self.ssl_cert)}"
            return (
                f"postgresql+psycopg://{quote_plus(self.user)}:{password}"
                f"@{self.host}:{self.port}/{self.database}?{ssl}"
            )
        return f"sqlite:///{self.sqlite_path}"


class MotdConfig(BaseModel):
    path: str = Field(default="config/motd.txt")
    serialize_writes: bool = Field(
        default=True,
        description="Hold a lock around MOTD read-modify-write; off means last writer wins",
    )


class TerminalConfig(BaseModel):
    storage_key: str = Field(default="folioshell_command_history")
    max_history_size: int = Field(default=100, gt=0)
    poll_interval: float = Field(default=2.0, gt=0)


class ConsoleConfig(BaseModel):
    base_url: str = Field(default="http://localhost:3000")
    timeout: float = Field(default=10.0, gt=0)
    state_dir: str = Field(default="~/.folioshell")
    domain: str | None = Field(default=None, description="Host shown in the prompt, defaults to base_url host")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the folioshell system.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "FOLIOSHELL_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Secrets
    sudo_password: SecretStr = Field(default=SecretStr(""))

    # Configuration sections
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    motd: MotdConfig = Field(default_factory=MotdConfig)
    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    console: ConsoleConfig = Field(default_factory=ConsoleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Site data served to clients
    links: dict[str, LinkSpec] = Field(default_factory=dict)
    weather_codes: dict[str, str] = Field(default_factory=dict)
    date_format: dict[str, Any] = Field(default_factory=dict)

    def link_table(self) -> dict[str, LinkSpec]:
        """Links with their ``key`` filled in from the mapping."""
        return {k: v.model_copy(update={"key": k}) for k, v in self.links.items()}

    def client_config(self) -> ClientConfig:
        """The ``/api/config`` payload. Sudo-only links are never published."""
        return ClientConfig(
            links={k: v for k, v in self.link_table().items() if not v.sudo_only},
            weather_codes=self.weather_codes,
            date_format=self.date_format,
            terminal=TerminalOptions(
                storage_key=self.terminal.storage_key,
                max_history_size=self.terminal.max_history_size,
            ),
        )


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    # Load .env file manually for non-prefixed vars
    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if not os.environ.get(key):
                    os.environ[key] = value


# Conventional deployment variables -> (section, field)
_DATABASE_ENV = {
    "DATABASE_URL": "url",
    "DB_USER": "user",
    "DB_PASSWORD": "password",
    "DB_HOST": "host",
    "DB_PORT": "port",
    "DB_DATABASE": "database",
    "DB_SSL_CERT": "ssl_cert",
}


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars."""
    sudo_password = os.environ.get("SUDO_PASSWORD", "")
    port = os.environ.get("PORT", "")

    if sudo_password:
        yaml_data["sudo_password"] = sudo_password

    if port:
        yaml_data.setdefault("server", {})["port"] = port

    for env_name, field in _DATABASE_ENV.items():
        value = os.environ.get(env_name, "")
        if value:
            yaml_data.setdefault("database", {})[field] = value
