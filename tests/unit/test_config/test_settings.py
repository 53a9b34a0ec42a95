"""Tests for configuration loading and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from folioshell.config.settings import (
    DatabaseConfig,
    MotdConfig,
    ServerConfig,
    Settings,
    TerminalConfig,
    load_settings,
)

ENV_VARS = ("SUDO_PASSWORD", "PORT", "DATABASE_URL", "DB_USER", "DB_PASSWORD", "DB_HOST", "DB_PORT",
            "DB_DATABASE", "DB_SSL_CERT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run from an empty directory with none of the deployment variables set."""
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_default_settings(self) -> None:
        settings = Settings()
        assert settings.server.port == 3000
        assert settings.sudo_password.get_secret_value() == ""
        assert settings.motd.serialize_writes is True
        assert settings.terminal.max_history_size == 100
        assert settings.links == {}

    def test_section_defaults(self) -> None:
        assert ServerConfig().host == "0.0.0.0"
        assert MotdConfig().path == "config/motd.txt"
        assert TerminalConfig().poll_interval == 2.0

    def test_invalid_port_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)

    def test_history_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            TerminalConfig(max_history_size=0)

    def test_client_config_hides_sudo_only_links(self) -> None:
        settings = Settings(links={
            "gh": {"name": "GitHub", "url": "https://github.com", "hidden": True},
            "fdb": {"name": "Family database", "url": "https://fdb", "sudoOnly": True},
        })
        config = settings.client_config()
        assert list(config.links) == ["gh"]
        assert config.links["gh"].key == "gh"
        assert settings.link_table()["fdb"].sudo_only is True


class TestDatabaseUrl:
    def test_sqlite_default(self) -> None:
        assert DatabaseConfig().sqlalchemy_url() == "sqlite:///folioshell.db"

    def test_explicit_url_wins(self) -> None:
        assert DatabaseConfig(url="sqlite://", host="db").sqlalchemy_url() == "sqlite://"

    def test_postgres_requires_tls(self) -> None:
        url = DatabaseConfig(user="app", password="p@ss", host="db", database="site").sqlalchemy_url()
        assert url == "postgresql+psycopg://app:p%40ss@db:5432/site?sslmode=require"

    def test_postgres_with_ca_certificate(self) -> None:
        url = DatabaseConfig(user="app", host="db", database="site", ssl_cert="/etc/ca.pem").sqlalchemy_url()
        assert url.endswith("?sslmode=verify-full&sslrootcert=%2Fetc%2Fca.pem")


class TestLoadSettings:
    def test_load_settings_missing_file(self, tmp_path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.server.port == 3000

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "folioshell.yaml"
        path.write_text(
            "server:\n  port: 8000\n"
            "motd:\n  serialize_writes: false\n"
            "links:\n  gh:\n    name: GitHub\n    url: https://github.com\n    redirect: true\n",
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.server.port == 8000
        assert settings.motd.serialize_writes is False
        assert settings.links["gh"].redirect is True

    def test_deployment_env_overrides(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SUDO_PASSWORD", "hunter2")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///other.db")
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.sudo_password.get_secret_value() == "hunter2"
        assert settings.server.port == 8080
        assert settings.database.sqlalchemy_url() == "sqlite:///other.db"

    def test_dotenv_file(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        # Empty counts as unset, and monkeypatch removes it again afterwards
        monkeypatch.setenv("SUDO_PASSWORD", "")
        (tmp_path / ".env").write_text('# secrets\nSUDO_PASSWORD="from-dotenv"\n', encoding="utf-8")
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.sudo_password.get_secret_value() == "from-dotenv"
