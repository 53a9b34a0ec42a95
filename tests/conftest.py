"""Shared test fixtures for the folioshell test suite.

Provides common fixtures used across unit tests: sample link tables,
tmp_path-backed stores, mock API clients and a wired-up interpreter.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from folioshell.domain.models import ClientConfig, LinkSpec, SubcommandSpec, SudoDecision
from folioshell.server.motd import MotdStore
from folioshell.shell.api import ApiClient
from folioshell.shell.integrations import LocationServices
from folioshell.shell.interpreter import Interpreter
from folioshell.shell.opener import UrlOpener
from folioshell.shell.registry import LinkRegistry


# ---------------------------------------------------------------------------
# Link / Config Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_links() -> dict[str, LinkSpec]:
    """A link table with a redirecting link, a plain one with subcommands,
    a hidden link and a sudo-only link."""
    return {
        "gh": LinkSpec(
            name="GitHub",
            url="https://github.com/example",
            alias="github",
            redirect=True,
        ),
        "blog": LinkSpec(
            name="Blog",
            url="https://blog.example.com",
            subcommands={
                "posts": SubcommandSpec(name="Blog posts", url="https://blog.example.com/posts"),
                "About": SubcommandSpec(name="About the blog", url="https://blog.example.com/about"),
            },
        ),
        "cv": LinkSpec(name="Curriculum vitae", url="https://example.com/cv.pdf", hidden=True),
        "fdb": LinkSpec(name="Family database", url="https://fdb.example.com", sudo_only=True),
    }


@pytest.fixture
def link_registry(sample_links: dict[str, LinkSpec]) -> LinkRegistry:
    return LinkRegistry(sample_links)


@pytest.fixture
def client_config(sample_links: dict[str, LinkSpec]) -> ClientConfig:
    """What ``/api/config`` would deliver: no sudo-only links."""
    return ClientConfig(
        links={k: v for k, v in sample_links.items() if not v.sudo_only},
        weather_codes={"0": "Clear sky ☀️", "3": "Overcast ☁️"},
        date_format={"strftime": "%H:%M"},
    )


# ---------------------------------------------------------------------------
# Store Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def motd_store(tmp_path) -> MotdStore:
    """A MOTD store over a fresh file with two lines."""
    path = tmp_path / "motd.txt"
    path.write_text("first line\n\nsecond line\n", encoding="utf-8")
    return MotdStore(path)


# ---------------------------------------------------------------------------
# Mock Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_api() -> AsyncMock:
    """A mock ApiClient with harmless default answers."""
    api = AsyncMock(spec=ApiClient)
    api.base_url = "http://localhost:3000"
    api.fetch_motd.return_value = ["hello"]
    api.fetch_last_login.return_value = None
    api.sudo.return_value = SudoDecision(valid=False)
    api.server_stats.return_value = {"success": True, "uptime": 3600}
    return api


@pytest.fixture
def mock_services() -> AsyncMock:
    """Mock LocationServices: no network, a fixed IP and location."""
    services = AsyncMock(spec=LocationServices)
    services.public_ip.return_value = "203.0.113.7"
    services.locate_ip.return_value = "Padua, Italy"
    return services


@pytest.fixture
def mock_opener() -> MagicMock:
    return MagicMock(spec=UrlOpener)


@pytest.fixture
def interpreter(
    mock_api: AsyncMock,
    mock_services: AsyncMock,
    mock_opener: MagicMock,
    client_config: ClientConfig,
) -> Interpreter:
    """An interpreter configured with the sample links, on mocks only."""
    interp = Interpreter(
        api=mock_api,
        services=mock_services,
        opener=mock_opener,
        domain="example.com",
        user_agent="Linux / folioshell",
        poll_interval=0.01,
    )
    interp.configure(client_config)
    return interp
