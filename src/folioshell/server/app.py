"""FastAPI HTTP server for the portfolio terminal.

Serves the client configuration, the message of the day, the sudo
Authorizer, login persistence and live server statistics, plus one
redirect route per server-redirecting link.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable

import uvicorn
from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from folioshell.config.settings import Settings
from folioshell.domain.models import (
    ClientConfig,
    LastLoginResponse,
    LinkSpec,
    MotdResponse,
    SaveLoginRequest,
    SaveLoginResponse,
    SudoDecision,
    SudoRequest,
)
from folioshell.server.authorizer import Authorizer
from folioshell.server.logins import LoginStore, LoginStoreError
from folioshell.server.motd import MotdStore, MotdStoreError
from folioshell.server.sysinfo import collect_server_stats
from folioshell.shell.commands import COMMANDS
from folioshell.shell.registry import LinkRegistry

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    motd_store: MotdStore | None = None,
    login_store: LoginStore | None = None,
    stats_provider: Callable[[], dict[str, Any]] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Loaded settings. Defaults to ``Settings()``.
        motd_store: Optional pre-configured MOTD store (for testing).
        login_store: Optional pre-configured login store (for testing).
        stats_provider: Optional replacement for the psutil collector.
    """
    settings = settings or Settings()
    links = LinkRegistry(settings.link_table())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store = app.state.login_store
        try:
            store.init()
        except LoginStoreError as e:
            logger.error("Login store unavailable: %s", e)
        if not app.state.authorizer.enabled:
            logger.warning("No sudo password configured -- escalation is disabled")
        logger.info("Server started (%d links)", len(links))
        yield
        store.close()
        logger.info("Server stopped")

    app = FastAPI(
        title="folioshell",
        description="Portfolio terminal backend",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.motd_store = motd_store or MotdStore(settings.motd.path)
    app.state.login_store = login_store or LoginStore(settings.database.sqlalchemy_url())
    app.state.authorizer = Authorizer(
        secret=settings.sudo_password.get_secret_value(),
        commands=COMMANDS,
        links=links,
        motd=app.state.motd_store,
        serialize_writes=settings.motd.serialize_writes,
    )
    stats = stats_provider or collect_server_stats

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/config")
    async def get_config() -> ClientConfig:
        return settings.client_config()

    @app.get("/api/motd")
    def get_motd() -> MotdResponse:
        try:
            return MotdResponse(success=True, motd=app.state.motd_store.read())
        except MotdStoreError as e:
            logger.error("MOTD read failed: %s", e)
            return MotdResponse(success=False, error=str(e))

    @app.post("/api/sudo", response_model_exclude_none=True)
    async def sudo(request: SudoRequest) -> SudoDecision:
        return await app.state.authorizer.authorize(request.password, request.arg)

    @app.post("/api/save-login", response_model_exclude_none=True)
    def save_login(request: SaveLoginRequest) -> SaveLoginResponse:
        try:
            app.state.login_store.save(
                user_agent=request.user_agent,
                ip=request.ip_address,
                location=request.location,
            )
        except LoginStoreError as e:
            logger.error("Saving login failed: %s", e)
            return SaveLoginResponse(success=False, error=str(e))
        return SaveLoginResponse(success=True)

    @app.get("/api/last-login", response_model_exclude_none=True)
    def last_login() -> LastLoginResponse:
        try:
            record = app.state.login_store.last()
        except LoginStoreError as e:
            logger.error("Reading last login failed: %s", e)
            return LastLoginResponse(success=False, error=str(e))
        if record is None:
            return LastLoginResponse(success=False, error="No data found")
        return LastLoginResponse(success=True, data=record)

    @app.get("/api/sysinfo/cpu")
    def server_stats() -> dict[str, Any]:
        try:
            return stats()
        except Exception as e:
            logger.error("Collecting server stats failed: %s", e)
            return {"success": False, "error": str(e)}

    for link in links.redirecting():
        _add_redirect(app, link)

    if settings.server.static_dir:
        app.mount("/", StaticFiles(directory=settings.server.static_dir, html=True), name="static")

    return app


def _add_redirect(app: FastAPI, link: LinkSpec) -> None:
    async def redirect() -> RedirectResponse:
        return RedirectResponse(link.url, status_code=302)

    app.add_api_route(f"/{link.key}", redirect, methods=["GET"], include_in_schema=False)


def main() -> None:
    """Entry point for running the server standalone."""
    from folioshell.config.settings import load_settings

    settings = load_settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
