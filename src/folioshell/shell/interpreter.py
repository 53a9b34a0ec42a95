"""Command interpreter.

Tokenizes a submitted line, resolves the command token against the
command registry and then the link registry, and dispatches. Every
outcome, including user errors, ends up as transcript output.
"""

from __future__ import annotations

import logging
import platform
from typing import Callable

from folioshell.domain.models import ClientConfig, Effect, LinkSpec
from folioshell.shell.api import ApiClient
from folioshell.shell.commands import COMMANDS
from folioshell.shell.integrations import GeolocationProvider, LocationServices, NoGeolocation
from folioshell.shell.opener import UrlOpener
from folioshell.shell.polling import PollingSupervisor
from folioshell.shell.registry import (
    BLANK_FLAG,
    ArgPolicy,
    CommandRegistry,
    CommandSpec,
    LinkRegistry,
    PrivilegeClass,
    StaticText,
    classify_privileged,
)
from folioshell.shell.transcript import Transcript

logger = logging.getLogger(__name__)


def default_user_agent() -> str:
    return f"{platform.system() or 'Unknown'} / folioshell"


class Interpreter:
    """Resolves and runs commands; the context every handler receives."""

    def __init__(
        self,
        api: ApiClient,
        services: LocationServices,
        opener: UrlOpener,
        transcript: Transcript | None = None,
        supervisor: PollingSupervisor | None = None,
        geolocation: GeolocationProvider | None = None,
        commands: CommandRegistry = COMMANDS,
        domain: str = "localhost",
        user_agent: str | None = None,
        poll_interval: float = 2.0,
        on_exit: Callable[[], None] | None = None,
    ) -> None:
        self.api = api
        self.services = services
        self.opener = opener
        self.transcript = transcript or Transcript()
        self.supervisor = supervisor or PollingSupervisor()
        self.geolocation = geolocation or NoGeolocation()
        self.commands = commands
        self.domain = domain
        self.user_agent = user_agent or default_user_agent()
        self.poll_interval = poll_interval
        self.config = ClientConfig()
        self.links = LinkRegistry()
        self._on_exit = on_exit

    def configure(self, config: ClientConfig) -> None:
        """Install the server-provided link table and site data."""
        self.config = config
        self.links = LinkRegistry(config.links)
        logger.info("Loaded %d links", len(self.links))

    def request_exit(self) -> bool:
        """Ask the front end to close. False when nothing can close it."""
        if self._on_exit is None:
            return False
        self._on_exit()
        return True

    def is_client_delegated(self, arg_line: str) -> bool:
        return classify_privileged(arg_line, self.commands, self.links) is PrivilegeClass.CLIENT

    async def execute(self, line: str) -> Effect:
        """Run one submitted line and report what the terminal should do next."""
        tokens = line.split()
        if not tokens:
            return Effect.NONE
        token, args = tokens[0], tokens[1:]
        name = token.lower()

        spec = self.commands.resolve(name)
        if spec is not None:
            return await self._run(spec, args)

        link = self.links.resolve(name)
        if link is not None:
            self.open_link(name, link, args)
            return Effect.NONE

        self.transcript.error("", f"Unrecognized command: {token}")
        return Effect.NONE

    async def _run(self, spec: CommandSpec, args: list[str]) -> Effect:
        if spec.arg_policy is ArgPolicy.NO_ARGS and args:
            self.transcript.error(spec.name, f"unrecognized argument: {' '.join(args)}")
            return Effect.NONE
        if isinstance(spec.handler, StaticText):
            self.transcript.print(spec.handler.text)
            return Effect.NONE
        try:
            effect = await spec.handler.fn(self, args)
        except Exception:
            logger.exception("Command %s failed", spec.name)
            self.transcript.error(spec.name, "generic error")
            return Effect.NONE
        return effect or Effect.NONE

    def link_url(self, link: LinkSpec) -> str:
        """Server-redirecting links go through ``/{key}`` on the API host."""
        return f"{self.api.base_url}/{link.key}" if link.redirect else link.url

    def open_link(self, name: str, link: LinkSpec, args: list[str]) -> None:
        blank = BLANK_FLAG in args
        target = "_blank" if blank else "_self"
        suffix = " (new tab)" if blank else ""
        rest = [a for a in args if a != BLANK_FLAG]

        if rest and link.subcommands:
            sub_key = rest[0].lower()
            subs = {k.lower(): v for k, v in link.subcommands.items()}
            sub = subs.get(sub_key)
            if sub is None:
                self.transcript.error(
                    name, f"unknown subcommand: {sub_key}. Available: {', '.join(link.subcommands)}"
                )
                return
            if len(rest) > 1:
                self.transcript.error(f"{name} {sub_key}", f"unrecognized argument: {' '.join(rest[1:])}")
                return
            self.opener.open(sub.url, target)
            self.transcript.print(f"Connecting to {sub.name}...{suffix}")
            return

        if rest:
            self.transcript.error(name, f"unrecognized argument: {' '.join(rest)}")
            return

        self.opener.open(self.link_url(link), target)
        self.transcript.print(f"Connecting to {link.name}...{suffix}")
