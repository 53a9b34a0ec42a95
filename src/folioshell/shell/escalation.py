"""Privilege escalation ("sudo") round trip.

Sends the captured secret and the argument line to the server, then
replays the server's decision in the terminal.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from folioshell.domain.models import Effect
from folioshell.shell.api import ApiError
from folioshell.shell.interpreter import Interpreter
from folioshell.shell.registry import MOTD_KEYWORD

logger = logging.getLogger(__name__)


class EscalationFlow:
    """Runs one authorized command on behalf of a ``sudo ...`` line."""

    def __init__(
        self,
        interpreter: Interpreter,
        refresh_banner: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._interpreter = interpreter
        self._refresh_banner = refresh_banner

    @staticmethod
    def argument_of(line: str) -> str:
        """Everything after the escalation keyword."""
        parts = line.strip().split(None, 1)
        return parts[1].strip() if len(parts) > 1 else ""

    async def run(self, original_line: str, secret: str) -> Effect:
        interp = self._interpreter
        arg = self.argument_of(original_line)

        try:
            decision = await interp.api.sudo(secret, arg)
        except ApiError as e:
            logger.error("sudo request failed: %s", e)
            interp.transcript.error(original_line, "generic error")
            return Effect.NONE

        if not decision.valid:
            interp.transcript.error(original_line, "authentication failure")
            return Effect.NONE

        effect = Effect.NONE
        if decision.client_command or interp.is_client_delegated(arg):
            effect = await interp.execute(arg)
        elif decision.output:
            interp.transcript.print(decision.output)
            if decision.redirect:
                interp.opener.open(decision.redirect, "_blank" if decision.target == "_blank" else "_self")

        if arg.lower().startswith(MOTD_KEYWORD) and self._refresh_banner is not None:
            await self._refresh_banner()
        return effect
