"""Server-side authorization of privileged ("sudo") commands.

Validates the escalation secret, classifies the requested argument line
and either delegates it back to the client, reveals a sudo-only link, or
mutates the MOTD store.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import secrets

from folioshell.domain.models import SudoDecision
from folioshell.server.motd import MotdStore, MotdStoreError
from folioshell.shell.registry import (
    BLANK_FLAG,
    CommandRegistry,
    LinkRegistry,
    PrivilegeClass,
    classify_privileged,
)

logger = logging.getLogger(__name__)

MOTD_USAGE = "usage: sudo motd [-add text | -rm line | -clear]"
MOTD_ADD_USAGE = "usage: sudo motd -add [text]"
INVALID_LINE = "Invalid line number."
LINE_NUMBER = re.compile(r"[0-9]+")


class Authorizer:
    """Decides the outcome of ``POST /api/sudo``."""

    def __init__(
        self,
        secret: str,
        commands: CommandRegistry,
        links: LinkRegistry,
        motd: MotdStore,
        serialize_writes: bool = True,
    ) -> None:
        self._secret = secret.encode()
        self._commands = commands
        self._links = links
        self._motd = motd
        self._motd_lock = asyncio.Lock() if serialize_writes else contextlib.nullcontext()

    @property
    def enabled(self) -> bool:
        return bool(self._secret)

    def check_secret(self, password: str) -> bool:
        # An empty configured secret disables escalation entirely
        if not self._secret:
            return False
        return secrets.compare_digest(password.encode(), self._secret)

    async def authorize(self, password: str, arg: str) -> SudoDecision:
        if not self.check_secret(password):
            logger.warning("sudo authentication failure")
            return SudoDecision(valid=False)

        arg = arg.strip()
        kind = classify_privileged(arg, self._commands, self._links)
        logger.info("sudo accepted: %s (%s)", arg.split()[0] if arg else "", kind.value)

        if kind is PrivilegeClass.CLIENT:
            return SudoDecision(valid=True, client_command=True)
        if kind is PrivilegeClass.SUDO_LINK:
            return self._open_link(arg)
        if kind is PrivilegeClass.MOTD:
            return SudoDecision(valid=True, output=await self._motd_command(arg.split()[1:]))
        return SudoDecision(valid=True, output=f"sudo: unknown command: {arg}")

    def _open_link(self, arg: str) -> SudoDecision:
        first, *rest = arg.split()
        link = self._links.lookup(first.lower())
        return SudoDecision(
            valid=True,
            output=f"Opening {link.name}...",
            redirect=link.url,
            target="_blank" if BLANK_FLAG in rest else "_self",
        )

    async def _motd_command(self, tokens: list[str]) -> str:
        flag, rest = tokens[0].lower(), tokens[1:]
        try:
            async with self._motd_lock:
                if flag == "-add":
                    return self._motd_add(" ".join(rest))
                if flag == "-rm":
                    return self._motd_remove(rest)
                if flag == "-clear":
                    self._motd.clear()
                    return "MOTD cleared."
        except MotdStoreError as e:
            logger.error("MOTD update failed: %s", e)
            return f"motd: {e}"
        return MOTD_USAGE

    def _motd_add(self, text: str) -> str:
        if not text:
            return MOTD_ADD_USAGE
        self._motd.append(text)
        return f'Added to MOTD: "{text}"'

    def _motd_remove(self, rest: list[str]) -> str:
        if len(rest) != 1 or not LINE_NUMBER.fullmatch(rest[0]):
            return INVALID_LINE
        index = int(rest[0])
        try:
            removed = self._motd.remove(index)
        except IndexError:
            return INVALID_LINE
        return f'Removed line {index}: "{removed}"'
