"""The terminal engine: input surfaces, prompt lifecycle and start-up.

The terminal is an explicit state machine over :class:`TerminalMode`.
Exactly one input surface exists in each mode: a prompt line in IDLE,
a secret input in AWAITING_PASSWORD, and none while RUNNING or while a
live session owns the screen (POLLING_ACTIVE). Every transition that
creates a prompt goes through :meth:`Terminal._open_prompt`.
"""

from __future__ import annotations

import asyncio
import logging

from folioshell.domain.models import ClientConfig, Effect, KeyEvent, LoginRecord, TerminalMode
from folioshell.shell.api import ApiClient, ApiError
from folioshell.shell.editor import LineEditor, SecretInput
from folioshell.shell.escalation import EscalationFlow
from folioshell.shell.history import CommandHistory, LocalStorage
from folioshell.shell.interpreter import Interpreter
from folioshell.shell.polling import PollingSupervisor
from folioshell.shell.render import format_motd, last_login_line
from folioshell.shell.transcript import Transcript

logger = logging.getLogger(__name__)


class Terminal:
    """Routes key events to the active input surface and runs commands."""

    def __init__(
        self,
        interpreter: Interpreter,
        storage: LocalStorage | None = None,
        history: CommandHistory | None = None,
    ) -> None:
        self.interpreter = interpreter
        self.transcript: Transcript = interpreter.transcript
        self.supervisor: PollingSupervisor = interpreter.supervisor
        self._storage = storage
        self.history = history or CommandHistory(storage)
        self.escalation = EscalationFlow(interpreter, refresh_banner=self.refresh_banner)
        self.banner: list[str] = []
        self.last_login: LoginRecord | None = None
        self.mode = TerminalMode.RUNNING
        self.editor: LineEditor | None = None
        self.secret: SecretInput | None = None
        self._pending_sudo: str | None = None
        self._background: set[asyncio.Task[None]] = set()

    @property
    def api(self) -> ApiClient:
        return self.interpreter.api

    @property
    def prompt(self) -> str:
        return f"user@{self.interpreter.domain}:~$ "

    # ------------------------------------------------------------------
    # Start-up
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load configuration and greeting data, then open the first prompt."""
        try:
            config = await self.api.fetch_config()
        except ApiError as e:
            logger.error("Failed to load config: %s", e)
            config = ClientConfig()
        self.interpreter.configure(config)
        self.history = CommandHistory(
            self._storage,
            key=config.terminal.storage_key,
            capacity=config.terminal.max_history_size,
        )

        await self.refresh_banner()
        try:
            self.last_login = await self.api.fetch_last_login()
        except ApiError as e:
            logger.warning("Could not fetch last login: %s", e)
        if self.last_login is not None:
            self.transcript.print(last_login_line(self.last_login))

        services = self.interpreter.services
        ip = await services.public_ip()
        location = await services.locate_ip(ip)
        self._spawn(self.api.save_login(self.interpreter.user_agent, ip, location))

        self._open_prompt()

    async def refresh_banner(self) -> None:
        """Re-fetch the MOTD header. Fetch errors leave the banner as is."""
        try:
            lines = await self.api.fetch_motd()
        except ApiError as e:
            logger.debug("MOTD refresh failed: %s", e)
            return
        self.banner = format_motd(lines)

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # ------------------------------------------------------------------
    # Input routing
    # ------------------------------------------------------------------

    async def handle_key(self, event: KeyEvent) -> None:
        if self.mode is TerminalMode.AWAITING_PASSWORD:
            await self._secret_key(event)
        elif event.is_interrupt:
            self._interrupt()
        elif self.mode is TerminalMode.IDLE:
            await self._prompt_key(event)
        else:
            logger.debug("Ignoring %s while %s", event.key, self.mode.value)

    def handle_click(self, selection: str = "") -> None:
        """A click without a text selection refocuses the active line."""
        if selection:
            return
        if self.editor is not None and self.editor.is_active:
            self.editor.focused = True
        elif self.secret is not None and self.secret.is_active:
            self.secret.focused = True

    async def _prompt_key(self, event: KeyEvent) -> None:
        editor = self.editor
        if editor is None or not editor.focused:
            return
        if event.key == "Enter":
            await self._submit()
        elif event.key in ("ArrowUp", "ArrowDown"):
            recalled = self.history.previous() if event.key == "ArrowUp" else self.history.next()
            if recalled is not None:
                editor.replace(recalled)
        elif event.key == "Backspace":
            editor.backspace()
        elif event.key == "ArrowLeft":
            editor.move_caret(-1)
        elif event.key == "ArrowRight":
            editor.move_caret(1)
        elif event.is_printable:
            editor.insert(event.key)

    async def _secret_key(self, event: KeyEvent) -> None:
        secret = self.secret
        original = self._pending_sudo or ""
        if event.is_interrupt:
            secret.cancel()
            self.transcript.error(original, "command canceled")
            self._open_prompt()
        elif event.key == "Enter":
            password = secret.submit()
            self.mode = TerminalMode.RUNNING
            if not password:
                self.transcript.error(original, "no password entered")
            else:
                await self.escalation.run(original, password)
            self._open_prompt()
        elif event.key == "Backspace":
            secret.backspace()
        elif event.is_printable:
            secret.insert(event.key)

    def _interrupt(self) -> None:
        if self.mode is TerminalMode.IDLE:
            line = self.editor
            line.cancel()
            self.transcript.print(line.render())
            if not self.supervisor.stop():
                self.transcript.error("", "command canceled")
            self._open_prompt()
        elif self.mode is TerminalMode.POLLING_ACTIVE:
            self.supervisor.stop()
            self._open_prompt()
        else:
            # A command is still running: only a live session can be stopped
            self.supervisor.stop()

    # ------------------------------------------------------------------
    # Command lifecycle
    # ------------------------------------------------------------------

    async def _submit(self) -> None:
        line = self.editor
        text = line.submit()
        self.transcript.print(line.render())
        if not text:
            self._open_prompt()
            return

        self.history.append(text)
        self.mode = TerminalMode.RUNNING
        effect = await self.interpreter.execute(text)

        if effect is Effect.AWAIT_PASSWORD:
            self._await_password(text)
        elif effect is Effect.POLLING and self.supervisor.active:
            self.editor = None
            self.mode = TerminalMode.POLLING_ACTIVE
        else:
            self._open_prompt()

    def _await_password(self, original_line: str) -> None:
        self.editor = None
        self._pending_sudo = original_line
        self.secret = SecretInput()
        self.mode = TerminalMode.AWAITING_PASSWORD

    def _open_prompt(self) -> None:
        self.secret = None
        self._pending_sudo = None
        self.editor = LineEditor(self.prompt)
        self.history.reset_cursor()
        self.mode = TerminalMode.IDLE

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def screen_lines(self) -> list[str]:
        """Banner, transcript and the active input line, top to bottom."""
        lines = list(self.banner)
        if self.banner:
            lines.append("")
        lines += self.transcript.lines()
        if self.mode is TerminalMode.AWAITING_PASSWORD and self.secret is not None:
            lines.append(self.secret.render())
        elif self.mode is TerminalMode.IDLE and self.editor is not None:
            lines.append(self.editor.render())
        return lines

    def cursor_column(self) -> int:
        if self.mode is TerminalMode.AWAITING_PASSWORD and self.secret is not None:
            return len(self.secret.prompt)
        if self.editor is not None:
            return len(self.editor.prompt) + self.editor.caret
        return 0
