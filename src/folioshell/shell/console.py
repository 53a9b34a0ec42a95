"""Full-screen terminal front end built on prompt_toolkit.

Renders :meth:`Terminal.screen_lines` into a single scrolling window and
translates prompt_toolkit key presses into :class:`KeyEvent` objects.
Each key is dispatched as a background task so a slow command never
blocks the input loop; the terminal's own mode decides what a key does
while a command is running.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlparse

from prompt_toolkit.application import Application
from prompt_toolkit.data_structures import Point
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.mouse_events import MouseEvent, MouseEventType

from folioshell.config.settings import Settings
from folioshell.domain.models import KeyEvent
from folioshell.shell.api import ApiClient
from folioshell.shell.history import LocalStorage
from folioshell.shell.integrations import GeolocationProvider, LocationServices
from folioshell.shell.interpreter import Interpreter, default_user_agent
from folioshell.shell.opener import BrowserOpener
from folioshell.shell.terminal import Terminal

logger = logging.getLogger(__name__)

STORAGE_FILE = "storage.json"

# prompt_toolkit key name -> DOM-style key name
_SPECIAL_KEYS = {
    "enter": "Enter",
    "backspace": "Backspace",
    "up": "ArrowUp",
    "down": "ArrowDown",
    "left": "ArrowLeft",
    "right": "ArrowRight",
}


class _ScreenControl(FormattedTextControl):
    """Text control that reports plain clicks to the terminal."""

    def __init__(self, terminal: Terminal, **kwargs) -> None:
        super().__init__(**kwargs)
        self._terminal = terminal

    def mouse_handler(self, mouse_event: MouseEvent):
        if mouse_event.event_type == MouseEventType.MOUSE_UP:
            self._terminal.handle_click()
            return None
        return NotImplemented


class Console:
    """Owns the prompt_toolkit application around one :class:`Terminal`."""

    def __init__(self, terminal: Terminal, refresh_interval: float = 0.5) -> None:
        self.terminal = terminal
        self._control = _ScreenControl(
            terminal,
            text=self._text,
            get_cursor_position=self._cursor,
            focusable=True,
            show_cursor=True,
        )
        self.app: Application[None] = Application(
            layout=Layout(HSplit([Window(content=self._control, wrap_lines=True)])),
            key_bindings=self._bindings(),
            full_screen=True,
            mouse_support=True,
            refresh_interval=refresh_interval,
        )

    def _text(self) -> str:
        return "\n".join(self.terminal.screen_lines())

    def _cursor(self) -> Point:
        lines = self.terminal.screen_lines()
        return Point(x=self.terminal.cursor_column(), y=max(0, len(lines) - 1))

    def _bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-c")
        def _(event: KeyPressEvent) -> None:
            self._dispatch(event, KeyEvent(key="c", ctrl=True))

        for pt_key, dom_key in _SPECIAL_KEYS.items():
            kb.add(pt_key)(self._special(dom_key))

        @kb.add(Keys.Any)
        def _(event: KeyPressEvent) -> None:
            if event.data and event.data.isprintable():
                for char in event.data:
                    self._dispatch(event, KeyEvent(key=char))

        return kb

    def _special(self, dom_key: str):
        def handler(event: KeyPressEvent) -> None:
            self._dispatch(event, KeyEvent(key=dom_key))

        return handler

    def _dispatch(self, event: KeyPressEvent, key: KeyEvent) -> None:
        async def route() -> None:
            await self.terminal.handle_key(key)
            event.app.invalidate()

        event.app.create_background_task(route())

    async def _start(self) -> None:
        await self.terminal.start()
        self.app.invalidate()

    def close(self) -> None:
        if self.app.is_running:
            self.app.exit()

    async def run(self) -> None:
        await self.app.run_async(pre_run=lambda: self.app.create_background_task(self._start()))


async def run_console(
    settings: Settings,
    base_url: str | None = None,
    geolocation: GeolocationProvider | None = None,
) -> None:
    """Wire up the client side and run the terminal until ``exit``."""
    console_cfg = settings.console
    base_url = base_url or console_cfg.base_url
    domain = console_cfg.domain or urlparse(base_url).hostname or "localhost"
    user_agent = default_user_agent()

    storage = LocalStorage(Path(console_cfg.state_dir).expanduser() / STORAGE_FILE)
    services = LocationServices(user_agent=user_agent, timeout=console_cfg.timeout)

    async with ApiClient(base_url=base_url, timeout=console_cfg.timeout) as api:
        interpreter = Interpreter(
            api=api,
            services=services,
            opener=BrowserOpener(),
            geolocation=geolocation,
            domain=domain,
            user_agent=user_agent,
            poll_interval=settings.terminal.poll_interval,
            on_exit=lambda: console.close(),
        )
        console = Console(Terminal(interpreter, storage=storage))
        logger.info("Console connected to %s", base_url)
        try:
            await console.run()
        finally:
            interpreter.supervisor.stop(show_notice=False)
            await services.close()
