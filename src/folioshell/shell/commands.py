"""Built-in commands.

Each dynamic handler is a coroutine ``(interpreter, args) -> Effect | None``
receiving the argument vector with its original casing. ``COMMANDS`` is
the immutable registry shared by the terminal and the server.
"""

from __future__ import annotations

import locale
import os
import platform
import shutil
import sys
from datetime import datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import psutil

from folioshell.domain.models import Effect
from folioshell.shell import render
from folioshell.shell.api import ApiError
from folioshell.shell.integrations import GeolocationError, IntegrationError
from folioshell.shell.registry import (
    POLLING_KEYWORDS,
    Action,
    ArgPolicy,
    CommandGroup,
    CommandRegistry,
    CommandSpec,
    StaticText,
)

if TYPE_CHECKING:
    from folioshell.shell.interpreter import Interpreter

DEFAULT_TIME_FORMAT = "%a %d %b %Y, %H:%M"


async def cmd_help(shell: Interpreter, args: list[str]) -> None:
    if len(args) > 1:
        shell.transcript.error("help", f"unrecognized argument: {' '.join(args[1:])}")
        return
    if not args:
        header = f"{shell.domain} {shell.user_agent} Bash, version 1.0-release"
        shell.transcript.print("\n".join(render.help_overview(header, COMMANDS, shell.links.visible())))
        return

    name = args[0].lower()
    spec = COMMANDS.resolve(name)
    link = shell.links.resolve(name)
    if spec is not None:
        shell.transcript.print("\n".join(render.command_help(spec)))
    elif link is not None:
        shell.transcript.print("\n".join(render.link_help(name, link)))
    else:
        shell.transcript.error("help", f"no help entry for '{name}'")


async def cmd_sudo(shell: Interpreter, args: list[str]) -> Effect:
    if not args:
        shell.transcript.print("usage: sudo [command [arg...]]")
        return Effect.NONE
    return Effect.AWAIT_PASSWORD


async def cmd_echo(shell: Interpreter, args: list[str]) -> None:
    shell.transcript.print(" ".join(args))


async def cmd_motd(shell: Interpreter, args: list[str]) -> None:
    if args:
        shell.transcript.error("motd", f"unrecognized argument: {' '.join(args)}")
        return
    try:
        lines = await shell.api.fetch_motd()
    except ApiError:
        shell.transcript.error("motd", "could not fetch message of the day")
        return
    if lines:
        shell.transcript.print("\n".join(render.format_motd(lines, numbered=True)))
    else:
        shell.transcript.print("No message of the day set.")


async def cmd_clear(shell: Interpreter, args: list[str]) -> None:
    shell.transcript.clear()


async def cmd_ls(shell: Interpreter, args: list[str]) -> None:
    shell.transcript.print("\n".join(["Available connections:", *render.links_list(shell.links.visible())]))


async def cmd_exit(shell: Interpreter, args: list[str]) -> None:
    shell.transcript.print("Exiting terminal...")
    if not shell.request_exit():
        shell.transcript.error("exit", "Unable to close terminal.")


async def cmd_info(shell: Interpreter, args: list[str]) -> Effect:
    if any(a.lower() in POLLING_KEYWORDS for a in args):
        block = shell.transcript.block(["Loading server info..."])
        session = await shell.supervisor.start(
            block,
            fetch=shell.api.server_stats,
            render=render.render_server_stats,
            interval=shell.poll_interval,
        )
        block.add_note(f"Live updates every {session.interval:g}s. Use CTRL+C to stop.")
        return Effect.POLLING

    ip = await shell.services.public_ip()
    location = await shell.services.locate_ip(ip)
    columns, rows = shutil.get_terminal_size()
    info = {
        "OS": platform.system() or "Unknown",
        "Platform": platform.platform(),
        "User Agent": shell.user_agent,
        "Python": f"{platform.python_implementation()} {platform.python_version()}",
        "CPU Cores": os.cpu_count() or "Unknown",
        "Memory": f"{psutil.virtual_memory().total / render.GIB:.1f} GB",
        "Language": locale.getlocale()[0] or "Unknown",
        "Timezone": datetime.now().astimezone().tzname() or "Unknown",
        "Terminal Size": f"{columns}x{rows}",
        "Interactive": "Yes" if sys.stdin.isatty() else "No",
        "IP Address": ip or "unknown",
        "Location": location or "unknown",
    }
    shell.transcript.print("\n".join(
        ["Your System Information:", *(f"{k}: {v}" for k, v in info.items())]
    ))
    return Effect.NONE


async def cmd_weather(shell: Interpreter, args: list[str]) -> None:
    wants_gps = any(a.lower() == "-gps" for a in args)
    location_input = " ".join(a for a in args if a.lower() != "-gps")

    try:
        if wants_gps:
            if not shell.geolocation.available:
                shell.transcript.error("weather", "GPS not available on this device")
                return
            lat, lon = await shell.geolocation.current_position()
            place = await shell.services.reverse_geocode(lat, lon)
        elif location_input:
            lat, lon, place = await shell.services.geocode(location_input)
        else:
            lat, lon, place = await shell.services.ip_coordinates()
    except GeolocationError as e:
        shell.transcript.error("weather", e.user_message)
        return
    except IntegrationError:
        shell.transcript.error("weather", "Could not resolve location.")
        return

    try:
        weather, timezone = await shell.services.current_weather(lat, lon)
    except IntegrationError:
        shell.transcript.error("weather", "could not fetch weather data")
        return

    condition = shell.config.weather_codes.get(str(weather.get("weathercode")), "Unknown")
    try:
        now = datetime.now(ZoneInfo(timezone))
    except (ZoneInfoNotFoundError, ValueError):
        now = datetime.now().astimezone()
    time_format = shell.config.date_format.get("strftime", DEFAULT_TIME_FORMAT)
    shell.transcript.print("\n".join(render.weather_card(place, condition, weather, now.strftime(time_format))))


COMMANDS = CommandRegistry([
    # Core
    CommandSpec(
        name="help", group=CommandGroup.CORE, usage="[command]",
        description="display this help message",
        help_text="Display a list of all available commands. Use 'help [command]' to get\n"
                  "detailed information about a specific command.",
        handler=Action(fn=cmd_help),
    ),
    CommandSpec(
        name="about", group=CommandGroup.CORE, arg_policy=ArgPolicy.NO_ARGS,
        description="information about me",
        help_text="Display information about me.",
        handler=StaticText(
            text="I'm Kevin, a Computer Engineering student at the University of Padua (UniPD),\n"
                 "and a graduate of I.S. E. Fermi Mantova.\n"
                 "You can explore my open source projects on GitHub: type 'gh'."
        ),
    ),
    CommandSpec(
        name="sudo", group=CommandGroup.CORE, usage="[command [arg...]]", client_only=False,
        description="get superuser privileges",
        help_text="Execute a command with superuser privileges. Requires password authentication.\n\n"
                  "Usage: sudo [command] [args...]\n\n"
                  "Examples:\n"
                  "  sudo motd -add Hello World   add a message to the MOTD\n"
                  "  sudo fdb                     access restricted links",
        handler=Action(fn=cmd_sudo),
    ),
    CommandSpec(
        name="motd", group=CommandGroup.CORE,
        description="view the message of the day",
        help_text="Display the current Message of the Day (MOTD).\n\n"
                  "With sudo privileges, you can modify the MOTD:\n"
                  "  sudo motd -add [text]   add a new line\n"
                  "  sudo motd -rm [line]    remove a line by number\n"
                  "  sudo motd -clear        clear all messages",
        handler=Action(fn=cmd_motd),
    ),
    CommandSpec(
        name="echo", group=CommandGroup.CORE, usage="[text]",
        description="display text",
        help_text="Display the provided text in the terminal.\n\nUsage: echo [text]\n\nExample: echo Hello World",
        handler=Action(fn=cmd_echo),
    ),
    CommandSpec(
        name="clear", group=CommandGroup.CORE, arg_policy=ArgPolicy.NO_ARGS,
        description="clear the terminal",
        help_text="Clear all output from the terminal screen.",
        handler=Action(fn=cmd_clear),
    ),
    CommandSpec(
        name="exit", group=CommandGroup.CORE, arg_policy=ArgPolicy.NO_ARGS,
        description="exit the terminal",
        help_text="Close the terminal. May not work when the front end cannot be closed.",
        handler=Action(fn=cmd_exit),
    ),
    CommandSpec(
        name="ls", group=CommandGroup.CORE, arg_policy=ArgPolicy.NO_ARGS,
        description="list connections",
        help_text="List all available link commands. Each link can be opened directly by typing\n"
                  "its name, or use -blank to open in a new tab.",
        handler=Action(fn=cmd_ls),
    ),
    # Utility
    CommandSpec(
        name="info", group=CommandGroup.UTILITY, usage="[server]",
        description="system information",
        help_text="Display system information.\n\nUsage:\n"
                  "  info          show your device info\n"
                  "  info server   show live server statistics (updates every 2s, press Ctrl+C to stop)",
        handler=Action(fn=cmd_info),
    ),
    CommandSpec(
        name="weather", group=CommandGroup.UTILITY, usage="[location, -gps]",
        description="weather",
        help_text="Display current weather information.\n\nUsage:\n"
                  "  weather            weather at your IP location\n"
                  "  weather [city]     weather at specified location\n"
                  "  weather -gps       weather using GPS (requires permission)",
        handler=Action(fn=cmd_weather),
    ),
    CommandSpec(
        name="cfu", group=CommandGroup.UTILITY, arg_policy=ArgPolicy.NO_ARGS,
        description="my current CFU count",
        help_text="Display Kevin's current university credit (CFU) count. Work in progress.",
        handler=StaticText(text="WIP"),
    ),
    CommandSpec(
        name="env", group=CommandGroup.UTILITY, arg_policy=ArgPolicy.NO_ARGS,
        description="display .env file",
        help_text="Display the environment variables file. Just for fun!",
        handler=StaticText(text='USER="you"\nSTUPID="true"\nASTI="esplosa"\nSUDO="nano"'),
    ),
])
