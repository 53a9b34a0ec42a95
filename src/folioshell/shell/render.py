"""Text rendering for command output.

Pure functions from data to transcript lines, so every payload the
server or a third-party API returns can be displayed even when fields
are missing.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from folioshell.domain.models import LinkSpec, LoginRecord
from folioshell.shell.registry import BLANK_FLAG, CommandGroup, CommandRegistry, CommandSpec

NA = "N/A"
GIB = 1024 ** 3
BLANK_HINT = f"Use [command] {BLANK_FLAG} to open in a new tab."


def format_motd(lines: Iterable[str], numbered: bool = False) -> list[str]:
    if numbered:
        return [f"{i}. {line}" for i, line in enumerate(lines, start=1)]
    return [f"* {line}" for line in lines]


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _as_of(timestamp_ms: float | None) -> str:
    if not timestamp_ms:
        return NA
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return NA


def render_server_stats(data: dict[str, Any] | None) -> list[str]:
    """Lines for the live ``info server`` block; absent values show N/A."""
    if not data:
        return ["Unable to fetch server info."]
    if data.get("success") is False:
        return [f"Unable to fetch server info: {data.get('error') or 'unknown error'}"]

    cpu = data.get("cpu") if isinstance(data.get("cpu"), dict) else {}
    load = data.get("load") if isinstance(data.get("load"), dict) else {}
    mem = data.get("memory") if isinstance(data.get("memory"), dict) else {}
    temperature = data.get("temperature") if isinstance(data.get("temperature"), dict) else {}

    as_of = _as_of(_number(data.get("timestamp")))

    brand = " ".join(p for p in (cpu.get("manufacturer"), cpu.get("brand")) if p) or NA
    cores = cpu.get("cores") or cpu.get("physicalCores") or NA

    current = _number(load.get("currentLoad"))
    load_text = f"{current:.1f}%" if current else str(load.get("avgLoad") or NA)

    used, total = _number(mem.get("used")), _number(mem.get("total"))
    if used and total:
        memory = f"{round(used / total * 100)}% used ({used / GIB:.2f} GB / {total / GIB:.2f} GB)"
    else:
        memory = NA

    uptime = int(_number(data.get("uptime")) or 0)
    temp = _number(temperature.get("main"))

    lines = [
        f"Server System Information (as of {as_of}):",
        f"CPU: {brand} ({cores} cores)",
        f"Load: {load_text}",
        f"Memory: {memory}",
        f"Uptime: {uptime // 3600}h {(uptime % 3600) // 60}m",
        f"Temperature: {f'{temp} °C' if temp else NA}",
    ]
    for i, core in enumerate(load.get("cpus") or []):
        value = _number(core.get("load")) if isinstance(core, dict) else None
        lines.append(f"Core {i}: {f'{value:.1f}%' if value is not None else NA}")
    return lines


def _link_label(link: LinkSpec) -> str:
    return f"{link.key} / {link.alias}" if link.alias else link.key


def links_list(links: Iterable[LinkSpec]) -> list[str]:
    """``ls`` output body."""
    lines = []
    for link in links:
        line = f"{_link_label(link)}: {link.name}"
        if link.subcommands:
            line += f" (subcommands: {', '.join(link.subcommands)})"
        lines.append(line)
    lines.append(BLANK_HINT)
    return lines


def _synopsis(spec: CommandSpec) -> str:
    return f"{spec.name} {spec.usage}".rstrip()


def help_overview(header: str, commands: CommandRegistry, links: Iterable[LinkSpec]) -> list[str]:
    lines = [header, "These shell commands are defined internally. Type 'help' to see this list.", ""]
    lines.append("Core commands:")
    lines += [f"  {_synopsis(s):<28} {s.description}" for s in commands.by_group(CommandGroup.CORE)]
    lines += ["", "Link commands:", f"  {'ls':<28} list connections"]
    for link in links:
        args = f"[{BLANK_FLAG}]"
        if link.subcommands:
            args = f"[{'|'.join(link.subcommands)}] {args}"
        lines.append(f"  {f'{_link_label(link)} {args}':<28} {link.name}")
    lines += ["", "Utility:"]
    lines += [f"  {_synopsis(s):<28} {s.description}" for s in commands.by_group(CommandGroup.UTILITY)]
    return lines


def command_help(spec: CommandSpec) -> list[str]:
    return [_synopsis(spec), "", *spec.help_text.split("\n")]


def link_help(name: str, link: LinkSpec) -> list[str]:
    args = f"[{BLANK_FLAG}]"
    lines = [f"Open {link.name}. Use {BLANK_FLAG} to open in a new tab."]
    if link.subcommands:
        args = f"[{'|'.join(link.subcommands)}] {args}"
        lines += ["", "Subcommands:"]
        lines += [f"  {name} {key} - {sub.name}" for key, sub in link.subcommands.items()]
    return [f"{name} {args}", "", *lines]


def split_condition(text: str, default_emoji: str = "🌡️") -> tuple[str, str]:
    """Split ``"Clear sky ☀️"`` into condition text and trailing emoji."""
    head, _, tail = text.strip().rpartition(" ")
    if head and tail and not any(c.isalnum() for c in tail):
        return head.strip(), tail
    return text.strip(), default_emoji


def weather_card(
    location: str, condition_text: str, weather: dict[str, Any], local_time: str
) -> list[str]:
    condition, emoji = split_condition(condition_text or "Unknown")
    return [
        f"{emoji}  {location}",
        f"    {condition}",
        f"    {weather.get('temperature', NA)}°C",
        f"    Wind: {weather.get('windspeed', NA)} km/h",
        f"    {local_time}",
    ]


def last_login_line(record: LoginRecord) -> str:
    when = record.request_date.strftime("%a %b %d %H:%M:%S %Y") if record.request_date else "unknown"
    return f"Last login: {when} from {record.location or record.ip or 'unknown'}"
