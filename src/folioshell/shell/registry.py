"""Command and link registries.

The command registry is a static table of every built-in command's
metadata, built once at import time. The link registry wraps the link
configuration delivered by the server. Both resolve a lower-cased
command token; :func:`classify_privileged` is the single place that
decides how an escalated argument line is handled, and is shared by the
server's Authorizer and the terminal's escalation flow.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Awaitable, Callable, Union

from pydantic import BaseModel, ConfigDict, Field

from folioshell.domain.models import LinkSpec

ESCALATION_KEYWORD = "sudo"
MOTD_KEYWORD = "motd"
POLLING_KEYWORDS = ("server", "srv")
BLANK_FLAG = "-blank"


class ArgPolicy(str, enum.Enum):
    NO_ARGS = "no_args"
    ANY_ARGS = "any_args"


class CommandGroup(str, enum.Enum):
    CORE = "core"
    UTILITY = "utility"
    LINK = "link"


class StaticText(BaseModel):
    """Handler that prints fixed text."""

    model_config = ConfigDict(frozen=True)

    text: str


class Action(BaseModel):
    """Handler that runs a coroutine with the argument vector.

    The callable receives ``(interpreter, args)`` and returns an
    :class:`~folioshell.domain.models.Effect` or None.
    """

    model_config = ConfigDict(frozen=True)

    fn: Callable[..., Awaitable[Any]]


Handler = Union[StaticText, Action]


class CommandSpec(BaseModel):
    """Metadata for one built-in command."""

    model_config = ConfigDict(frozen=True)

    name: str
    aliases: frozenset[str] = Field(default_factory=frozenset)
    arg_policy: ArgPolicy = ArgPolicy.ANY_ARGS
    group: CommandGroup
    description: str
    usage: str = Field(default="", description="Argument synopsis shown by help")
    help_text: str
    handler: Handler
    client_only: bool = Field(default=True, description="Eligible for escalation delegation")


class CommandRegistry:
    """Immutable name -> CommandSpec table with alias lookup."""

    def __init__(self, specs: Iterable[CommandSpec]) -> None:
        self._specs: dict[str, CommandSpec] = {}
        self._lookup: dict[str, CommandSpec] = {}
        for spec in specs:
            for name in (spec.name, *spec.aliases):
                if name in self._lookup:
                    raise ValueError(f"Duplicate command name: {name}")
                self._lookup[name] = spec
            self._specs[spec.name] = spec

    def resolve(self, name: str) -> CommandSpec | None:
        return self._lookup.get(name)

    def by_group(self, group: CommandGroup) -> list[CommandSpec]:
        return [s for s in self._specs.values() if s.group is group]

    def client_only_names(self) -> set[str]:
        return {name for name, spec in self._lookup.items() if spec.client_only}

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)


class LinkRegistry:
    """Link configuration keyed by command name (and alias)."""

    def __init__(self, links: Mapping[str, LinkSpec] | None = None) -> None:
        self._links: dict[str, LinkSpec] = {}
        self._lookup: dict[str, LinkSpec] = {}
        for key, link in (links or {}).items():
            key = key.lower()
            link = link.model_copy(update={"key": key})
            self._links[key] = link
            self._lookup[key] = link
        # Aliases never shadow a real key
        for link in self._links.values():
            if link.alias and link.alias.lower() not in self._lookup:
                self._lookup[link.alias.lower()] = link

    def lookup(self, name: str) -> LinkSpec | None:
        """Any link, including sudo-only ones."""
        return self._lookup.get(name)

    def resolve(self, name: str) -> LinkSpec | None:
        """A link reachable by normal resolution (not sudo-only)."""
        link = self._lookup.get(name)
        if link is None or link.sudo_only:
            return None
        return link

    def visible(self) -> list[LinkSpec]:
        """Links listed by ``ls`` and ``help``."""
        return [link for link in self._links.values() if not link.hidden and not link.sudo_only]

    def redirecting(self) -> list[LinkSpec]:
        return [link for link in self._links.values() if link.redirect and not link.sudo_only]

    def __len__(self) -> int:
        return len(self._links)


class PrivilegeClass(str, enum.Enum):
    """How an escalated argument line is handled."""

    CLIENT = "client"  # Re-run locally as if typed without sudo
    SUDO_LINK = "sudo_link"  # Server returns the hidden URL
    MOTD = "motd"  # Server mutates the MOTD store
    UNKNOWN = "unknown"


def classify_privileged(
    arg_line: str, commands: CommandRegistry, links: LinkRegistry
) -> PrivilegeClass:
    """Classify the argument of ``sudo <arg_line>``.

    ``motd`` followed by further text is a MOTD mutation; a bare ``motd``
    is the ordinary client command.
    """
    tokens = arg_line.split()
    if not tokens:
        return PrivilegeClass.UNKNOWN
    first = tokens[0].lower()
    if first == MOTD_KEYWORD and len(tokens) > 1:
        return PrivilegeClass.MOTD
    spec = commands.resolve(first)
    if spec is not None and spec.client_only:
        return PrivilegeClass.CLIENT
    link = links.lookup(first)
    if link is not None:
        return PrivilegeClass.SUDO_LINK if link.sudo_only else PrivilegeClass.CLIENT
    return PrivilegeClass.UNKNOWN
