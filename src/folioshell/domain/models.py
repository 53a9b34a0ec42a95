"""Core domain models for the folioshell system.

These models represent the data flowing between the terminal engine and
the server: link configuration, the client configuration payload,
privilege escalation requests and decisions, MOTD and login records, and
the key events that drive the line editor.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Effect(str, enum.Enum):
    """What a command handler asks the terminal to do after it returns."""

    NONE = "none"
    AWAIT_PASSWORD = "await_password"  # Escalation pending, prompt deferred
    POLLING = "polling"  # Live session started, prompt suppressed


class TerminalMode(str, enum.Enum):
    """Which input surface currently owns the keyboard."""

    IDLE = "idle"  # A normal prompt line is active
    RUNNING = "running"  # A submitted command is still executing
    AWAITING_PASSWORD = "awaiting_password"  # Masked secret input is active
    POLLING_ACTIVE = "polling_active"  # Live session owns the screen, no prompt


class LineState(str, enum.Enum):
    """Lifecycle of a single input line."""

    EMPTY = "empty"
    EDITING = "editing"
    SUBMITTED = "submitted"
    CANCELLED = "cancelled"


# ---------------------------------------------------------------------------
# Input Events
# ---------------------------------------------------------------------------


class KeyEvent(BaseModel):
    """A single key press delivered by a front end.

    Special keys use DOM-style names: 'Enter', 'Backspace', 'ArrowUp',
    'ArrowDown', 'ArrowLeft', 'ArrowRight'. Printable keys are the
    character itself.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Key name or printable character")
    ctrl: bool = Field(default=False)
    meta: bool = Field(default=False)

    @property
    def is_interrupt(self) -> bool:
        """Ctrl+C or Cmd+C."""
        return self.key.lower() == "c" and (self.ctrl or self.meta)

    @property
    def is_printable(self) -> bool:
        return len(self.key) == 1 and not (self.ctrl or self.meta)


# ---------------------------------------------------------------------------
# Link / Client Configuration Models
# ---------------------------------------------------------------------------


class SubcommandSpec(BaseModel):
    """A named sub-destination of a link command (e.g. ``gh repo``)."""

    model_config = ConfigDict(frozen=True)

    url: str
    name: str


class LinkSpec(BaseModel):
    """A short command name that opens an outbound URL."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str = Field(default="", description="Command name, filled in from the config mapping")
    name: str = Field(description="Display name")
    url: str
    alias: str | None = Field(default=None)
    redirect: bool = Field(default=False, description="Served through a GET /{key} redirect route")
    hidden: bool = Field(default=False, description="Resolvable but not listed")
    sudo_only: bool = Field(default=False, alias="sudoOnly")
    subcommands: dict[str, SubcommandSpec] | None = Field(default=None)


class TerminalOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    storage_key: str = Field(default="folioshell_command_history", alias="storageKey")
    max_history_size: int = Field(default=100, gt=0, alias="maxHistorySize")


class ClientConfig(BaseModel):
    """Payload of ``GET /api/config``: the client's only source of site data."""

    model_config = ConfigDict(populate_by_name=True)

    links: dict[str, LinkSpec] = Field(default_factory=dict)
    weather_codes: dict[str, str] = Field(default_factory=dict, alias="weatherCodes")
    date_format: dict[str, Any] = Field(default_factory=dict, alias="dateFormat")
    terminal: TerminalOptions = Field(default_factory=TerminalOptions)


# ---------------------------------------------------------------------------
# Privilege Escalation Models
# ---------------------------------------------------------------------------


class SudoRequest(BaseModel):
    password: str = Field(default="", description="Escalation secret as typed")
    arg: str = Field(default="", description="Everything after the escalation keyword")


class SudoDecision(BaseModel):
    """The Authorizer's answer. ``valid=False`` carries no other field."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    valid: bool
    output: str | None = None
    redirect: str | None = None
    target: Literal["_self", "_blank"] | None = None
    client_command: bool | None = Field(default=None, alias="clientCommand")


# ---------------------------------------------------------------------------
# MOTD / Login Models
# ---------------------------------------------------------------------------


class MotdResponse(BaseModel):
    success: bool
    motd: list[str] = Field(default_factory=list)
    error: str | None = None


class SaveLoginRequest(BaseModel):
    user_agent: str | None = None
    ip_address: str | None = None
    location: str | None = None
    login_date: datetime | None = None


class SaveLoginResponse(BaseModel):
    success: bool
    error: str | None = None


class LoginRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    request_date: datetime | None = None
    user_agent: str | None = None
    ip: str | None = None
    location: str | None = None


class LastLoginResponse(BaseModel):
    success: bool
    data: LoginRecord | None = None
    error: str | None = None
