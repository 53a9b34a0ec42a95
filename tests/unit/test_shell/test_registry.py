"""Tests for the command/link registries and privilege classification."""

from __future__ import annotations

import pytest

from folioshell.domain.models import LinkSpec
from folioshell.shell.commands import COMMANDS
from folioshell.shell.registry import (
    Action,
    ArgPolicy,
    CommandGroup,
    CommandRegistry,
    CommandSpec,
    LinkRegistry,
    PrivilegeClass,
    StaticText,
    classify_privileged,
)


class TestCommandRegistry:
    def test_builtin_vocabulary(self) -> None:
        names = {spec.name for spec in COMMANDS}
        assert names == {
            "help", "about", "sudo", "motd", "echo", "clear", "exit", "ls",
            "info", "weather", "cfu", "env",
        }

    def test_only_sudo_is_server_side(self) -> None:
        assert COMMANDS.client_only_names() == {spec.name for spec in COMMANDS} - {"sudo"}

    def test_no_args_commands(self) -> None:
        no_args = {spec.name for spec in COMMANDS if spec.arg_policy is ArgPolicy.NO_ARGS}
        assert no_args == {"about", "clear", "exit", "ls", "cfu", "env"}

    def test_groups(self) -> None:
        utility = [spec.name for spec in COMMANDS.by_group(CommandGroup.UTILITY)]
        assert utility == ["info", "weather", "cfu", "env"]

    def test_duplicate_names_rejected(self) -> None:
        spec = CommandSpec(
            name="x", group=CommandGroup.CORE, description="", help_text="",
            handler=StaticText(text="x"),
        )
        with pytest.raises(ValueError):
            CommandRegistry([spec, spec])

    def test_alias_resolution(self) -> None:
        async def fn(shell, args):
            return None

        registry = CommandRegistry([
            CommandSpec(
                name="list", aliases=frozenset({"dir"}), group=CommandGroup.CORE,
                description="", help_text="", handler=Action(fn=fn),
            )
        ])
        assert registry.resolve("dir") is registry.resolve("list")
        assert "dir" in registry
        assert len(registry) == 1


class TestLinkRegistry:
    def test_keys_are_filled_and_lowercased(self) -> None:
        links = LinkRegistry({"GH": LinkSpec(name="GitHub", url="https://github.com")})
        link = links.resolve("gh")
        assert link is not None
        assert link.key == "gh"

    def test_alias_resolves(self, link_registry: LinkRegistry) -> None:
        assert link_registry.resolve("github").key == "gh"

    def test_alias_never_shadows_key(self) -> None:
        links = LinkRegistry({
            "a": LinkSpec(name="A", url="https://a", alias="b"),
            "b": LinkSpec(name="B", url="https://b"),
        })
        assert links.resolve("b").name == "B"

    def test_sudo_only_hidden_from_resolution(self, link_registry: LinkRegistry) -> None:
        assert link_registry.resolve("fdb") is None
        assert link_registry.lookup("fdb") is not None

    def test_visible_excludes_hidden_and_sudo_only(self, link_registry: LinkRegistry) -> None:
        assert [link.key for link in link_registry.visible()] == ["gh", "blog"]

    def test_redirecting(self, link_registry: LinkRegistry) -> None:
        assert [link.key for link in link_registry.redirecting()] == ["gh"]


class TestClassifyPrivileged:
    @pytest.mark.parametrize(
        ("arg", "expected"),
        [
            ("motd -add hello", PrivilegeClass.MOTD),
            ("MOTD -clear", PrivilegeClass.MOTD),
            ("motd", PrivilegeClass.CLIENT),
            ("ls", PrivilegeClass.CLIENT),
            ("gh -blank", PrivilegeClass.CLIENT),
            ("github", PrivilegeClass.CLIENT),
            ("fdb", PrivilegeClass.SUDO_LINK),
            ("FDB -blank", PrivilegeClass.SUDO_LINK),
            ("sudo ls", PrivilegeClass.UNKNOWN),
            ("rm -rf /", PrivilegeClass.UNKNOWN),
            ("", PrivilegeClass.UNKNOWN),
        ],
    )
    def test_classification(self, link_registry: LinkRegistry, arg: str, expected: PrivilegeClass) -> None:
        assert classify_privileged(arg, COMMANDS, link_registry) is expected
