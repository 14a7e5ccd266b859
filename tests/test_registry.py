"""Tests for AetherForge.extensions.registry."""

from __future__ import annotations

import pytest

from AetherForge.extensions import Command, CommandRegistry, Plugin, PluginRegistry
from AetherForge.extensions.registry import match_command, parse_version


class Echo(Command):
    name = "echo"
    shortcut = "e"

    def use(self, player, message):
        player.message(message)


class Nameless(Command):
    def use(self, player, message):
        pass


class Sample(Plugin):
    name = "Sample"
    creator = "tests"
    server_version = "1.0.0"

    def __init__(self, fail_on_load=False):
        self.fail_on_load = fail_on_load
        self.events = []

    def load(self, startup):
        if self.fail_on_load:
            raise RuntimeError("cannot start")
        self.events.append(("load", startup))

    def unload(self, shutdown):
        self.events.append(("unload", shutdown))


class TestHelpers:
    def test_match_command(self):
        assert match_command("/echo hi there", "echo") == (True, "hi there")
        assert match_command("ECHO", "echo") == (True, "")
        assert match_command("/echoes", "echo") == (False, "")

    def test_parse_version(self):
        assert parse_version("1.9.2") == (1, 9, 2)
        assert parse_version("v2.0-beta") == (2, 0)
        assert parse_version("1.10") > parse_version("1.9")


class TestCommandRegistry:
    def test_register_and_find(self):
        registry = CommandRegistry()
        cmd = Echo()
        registry.register(cmd)

        assert registry.find("ECHO") is cmd
        assert registry.find("e") is cmd
        assert "echo" in registry
        assert len(registry) == 1

    def test_same_name_replaces(self):
        registry = CommandRegistry()
        first, second = Echo(), Echo()
        registry.register(first)
        registry.register(second)

        assert registry.all() == [second]

    def test_register_all_is_all_or_nothing(self):
        registry = CommandRegistry()
        with pytest.raises(ValueError):
            registry.register_all([Echo(), Nameless()])
        assert len(registry) == 0

    def test_dispatch(self, player):
        registry = CommandRegistry()
        registry.register(Echo())

        assert registry.dispatch(player, "/e hello")
        assert not registry.dispatch(player, "/unknown")
        assert player.messages == ["hello"]

    def test_unregister(self):
        registry = CommandRegistry()
        cmd = Echo()
        registry.register(cmd)

        assert not registry.unregister(Echo())
        assert registry.unregister(cmd)
        assert registry.find("echo") is None


class TestPluginRegistry:
    def test_load_and_unload(self):
        registry = PluginRegistry(server_version="1.0.0")
        plugin = Sample()

        assert registry.load(plugin, True)
        assert registry.find("sample") is plugin
        assert registry.unload(plugin, False)
        assert plugin.events == [("load", True), ("unload", False)]
        assert len(registry) == 0

    def test_failed_load_is_removed(self):
        registry = PluginRegistry(server_version="1.0.0")
        assert not registry.load(Sample(fail_on_load=True), False)
        assert registry.all() == []

    def test_newer_required_version_is_refused(self):
        registry = PluginRegistry(server_version="0.9")
        plugin = Sample()

        assert not registry.load(plugin, False)
        assert plugin.events == []

    def test_unload_unknown_plugin(self):
        assert not PluginRegistry().unload(Sample(), True)
