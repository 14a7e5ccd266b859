"""Tests for AetherForge.scripting.loader."""

from __future__ import annotations

import logging
import sys

from AetherForge.extensions import Command, Plugin
from AetherForge.kernel import paths
from AetherForge.scripting import ModuleImage, discover_and_instantiate
from AetherForge.scripting.loader import NO_COMMANDS_FOUND, describe_load_error
from AetherForge.scripting.module_image import CodeUnit


def command_source(cls_name, name):
    return f'''
        from AetherForge.extensions import Command


        class {cls_name}(Command):
            name = "{name}"

            def use(self, player, message):
                player.message("{name}")
        '''


def plugin_source(cls_name, server_version="", fail=False):
    body = "raise RuntimeError('cannot start')" if fail else "self.started = startup"
    return f'''
        from AetherForge.extensions import Plugin


        class {cls_name}(Plugin):
            name = "{cls_name}"
            creator = "tests"
            server_version = "{server_version}"

            def load(self, startup):
                {body}

            def unload(self, shutdown):
                pass
        '''


class TestDiscovery:
    def test_skips_abstract_and_foreign_classes(self, build):
        result = build("CmdMixed", '''
            from AetherForge.extensions import Command, Plugin


            class Base(Command):
                category = "testing"


            class CmdReal(Base):
                name = "real"

                def use(self, player, message):
                    pass


            class NotACommand:
                name = "nope"
        ''')

        found = discover_and_instantiate(result.image, Command)
        assert [type(c).__name__ for c in found] == ["CmdReal"]
        assert discover_and_instantiate(result.image, Plugin) == []


class TestLoadCommands:
    def test_registers_every_command(self, build, loader, player):
        dst = paths.command_module_path("Pair")
        build("CmdPair", '''
            from AetherForge.extensions import Command


            class CmdAlpha(Command):
                name = "alpha"

                def use(self, player, message):
                    player.message("alpha")


            class CmdBeta(Command):
                name = "beta"
                shortcut = "b"

                def use(self, player, message):
                    player.message("beta " + message)
        ''', dst)

        assert loader.load_commands(dst) is None
        assert {c.name for c in loader.commands.all()} == {"alpha", "beta"}

        assert loader.commands.dispatch(player, "/b two words")
        assert player.messages == ["beta two words"]

    def test_in_memory_module(self, build, loader):
        result = build("CmdMem", command_source("CmdMem", "mem"))
        assert loader.load_commands_from(result.image) is None
        assert "mem" in loader.commands

    def test_no_commands_found(self, build, loader):
        dst = paths.command_module_path("Empty")
        build("CmdEmpty", "VALUE = 1\n", dst)
        assert loader.load_commands(dst) == NO_COMMANDS_FOUND
        assert len(loader.commands) == 0

    def test_construction_failure_registers_nothing(self, build, loader, caplog):
        dst = paths.command_module_path("Trio")
        build("CmdTrio", '''
            from AetherForge.extensions import Command


            class CmdOne(Command):
                name = "one"

                def use(self, player, message):
                    pass


            class CmdTwo(Command):
                name = "two"

                def __init__(self):
                    raise RuntimeError("refuses to start")

                def use(self, player, message):
                    pass


            class CmdThree(Command):
                name = "three"

                def use(self, player, message):
                    pass
        ''', dst)

        with caplog.at_level(logging.WARNING):
            error = loader.load_commands(dst)

        assert error == "CmdTrio.bin is not a valid module, or has an invalid dependency. Details in the error log."
        assert len(loader.commands) == 0
        assert any('Command "CmdTwo" could not be loaded' in r.getMessage() for r in caplog.records)

    def test_missing_file(self, forge_root, loader):
        error = loader.load_commands(forge_root / "CmdGone.bin")
        assert error == (
            "CmdGone.bin does not exist in the commands folder, or is missing a dependency. "
            "Details in the error log."
        )

    def test_corrupt_file(self, forge_root, loader):
        path = forge_root / "CmdJunk.bin"
        path.write_bytes(b"this is not a module")
        assert "is not a valid module" in loader.load_commands(path)

    def test_missing_dependency(self, forge_root, loader):
        path = forge_root / "CmdDep.bin"
        code = compile("x = 1", "CmdDep.py", "exec")
        ModuleImage("CmdDep", [CodeUnit("CmdDep.py", code)], ["no_such_module_af"]).save(path)

        assert "is missing a dependency" in loader.load_commands(path)

    def test_import_error_while_running(self, build, loader):
        dst = paths.command_module_path("BadImport")
        build("CmdBadImport", "from json import no_such_name_af\n", dst)
        assert loader.load_commands(dst) == (
            "CmdBadImport.bin or one of its dependencies could not be loaded. Details in the error log."
        )

    def test_unknown_error(self, build, loader):
        dst = paths.command_module_path("Boom")
        build("CmdBoom", "raise RuntimeError('boom')\n", dst)
        assert loader.load_commands(dst) == "An unknown error occurred. Details in the error log."


class TestAutoloadCommands:
    def test_creates_missing_list(self, forge_root, loader):
        assert loader.autoload_commands() == []
        assert paths.get_autoload_file().exists()

    def test_one_failure_does_not_stop_the_rest(self, build, loader, caplog):
        for name in ("Alpha", "Beta", "Gamma", "Delta"):
            build(f"Cmd{name}", command_source(f"Cmd{name}", name.lower()), paths.command_module_path(name))

        autoload_file = paths.get_autoload_file()
        autoload_file.parent.mkdir(parents=True, exist_ok=True)
        autoload_file.write_text("# startup commands\nAlpha\n\nBeta\nMissing\nGamma\nDelta\n", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            loaded = loader.autoload_commands()

        assert loaded == ["Alpha", "Beta", "Gamma", "Delta"]
        assert len(loader.commands) == 4
        assert any("CmdMissing.bin does not exist" in r.getMessage() for r in caplog.records)


class TestLoadPlugins:
    def test_loads_and_activates(self, build, loader):
        dst = paths.plugin_module_path("Greeter")
        build("Greeter", plugin_source("Greeter", "1.0.0"), dst)

        assert loader.load_plugin(dst, True)
        plugin = loader.plugins.find("greeter")
        assert isinstance(plugin, Plugin)
        assert plugin.started is True

    def test_activation_failure(self, build, loader):
        dst = paths.plugin_module_path("Broken")
        build("Broken", plugin_source("Broken", fail=True), dst)

        assert not loader.load_plugin(dst, False)
        assert len(loader.plugins) == 0

    def test_later_failure_deactivates_earlier_plugins(self, build, loader):
        dst = paths.plugin_module_path("Pair")
        build("Pair", '''
            from AetherForge.extensions import Plugin

            UNLOADED = []


            class First(Plugin):
                name = "First"

                def load(self, startup):
                    pass

                def unload(self, shutdown):
                    UNLOADED.append((self.name, shutdown))


            class Second(Plugin):
                name = "Second"

                def load(self, startup):
                    raise RuntimeError("cannot start")

                def unload(self, shutdown):
                    UNLOADED.append((self.name, shutdown))
        ''', dst)

        assert not loader.load_plugin(dst, False)
        assert loader.plugins.all() == []
        assert sys.modules["AetherForge.loaded.Pair"].UNLOADED == [("First", False)]

    def test_rollback_calls_unload_in_reverse_order(self, build, loader):
        result = build("Trio", '''
            from AetherForge.extensions import Plugin

            EVENTS = []


            class One(Plugin):
                name = "One"

                def load(self, startup):
                    EVENTS.append("load One")

                def unload(self, shutdown):
                    EVENTS.append("unload One")


            class Two(Plugin):
                name = "Two"

                def load(self, startup):
                    EVENTS.append("load Two")

                def unload(self, shutdown):
                    EVENTS.append("unload Two")


            class Three(Plugin):
                name = "Three"
                server_version = "99.0.0"

                def load(self, startup):
                    EVENTS.append("load Three")

                def unload(self, shutdown):
                    pass
        ''')

        assert not loader.load_plugin_from(result.image, False)
        assert len(loader.plugins) == 0
        assert result.image.module.EVENTS == ["load One", "load Two", "unload Two", "unload One"]

    def test_newer_server_version_is_refused(self, build, loader):
        dst = paths.plugin_module_path("Future")
        build("Future", plugin_source("Future", "99.0.0"), dst)

        assert not loader.load_plugin(dst, False)
        assert loader.plugins.find("Future") is None

    def test_missing_file(self, forge_root, loader):
        assert not loader.load_plugin(forge_root / "Nothing.bin", False)

    def test_autoload_creates_directory(self, forge_root, loader):
        assert loader.autoload_plugins() == []
        assert paths.get_plugin_dir().is_dir()

    def test_autoload_skips_bad_modules(self, build, loader):
        good = paths.plugin_module_path("Good")
        build("Good", plugin_source("Good"), good)
        paths.plugin_module_path("Bad").write_bytes(b"garbage")

        assert loader.autoload_plugins() == [str(good)]
        assert [p.name for p in loader.plugins.all()] == ["Good"]


class TestDescribeLoadError:
    def test_os_error(self):
        assert describe_load_error("CmdX.bin", PermissionError("denied")) == (
            "CmdX.bin or one of its dependencies could not be loaded. Details in the error log."
        )
