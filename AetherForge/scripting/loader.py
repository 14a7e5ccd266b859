"""
模块加载器 - 从磁盘加载已编译模块，发现并实例化扩展类
Module loader - loads compiled modules from disk, then discovers and
instantiates the extension classes inside them.

一个模块要么全部注册，要么一个都不注册。
A module is accepted only as a whole: every discovered instance registers, or none does.
"""

from __future__ import annotations

import inspect
import logging
import os
from pathlib import Path
from typing import TypeVar

from AetherForge.extensions.base import Command, Plugin
from AetherForge.extensions.registry import CommandRegistry, PluginRegistry
from AetherForge.kernel import paths
from AetherForge.scripting.errors import DependencyMissingError, LoadFormatError
from AetherForge.scripting.module_image import ModuleImage, read_debug_sources

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_COMMANDS_FOUND = "No commands found in module file"


def is_comment_line(line: str) -> bool:
    return not line or line.startswith("#")


def describe_load_error(label: str, exc: BaseException) -> str:
    """
    把加载异常归类为面向用户的短消息（不含内部细节）
    Classify a load failure into a short, user-facing message without internal detail.
    """
    if isinstance(exc, (FileNotFoundError, ModuleNotFoundError, DependencyMissingError)):
        return f"{label} does not exist in the commands folder, or is missing a dependency. Details in the error log."
    if isinstance(exc, LoadFormatError):
        return f"{label} is not a valid module, or has an invalid dependency. Details in the error log."
    if isinstance(exc, (ImportError, OSError)):
        return f"{label} or one of its dependencies could not be loaded. Details in the error log."
    return "An unknown error occurred. Details in the error log."


def load_from_disk(path: str | os.PathLike[str]) -> ModuleImage:
    """
    从磁盘加载模块（以及同名 .dbg 调试符号）
    Loads the given module from disk, along with its .dbg debug symbols if present.
    """
    path = Path(path)
    data = path.read_bytes()
    debug = read_debug_sources(path)
    return ModuleImage.from_bytes(data, path.stem, origin=str(path), debug_sources=debug)


def discover_and_instantiate(image: ModuleImage, capability: type[T]) -> list[T]:
    """
    构造模块中所有实现 capability 的具体类的实例
    Constructs instances of every concrete class in the module that derives from capability.

    任一类构造失败都会使整个操作失败。
    Any single construction failure fails the whole operation.
    """
    module = image.activate()
    instances: list[T] = []

    for obj in list(vars(module).values()):
        if (
            not isinstance(obj, type)
            or obj is capability
            or obj.__module__ != module.__name__
            or not issubclass(obj, capability)
            or inspect.isabstract(obj)
        ):
            continue

        try:
            instance = obj()
        except Exception as exc:
            logger.warning('%s "%s" could not be loaded', capability.__name__, obj.__name__)
            raise LoadFormatError(f"{obj.__name__} could not be constructed") from exc

        if not isinstance(instance, capability):
            logger.warning('%s "%s" could not be loaded', capability.__name__, obj.__name__)
            raise LoadFormatError(f"{obj.__name__} did not produce a {capability.__name__}")
        instances.append(instance)

    return instances


class ModuleLoader:
    """
    加载命令与插件模块，并交给宿主注册表
    Loads command and plugin modules and hands the instances to the host registries.
    """

    def __init__(self, commands: CommandRegistry, plugins: PluginRegistry) -> None:
        self._commands = commands
        self._plugins = plugins

    @property
    def commands(self) -> CommandRegistry:
        return self._commands

    @property
    def plugins(self) -> PluginRegistry:
        return self._plugins

    # ── 命令 ──

    def load_commands(self, path: str | os.PathLike[str]) -> str | None:
        """
        加载并注册指定模块中的所有命令；成功返回 None，否则返回错误消息
        Loads and registers all commands from the given module path.
        Returns None on success, or a user-facing error message.
        """
        label = os.path.basename(os.fspath(path))
        try:
            image = load_from_disk(path)
        except Exception as exc:
            logger.exception("从 %s 加载命令失败", path)
            return describe_load_error(label, exc)
        return self.load_commands_from(image, label)

    def load_commands_from(self, image: ModuleImage, label: str | None = None) -> str | None:
        """
        注册已在内存中的模块里的命令
        Registers the commands of a module that is already in memory.
        """
        label = label or image.name
        try:
            commands = discover_and_instantiate(image, Command)
            if not commands:
                return NO_COMMANDS_FOUND
            self._commands.register_all(commands)
        except Exception as exc:
            logger.exception("从 %s 加载命令失败", label)
            return describe_load_error(label, exc)

        logger.info("已从 %s 加载 %d 个命令", label, len(commands))
        return None

    def autoload_commands(self) -> list[str]:
        """
        按自动加载列表加载命令；单条失败不影响其余条目
        Load every command named in the autoload list; one failure never stops the rest.
        """
        autoload_file = paths.get_autoload_file()
        if not autoload_file.exists():
            autoload_file.parent.mkdir(parents=True, exist_ok=True)
            autoload_file.touch()
            return []

        loaded = []
        for line in autoload_file.read_text(encoding="utf-8").splitlines():
            name = line.strip()
            if is_comment_line(name):
                continue

            error = self.load_commands(paths.command_module_path(name))
            if error is not None:
                logger.warning(error)
                continue

            logger.info("AUTOLOAD: Loaded Cmd%s%s", name, paths.MODULE_SUFFIX)
            loaded.append(name)
        return loaded

    # ── 插件 ──

    def load_plugin(self, path: str | os.PathLike[str], auto: bool) -> bool:
        """
        加载指定模块中的所有插件
        Loads all plugins from the given module path.
        """
        try:
            image = load_from_disk(path)
        except Exception:
            logger.exception("从 %s 加载插件失败", path)
            return False
        return self.load_plugin_from(image, auto, os.path.basename(os.fspath(path)))

    def load_plugin_from(self, image: ModuleImage, auto: bool, label: str | None = None) -> bool:
        """
        激活已在内存中的模块里的插件；首个激活失败即停止，并停用本模块已激活的插件
        Activates the plugins of an in-memory module. The first activation failure
        stops the loop and deactivates the plugins this module already activated.
        """
        label = label or image.name
        activated: list[Plugin] = []
        try:
            plugins = discover_and_instantiate(image, Plugin)
            for plugin in plugins:
                if not self._plugins.load(plugin, auto):
                    self._rollback(activated, label)
                    return False
                activated.append(plugin)
        except Exception:
            logger.exception("从 %s 加载插件失败", label)
            self._rollback(activated, label)
            return False
        return True

    def _rollback(self, activated: list[Plugin], label: str) -> None:
        for plugin in reversed(activated):
            logger.warning("回滚插件 %s (来自 %s)", plugin.name, label)
            self._plugins.unload(plugin, False)

    def autoload_plugins(self) -> list[str]:
        """
        加载插件目录中的所有模块；单个插件失败不影响其他插件
        Load every module in the plugins directory; one failure never blocks the others.
        """
        plugin_dir = paths.get_plugin_dir()
        if not plugin_dir.is_dir():
            plugin_dir.mkdir(parents=True, exist_ok=True)
            return []

        loaded = []
        for path in sorted(plugin_dir.glob(f"*{paths.MODULE_SUFFIX}")):
            if self.load_plugin(path, True):
                loaded.append(str(path))
            else:
                logger.warning("自动加载插件失败: %s", path.name)
        return loaded
