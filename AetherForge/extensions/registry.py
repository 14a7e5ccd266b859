"""
宿主注册表 - 命令表与插件列表
Host registries - the command table and the plugin list.

加载器只通过这里的接口与宿主交互。
The module loader only talks to the host through these interfaces.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from AetherForge import __version__
from AetherForge.extensions.base import Command, Plugin, Requester

logger = logging.getLogger(__name__)


def match_command(text: str, command: str) -> tuple[bool, str]:
    """
    检查文本是否匹配命令
    Check if text matches a command.

    返回 (是否匹配, 剩余参数文本)
    Returns (matched, remaining argument text).
    """
    text = text.strip()
    if text.startswith("/"):
        text = text[1:]

    parts = text.split(maxsplit=1)
    if not parts or not command:
        return False, ""

    if parts[0].lower() == command.lower():
        return True, parts[1] if len(parts) > 1 else ""

    return False, ""


def parse_version(text: str) -> tuple[int, ...]:
    """"1.9.2" -> (1, 9, 2); non-numeric parts are ignored."""
    return tuple(int(part) for part in re.findall(r"\d+", text))


class CommandRegistry:
    """
    命令表 - 按名称保存已注册的命令
    Command table - holds registered commands by name.
    """

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(self, cmd: Command) -> None:
        """
        注册命令（同名命令会被替换）
        Register a command, replacing any command with the same name.
        """
        if not cmd.name:
            raise ValueError(f"{type(cmd).__name__} has no command name")

        key = cmd.name.lower()
        if key in self._commands:
            logger.info("替换已注册的命令: /%s", cmd.name)
        self._commands[key] = cmd
        logger.debug("已注册命令: /%s", cmd.name)

    def register_all(self, commands: Iterable[Command]) -> None:
        """
        全部注册或全部不注册
        Register every command, or none of them if any is invalid.
        """
        commands = list(commands)
        for cmd in commands:
            if not cmd.name:
                raise ValueError(f"{type(cmd).__name__} has no command name")
        for cmd in commands:
            self.register(cmd)

    def unregister(self, cmd: Command) -> bool:
        key = cmd.name.lower()
        if self._commands.get(key) is not cmd:
            return False
        del self._commands[key]
        return True

    def find(self, name: str) -> Command | None:
        """按名称或快捷名查找（不区分大小写） / Find by name or shortcut, case-insensitively."""
        key = name.lower()
        cmd = self._commands.get(key)
        if cmd is not None:
            return cmd
        for cmd in self._commands.values():
            if cmd.shortcut and cmd.shortcut.lower() == key:
                return cmd
        return None

    def dispatch(self, player: Requester, text: str) -> bool:
        """
        将 "/name args" 分发给匹配的命令
        Dispatch "/name args" to the matching command.
        """
        parts = text.strip().lstrip("/").split(maxsplit=1)
        if not parts:
            return False

        cmd = self.find(parts[0])
        if cmd is None:
            return False

        for alias in (cmd.name, cmd.shortcut):
            matched, args = match_command(text, alias)
            if matched:
                cmd.use(player, args)
                return True
        return False

    def all(self) -> list[Command]:
        return list(self._commands.values())

    def __contains__(self, name: str) -> bool:
        return self.find(name) is not None

    def __len__(self) -> int:
        return len(self._commands)


class PluginRegistry:
    """
    插件列表 - 负责插件的激活与停用
    Plugin list - activates and deactivates plugins.
    """

    def __init__(self, server_version: str = __version__) -> None:
        self._plugins: list[Plugin] = []
        self._server_version = server_version

    def load(self, plugin: Plugin, startup: bool) -> bool:
        """
        激活插件
        Activate a plugin. Returns False if it could not be activated.
        """
        required = plugin.server_version
        if required and parse_version(required) > parse_version(self._server_version):
            logger.warning(
                "插件 (%s) 需要更新版本的宿主: %s > %s",
                plugin.name,
                required,
                self._server_version,
            )
            return False

        self._plugins.append(plugin)
        try:
            plugin.load(startup)
        except Exception:
            logger.exception("插件 %s 激活失败", plugin.name)
            self._plugins.remove(plugin)
            return False

        logger.info("已加载插件: %s (作者: %s)", plugin.name, plugin.creator or "未知")
        if plugin.welcome:
            logger.info(plugin.welcome)
        return True

    def unload(self, plugin: Plugin, shutdown: bool) -> bool:
        """
        停用插件
        Deactivate a plugin.
        """
        if plugin not in self._plugins:
            return False

        self._plugins.remove(plugin)
        try:
            plugin.unload(shutdown)
        except Exception:
            logger.exception("插件 %s 停用出错", plugin.name)
            return False

        logger.info("已卸载插件: %s", plugin.name)
        return True

    def find(self, name: str) -> Plugin | None:
        key = name.lower()
        for plugin in self._plugins:
            if plugin.name.lower() == key:
                return plugin
        return None

    def all(self) -> list[Plugin]:
        return list(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)
