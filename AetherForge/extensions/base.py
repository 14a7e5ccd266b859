"""
扩展基类 - 命令与插件的能力契约
Extension bases - the capability contracts for commands and plugins.

编译后的模块中凡是继承这些基类的具体类都会被发现并实例化。
Every concrete class in a compiled module that inherits from one of these
bases is discovered and instantiated by the module loader.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class Requester(Protocol):
    """
    请求者 - 接收交互式结果消息的一方（玩家、控制台）
    Requester - whoever receives interactive result messages (player, console).
    """

    def message(self, text: str) -> None: ...


class Command(ABC):
    """
    命令基类 - 所有自定义命令继承此类
    Command base - all custom commands inherit from this.

    子类通过类属性声明元数据，并实现 use()。
    Subclasses declare metadata as class attributes and implement use().
    """

    # 命令名（唯一标识，不区分大小写）
    name: str = ""
    # 快捷名
    shortcut: str = ""
    # 分类
    category: str = "other"
    # 是否可在博物馆地图中使用
    museum_usable: bool = True
    # 默认权限等级
    default_rank: str = "guest"

    @abstractmethod
    def use(self, player: Requester, message: str) -> None:
        """
        执行命令
        Execute the command.
        """

    def help(self, player: Requester) -> None:
        """帮助信息 / Help text."""
        player.message(f"No help is available for /{self.name}.")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} /{self.name}>"


class Plugin(ABC):
    """
    插件基类 - 所有插件继承此类
    Plugin base - all plugins inherit from this.

    生命周期：
    1. __init__() - 无参构造
    2. load(startup) - 激活时调用
    3. unload(shutdown) - 停用时调用
    """

    # 插件名
    name: str = ""
    # 作者
    creator: str = ""
    # 所需的最低宿主版本
    server_version: str = ""
    # 加载成功后发送的欢迎语
    welcome: str = ""

    @abstractmethod
    def load(self, startup: bool) -> None:
        """
        激活时调用
        Called on activation; startup is True during autoload.
        """

    @abstractmethod
    def unload(self, shutdown: bool) -> None:
        """
        停用时调用
        Called on deactivation; shutdown is True when the server is stopping.
        """

    def help(self, player: Requester) -> None:
        """帮助信息 / Help text."""
        player.message("No help is available for this plugin.")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
