"""
默认配置 - 扩展子系统的所有默认配置值
Default configuration - all default configuration values of the extension subsystem.
"""

from __future__ import annotations

from typing import Any

from AetherForge import __version__


def build_default_config() -> dict[str, Any]:
    """
    构建默认配置
    Build the default configuration.
    """
    return {
        # 宿主服务器信息
        "server": {
            "version": __version__,
        },
        # 约定路径（相对于根目录）
        "paths": {
            "source_dir": "extra/commands/source",
            "command_dll_dir": "extra/commands/dll",
            "plugins_dir": "plugins",
            "autoload_file": "text/cmdautoload.txt",
            "compiler_log": "logs/errors/compiler.log",
        },
        # 编译器设置
        "scripting": {
            "python_optimize": -1,
        },
        # 日志配置
        "logging": {
            "level": "INFO",
            "file": "logs/AetherForge.log",
        },
    }
