"""
AetherForge 路径管理模块

集中管理源码、模块、插件和日志的约定路径。
所有相对路径都以根目录为基准，根目录可用环境变量 AETHERFORGE_ROOT 覆盖。

目录结构:
    <root>/
    ├── config/aetherforge.json    ← 配置文件
    ├── extra/commands/source/     ← 命令源码 (Cmd<name>.py)
    ├── extra/commands/dll/        ← 已编译命令 (Cmd<name>.bin)
    ├── plugins/                   ← 插件源码与模块 (<name>.py / <name>.bin)
    ├── text/cmdautoload.txt       ← 自动加载命令列表
    └── logs/
        ├── AetherForge.log        ← 通用日志
        └── errors/compiler.log    ← 编译错误日志
"""

from __future__ import annotations

import os
from pathlib import Path

from AetherForge.config.manager import get_config_manager

# 已编译模块与调试符号的扩展名
MODULE_SUFFIX = ".bin"
DEBUG_SUFFIX = ".dbg"


def get_root() -> Path:
    """获取根目录，支持环境变量 AETHERFORGE_ROOT 覆盖。"""
    root = os.environ.get("AETHERFORGE_ROOT", "")
    return Path(root) if root else Path.cwd()


def _resolve(key: str, default: str) -> Path:
    path = Path(get_config_manager().get(key, default))
    return path if path.is_absolute() else get_root() / path


# ── 配置 ──

def get_config_file() -> Path:
    """配置文件: config/aetherforge.json"""
    return get_root() / "config" / "aetherforge.json"


# ── 命令 ──

def get_source_dir() -> Path:
    """命令源码目录: extra/commands/source/"""
    return _resolve("paths.source_dir", "extra/commands/source")


def get_command_dll_dir() -> Path:
    """已编译命令目录: extra/commands/dll/"""
    return _resolve("paths.command_dll_dir", "extra/commands/dll")


def get_autoload_file() -> Path:
    """自动加载列表: text/cmdautoload.txt"""
    return _resolve("paths.autoload_file", "text/cmdautoload.txt")


def command_module_path(name: str) -> Path:
    """Returns the default module path for the custom command with the given name."""
    return get_command_dll_dir() / f"Cmd{name}{MODULE_SUFFIX}"


# ── 插件 ──

def get_plugin_dir() -> Path:
    """插件目录: plugins/"""
    return _resolve("paths.plugins_dir", "plugins")


def plugin_module_path(name: str) -> Path:
    """Returns the default module path for the plugin with the given name."""
    return get_plugin_dir() / f"{name}{MODULE_SUFFIX}"


def debug_symbols_path(module_path: str | os.PathLike[str]) -> Path:
    """调试符号文件与模块同名，仅扩展名不同。"""
    return Path(module_path).with_suffix(DEBUG_SUFFIX)


# ── 日志 ──

def get_log_file() -> Path:
    """通用日志文件: logs/AetherForge.log"""
    return _resolve("logging.file", "logs/AetherForge.log")


def get_compiler_log() -> Path:
    """编译错误日志: logs/errors/compiler.log"""
    return _resolve("paths.compiler_log", "logs/errors/compiler.log")
