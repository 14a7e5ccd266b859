"""
配置模块 - 管理子系统配置
Config module - manages subsystem configuration.
"""

from AetherForge.config.defaults import build_default_config
from AetherForge.config.manager import (
    ConfigManager,
    get_config_manager,
    set_config_manager,
)

__all__ = [
    "ConfigManager",
    "build_default_config",
    "get_config_manager",
    "set_config_manager",
]
