"""
扩展系统 - 命令与插件是宿主的两种扩展能力
Extension system - commands and plugins are the two host capabilities.
"""

from AetherForge.extensions.base import Command, Plugin, Requester
from AetherForge.extensions.registry import CommandRegistry, PluginRegistry

__all__ = [
    "Command",
    "CommandRegistry",
    "Plugin",
    "PluginRegistry",
    "Requester",
]
