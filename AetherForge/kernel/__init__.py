"""
内核模块 - 日志与路径
Kernel module - logging and conventional paths.
"""

from AetherForge.kernel.logging import get_log_manager, setup_logging

__all__ = ["get_log_manager", "setup_logging"]
