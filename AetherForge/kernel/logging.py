"""
Logging System - Centralized logging management.

Provides colored console logging and a rotating general error log. Full
exception context for failed compiles and loads ends up in that file, while
operators only ever see the short classification strings.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog

CONSOLE_FORMAT = "%(log_color)s%(asctime)s | %(levelname)-8s | %(name)s%(reset)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogManager:
    """
    Centralized logging configuration and management.

    Provides consistent formatting across all loggers with support for:
    - Colored console output
    - File logging with rotation
    """

    _instance: LogManager | None = None
    _initialized: bool = False

    def __new__(cls) -> LogManager:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if LogManager._initialized:
            return

        LogManager._initialized = True
        self._log_level = logging.INFO
        self._console_handler: logging.Handler | None = None
        self._file_handler: logging.Handler | None = None

    def configure(self, level: int | str = logging.INFO, log_file: str | Path | None = None) -> None:
        """Install the console and file handlers on the root logger (idempotent)."""
        root = logging.getLogger()
        root.setLevel(logging.DEBUG)

        if self._console_handler is None:
            console_formatter = colorlog.ColoredFormatter(
                CONSOLE_FORMAT,
                datefmt=DATE_FORMAT,
                log_colors={
                    "DEBUG": "green",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "red,bg_white",
                },
            )
            self._console_handler = logging.StreamHandler(sys.stdout)
            self._console_handler.setFormatter(console_formatter)
            root.addHandler(self._console_handler)

        if log_file is not None:
            self._set_log_file(Path(log_file))

        self.set_level(level)

    def _set_log_file(self, log_file: Path) -> None:
        root = logging.getLogger()
        if self._file_handler is not None:
            root.removeHandler(self._file_handler)
            self._file_handler.close()

        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        root.addHandler(file_handler)
        self._file_handler = file_handler

    def set_level(self, level: int | str) -> None:
        """Set the logging level for the console handler."""
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)

        self._log_level = level
        if self._console_handler is not None:
            self._console_handler.setLevel(level)

    def shutdown(self) -> None:
        """Detach and close the handlers installed by configure()."""
        root = logging.getLogger()
        for handler in (self._console_handler, self._file_handler):
            if handler is not None:
                root.removeHandler(handler)
                handler.close()
        self._console_handler = None
        self._file_handler = None


# Global log manager instance
_log_manager: LogManager | None = None


def get_log_manager() -> LogManager:
    """Get the global log manager instance."""
    global _log_manager
    if _log_manager is None:
        _log_manager = LogManager()
    return _log_manager


def setup_logging(level: int | str = "INFO", log_file: str | Path | None = None) -> LogManager:
    """
    配置日志系统
    Configure the logging system.
    """
    manager = get_log_manager()
    manager.configure(level, log_file)
    logging.getLogger("AetherForge").info("日志系统已初始化 (级别=%s)", level)
    return manager
