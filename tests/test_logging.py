"""Tests for AetherForge.kernel.logging."""

from __future__ import annotations

import logging

import colorlog
import pytest

from AetherForge.kernel import get_log_manager, setup_logging


@pytest.fixture
def manager():
    manager = get_log_manager()
    yield manager
    manager.shutdown()


class TestLogManager:
    def test_file_and_console_handlers(self, manager, tmp_path):
        log_file = tmp_path / "logs" / "AetherForge.log"
        setup_logging("WARNING", log_file)

        root = logging.getLogger()
        assert manager._console_handler in root.handlers
        assert isinstance(manager._console_handler.formatter, colorlog.ColoredFormatter)
        assert manager._console_handler.level == logging.WARNING

        logging.getLogger("AetherForge.scripting.loader").error("autoload failed for CmdX")
        manager._file_handler.flush()
        assert "autoload failed for CmdX" in log_file.read_text(encoding="utf-8")

    def test_configure_is_idempotent(self, manager, tmp_path):
        manager.configure("INFO", tmp_path / "a.log")
        manager.configure("DEBUG", tmp_path / "b.log")

        root = logging.getLogger()
        assert sum(h is manager._console_handler for h in root.handlers) == 1
        assert manager._console_handler.level == logging.DEBUG
        assert manager._file_handler.baseFilename == str(tmp_path / "b.log")

    def test_shutdown_detaches_handlers(self, manager, tmp_path):
        manager.configure("INFO", tmp_path / "a.log")
        console = manager._console_handler
        manager.shutdown()

        assert console not in logging.getLogger().handlers
        assert manager._file_handler is None
