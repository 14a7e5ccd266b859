"""Shared fixtures: an isolated server root, a recording requester, and module builders."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from AetherForge.config import set_config_manager
from AetherForge.extensions import CommandRegistry, PluginRegistry
from AetherForge.scripting import ModuleLoader
from AetherForge.scripting.compiler import PY_COMPILER


class RecordingRequester:
    """Collects every message sent to it."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def message(self, text: str) -> None:
        self.messages.append(text)


def write_source(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
    return path


@pytest.fixture
def forge_root(tmp_path, monkeypatch):
    monkeypatch.setenv("AETHERFORGE_ROOT", str(tmp_path))
    set_config_manager(None)
    yield tmp_path
    set_config_manager(None)


@pytest.fixture
def player():
    return RecordingRequester()


@pytest.fixture
def loader():
    return ModuleLoader(CommandRegistry(), PluginRegistry(server_version="1.0.0"))


@pytest.fixture
def build(forge_root):
    """Compile a single Python source into a module, optionally writing it to dst."""

    def _build(stem: str, source: str, dst: Path | None = None):
        src = write_source(forge_root / "src" / f"{stem}.py", source)
        result = PY_COMPILER.compile([str(src)], str(dst) if dst is not None else None)
        assert result.success, result.diagnostics
        return result

    return _build
