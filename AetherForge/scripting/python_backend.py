"""
Python 后端 - 使用解释器内置的 compile()
Python backend - uses the interpreter's built-in compile().
"""

from __future__ import annotations

import functools
import types
from typing import Any

from AetherForge.config.manager import get_config_manager
from AetherForge.scripting.backend import CompilerBackend, SourceLanguage


class PythonBackend(CompilerBackend):
    """Compiles Python source; the toolchain is always available."""

    def __init__(self, language: SourceLanguage, optimize: int | None = None) -> None:
        super().__init__(language)
        self._optimize = optimize

    def create_toolchain(self) -> Any:
        optimize = self._optimize
        if optimize is None:
            optimize = int(get_config_manager().get("scripting.python_optimize", -1))
        return functools.partial(compile, mode="exec", dont_inherit=True, optimize=optimize)

    def translate(self, toolchain: Any, path: str, source: str) -> types.CodeType:
        return toolchain(source, path)
