"""
Hy 后端 - 通过可嵌入的 hy 库把 Hy 源码编译为 Python 代码对象
Hy backend - compiles Hy source to Python code objects through the embeddable hy library.

未安装 hy 时该语言在本进程内被禁用。
When hy is not installed the language is disabled for the process.
"""

from __future__ import annotations

import importlib
import types
from typing import Any, NamedTuple

from AetherForge.scripting.backend import HOST_REFERENCE, CompilerBackend
from AetherForge.scripting.errors import ToolchainUnavailableError


class HyToolchain(NamedTuple):
    hy: types.ModuleType
    compiler: types.ModuleType
    errors: types.ModuleType


class HyBackend(CompilerBackend):
    """Compiles Hy source; compiled code imports hy at run time."""

    implicit_references = (HOST_REFERENCE, "hy")

    def create_toolchain(self) -> Any:
        try:
            return HyToolchain(
                hy=importlib.import_module("hy"),
                compiler=importlib.import_module("hy.compiler"),
                errors=importlib.import_module("hy.errors"),
            )
        except ImportError as exc:
            raise ToolchainUnavailableError("the hy package is not installed") from exc

    def error_types(self, toolchain: Any) -> tuple[type[BaseException], ...]:
        return (toolchain.errors.HyLanguageError, SyntaxError, ValueError)

    def translate(self, toolchain: Any, path: str, source: str) -> types.CodeType:
        # 宏展开需要一个模块对象保存宏状态
        module = types.ModuleType("<hy extension>")
        tree = toolchain.hy.read_many(source, filename=path)
        py_ast = toolchain.compiler.hy_compile(tree, module, filename=path, source=source)
        return compile(py_ast, path, "exec", dont_inherit=True)
