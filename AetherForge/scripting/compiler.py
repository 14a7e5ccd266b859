"""
编译器门面 - 语言元数据、示例源码生成与“编译并报告”入口
Compiler facade - language metadata, example source generation, and the
"compile and report" entry point used by the rest of the server.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from AetherForge.config.manager import get_config_manager
from AetherForge.extensions.base import Requester
from AetherForge.kernel import paths
from AetherForge.scripting import templates
from AetherForge.scripting.backend import CompilerBackend, SourceLanguage
from AetherForge.scripting.diagnostics import CompileResult
from AetherForge.scripting.hy_backend import HyBackend
from AetherForge.scripting.python_backend import PythonBackend
from AetherForge.scripting.reporting import append_report, format_report, summarise_errors
from AetherForge.scripting.source_map import SourceMap

logger = logging.getLogger(__name__)

# 示例源码统一使用 \r\n，在所有常见编辑器中都能正确显示
EXAMPLE_LINE_ENDING = "\r\n"


class Compiler:
    """
    某种源语言的编译器
    Compiles source code files for a particular language into a module.
    """

    def __init__(self, backend: CompilerBackend) -> None:
        self.backend = backend

    @property
    def language(self) -> SourceLanguage:
        return self.backend.language

    @property
    def short_name(self) -> str:
        """The short name of this language, e.g. PY."""
        return self.language.code

    @property
    def full_name(self) -> str:
        """The full name of this language, e.g. Python."""
        return self.language.name

    @property
    def file_extension(self) -> str:
        """Default file extension used for source code files, e.g. .py"""
        return self.language.extension

    def command_path(self, name: str) -> Path:
        """命令源码的约定路径 / Conventional source path of a command."""
        return paths.get_source_dir() / f"Cmd{name}{self.file_extension}"

    def plugin_path(self, name: str) -> Path:
        """插件源码的约定路径 / Conventional source path of a plugin."""
        return paths.get_plugin_dir() / f"{name}{self.file_extension}"

    # ── 示例源码 ──

    @staticmethod
    def format_source(source: str, *args: str) -> str:
        source = source.replace("\\t", "\t")
        source = source.replace("\r\n", "\n").replace("\n", EXAMPLE_LINE_ENDING)
        return source.format(*args)

    def generate_example_source(self, kind: str, *args: str) -> str:
        """
        填充示例模板；kind 为 "command" 或 "plugin"
        Fill an example template; kind is "command" or "plugin".
        """
        if kind == "command":
            return self.format_source(self.language.command_skeleton, *args)
        if kind == "plugin":
            return self.format_source(self.language.plugin_skeleton, *args)
        raise ValueError(f"unknown example kind: {kind!r}")

    def gen_example_command(self, cmd_name: str) -> str:
        return self.generate_example_source("command", cmd_name.capitalize())

    def gen_example_plugin(self, plugin: str, creator: str) -> str:
        version = str(get_config_manager().get("server.version", ""))
        return self.generate_example_source("plugin", plugin, creator, version)

    # ── 编译 ──

    def compile(
        self,
        src_paths: str | os.PathLike[str] | list[str],
        dst_path: str | os.PathLike[str] | None = None,
    ) -> CompileResult:
        """
        编译源文件；有错误时把完整报告追加到编译错误日志
        Compile the given source files; on errors, append a full report to the compiler log.

        dst_path 为 None 时只在内存中生成模块。
        If dst_path is None, the module is only built in memory.
        """
        if isinstance(src_paths, (str, os.PathLike)):
            src_paths = [src_paths]

        result = self.backend.compile(
            [os.fspath(p) for p in src_paths],
            os.fspath(dst_path) if dst_path is not None else None,
        )
        if not result.has_errors:
            return result

        report = format_report(result, SourceMap(result.source_files))
        log_path = paths.get_compiler_log()
        try:
            append_report(log_path, report)
        except OSError:
            logger.exception("写入编译错误日志失败: %s", log_path)
        return result

    def try_compile(
        self,
        requester: Requester,
        kind: str,
        src_paths: str | os.PathLike[str] | list[str],
        dst_path: str | os.PathLike[str] | None,
    ) -> bool:
        """
        编译并把结果告知请求者
        Compile and tell the requester how it went.
        """
        result = self.compile(src_paths, dst_path)
        if not result.has_errors:
            requester.message(f"{kind} compiled successfully.")
            return True

        summarise_errors(result, requester)
        requester.message(
            f"Compilation error. See {paths.get_compiler_log()} for more information."
        )
        return False

    def __repr__(self) -> str:
        return f"<Compiler {self.short_name} ({self.full_name})>"


PYTHON = SourceLanguage(
    code="PY",
    name="Python",
    extension=".py",
    command_skeleton=templates.PYTHON_COMMAND_SKELETON,
    plugin_skeleton=templates.PYTHON_PLUGIN_SKELETON,
    reference_prefix="#reference ",
)

HY = SourceLanguage(
    code="HY",
    name="Hy",
    extension=".hy",
    command_skeleton=templates.HY_COMMAND_SKELETON,
    plugin_skeleton=templates.HY_PLUGIN_SKELETON,
    reference_prefix=";reference ",
)

# 第一个为默认语言
PY_COMPILER = Compiler(PythonBackend(PYTHON))
HY_COMPILER = Compiler(HyBackend(HY))
COMPILERS: list[Compiler] = [PY_COMPILER, HY_COMPILER]


def lookup(name: str, requester: Requester) -> Compiler | None:
    """
    按短名查找编译器（不区分大小写），空名返回默认语言
    Find a compiler by short name, case-insensitively; an empty name gives the default.
    """
    if not name:
        return COMPILERS[0]

    for compiler in COMPILERS:
        if compiler.short_name.casefold() == name.casefold():
            return compiler

    requester.message(f'Unknown language "{name}"')
    requester.message(
        "Available languages: "
        + ", ".join(f"{c.short_name} ({c.full_name})" for c in COMPILERS)
    )
    return None
