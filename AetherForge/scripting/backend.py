"""
编译器后端 - 每种源语言一个实例
Compiler backend - one instance per source language.

后端负责把一组源文件编译为 ModuleImage，或返回诊断列表。
A backend turns a set of source files into a ModuleImage, or a list of diagnostics.
"""

from __future__ import annotations

import importlib.util
import logging
import os
import threading
import types
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from AetherForge.scripting.diagnostics import CompileResult, Diagnostic, Severity
from AetherForge.scripting.module_image import CodeUnit, ModuleImage

logger = logging.getLogger(__name__)

# 扩展代码总是可以回调宿主 API
HOST_REFERENCE = "AetherForge"

# warnings.catch_warnings 修改的是进程级状态，同一时刻只能有一个编译在捕获警告
_warnings_lock = threading.Lock()


@dataclass(frozen=True)
class SourceLanguage:
    """
    语言描述符 - 进程启动时构造一次，之后不再修改
    Language descriptor - built once at startup and never mutated.
    """

    # 短名，如 "PY"
    code: str
    # 全名，如 "Python"
    name: str
    # 源文件扩展名，如 ".py"
    extension: str
    # 示例命令模板
    command_skeleton: str
    # 示例插件模板
    plugin_skeleton: str
    # 文件开头的引用指令前缀，如 "#reference "
    reference_prefix: str


@dataclass(frozen=True)
class Reference:
    """A "<prefix>reference <module>" directive and the line it was read from."""

    module: str
    file: str
    line: int


def scan_references(path: str, prefix: str) -> list[Reference]:
    """
    读取文件开头连续的引用指令行，遇到第一行非指令即停止
    Read the consecutive reference directive lines at the top of a file;
    scanning stops at the first line that is not a directive.
    """
    references = []
    folded = prefix.casefold()
    with open(path, encoding="utf-8-sig") as f:
        for number, line in enumerate(f, start=1):
            if not line.casefold().startswith(folded):
                break
            # '#reference foo;' 与 '#reference foo' 等价
            module = line[line.index(" ") + 1:].strip().rstrip(";").strip()
            if module:
                references.append(Reference(module, path, number))
    return references


class CompilerBackend(ABC):
    """
    编译器后端基类
    Compiler backend base.

    工具链句柄在首次使用时于锁内惰性创建并缓存；创建失败则该语言在本进程内永久禁用，
    且只记录一次警告。已创建句柄的并发使用不再加锁。
    The toolchain handle is created lazily on first use under a lock and cached.
    If creation fails the language stays disabled for the process lifetime and a
    single warning is logged. Steady-state use of the handle is not locked.
    """

    # 隐式引用（语言运行时等）
    implicit_references: tuple[str, ...] = (HOST_REFERENCE,)

    def __init__(self, language: SourceLanguage) -> None:
        self.language = language
        self._toolchain_lock = threading.Lock()
        self._toolchain: Any = None
        self._disabled = False

    @property
    def disabled(self) -> bool:
        return self._disabled

    @abstractmethod
    def create_toolchain(self) -> Any:
        """
        创建工具链句柄；返回 None 或抛出异常表示本机不可用
        Create the toolchain handle; return None or raise when it is unavailable.
        """

    @abstractmethod
    def translate(self, toolchain: Any, path: str, source: str) -> types.CodeType:
        """
        将单个源文件编译为代码对象；语法错误以 error_types() 中的异常抛出
        Compile one source file to a code object; syntax errors are raised as
        one of the exception types returned by error_types().
        """

    def error_types(self, toolchain: Any) -> tuple[type[BaseException], ...]:
        """Exception types that describe a problem in the user's source."""
        return (SyntaxError, ValueError)

    def get_toolchain(self) -> Any:
        """
        惰性初始化工具链
        Lazily initialize the toolchain; None once the language is disabled.
        """
        if self._toolchain is not None or self._disabled:
            return self._toolchain

        with self._toolchain_lock:
            if self._toolchain is not None or self._disabled:
                return self._toolchain

            try:
                toolchain = self.create_toolchain()
            except Exception:
                logger.debug("创建 %s 编译器失败", self.language.name, exc_info=True)
                toolchain = None

            if toolchain is None:
                self._disabled = True
                logger.warning(
                    "WARNING: %s compiler is missing, you will be unable to compile %s files.",
                    self.language.name,
                    self.language.extension,
                )
            else:
                self._toolchain = toolchain
        return self._toolchain

    def compile(self, src_paths: list[str], dst_path: str | None = None) -> CompileResult:
        """
        编译源文件；dst_path 为 None 时只在内存中生成模块
        Compile the given source files; with no dst_path the module is only built in memory.
        """
        if not src_paths:
            raise ValueError("at least one source file is required")

        # 部分工具链对相对路径敏感，统一转为绝对路径
        paths = [os.path.abspath(p) for p in src_paths]

        toolchain = self.get_toolchain()
        if toolchain is None:
            return CompileResult.failed(
                paths,
                Diagnostic(
                    file=paths[0],
                    code="ToolchainUnavailable",
                    message=f"The {self.language.name} compiler is not available on this machine.",
                ),
            )

        try:
            return self._compile(toolchain, paths, dst_path)
        except Exception:
            logger.exception("编译 %s 时出现未知错误", ", ".join(paths))
            return CompileResult.failed(
                paths,
                Diagnostic(
                    file=paths[0],
                    code="InternalError",
                    message="An unknown error occurred while compiling. Details in the error log.",
                ),
            )

    def _compile(self, toolchain: Any, paths: list[str], dst_path: str | None) -> CompileResult:
        diagnostics: list[Diagnostic] = []
        references = list(self.implicit_references)
        units: list[CodeUnit] = []
        sources: dict[str, str] = {}

        for path in paths:
            try:
                directives = scan_references(path, self.language.reference_prefix)
                source = Path(path).read_text(encoding="utf-8-sig")
            except (OSError, UnicodeDecodeError) as exc:
                diagnostics.append(Diagnostic(
                    file=path,
                    code="ReadError",
                    message=f"Unable to read source file: {getattr(exc, 'strerror', None) or exc}",
                ))
                continue

            for ref in directives:
                if not self._resolvable(ref.module):
                    diagnostics.append(Diagnostic(
                        file=path,
                        line=ref.line,
                        code="MissingReference",
                        message=f"Referenced module '{ref.module}' could not be found",
                    ))
                elif ref.module not in references:
                    references.append(ref.module)

            code = self._translate_unit(toolchain, path, source, diagnostics)
            if code is not None:
                units.append(CodeUnit(path, code))
                sources[path] = source

        result = CompileResult(source_files=paths, diagnostics=diagnostics)
        if result.has_errors:
            return result

        image = ModuleImage(Path(paths[0]).stem, units, references, sources)
        if dst_path is not None:
            try:
                image.save(dst_path)
            except OSError as exc:
                logger.exception("写入模块失败: %s", dst_path)
                diagnostics.append(Diagnostic(
                    file=str(dst_path),
                    code="WriteError",
                    message=f"Unable to write module: {exc.strerror or exc}",
                ))
                return result
            result.output_path = dst_path

        result.image = image
        return result

    def _translate_unit(
        self,
        toolchain: Any,
        path: str,
        source: str,
        diagnostics: list[Diagnostic],
    ) -> types.CodeType | None:
        code = None
        with _warnings_lock, warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                code = self.translate(toolchain, path, source)
            except self.error_types(toolchain) as exc:
                diagnostics.append(self.diagnostic_from_error(path, exc))

        for warning in caught:
            diagnostics.append(Diagnostic(
                file=str(warning.filename or path),
                line=max(int(warning.lineno or 0), 0),
                severity=Severity.WARNING,
                code=warning.category.__name__,
                message=str(warning.message),
            ))
        return code

    def diagnostic_from_error(self, path: str, exc: BaseException) -> Diagnostic:
        """
        将编译异常转换为诊断；缺失的行列号记为 0
        Turn a compile exception into a diagnostic; missing positions become 0.
        """
        line = getattr(exc, "lineno", None) or 0
        column = getattr(exc, "colno", None) or getattr(exc, "offset", None) or 0
        message = getattr(exc, "msg", None) or str(exc) or type(exc).__name__
        return Diagnostic(
            file=str(getattr(exc, "filename", None) or path),
            line=max(int(line), 0),
            column=max(int(column), 0),
            severity=Severity.ERROR,
            code=type(exc).__name__,
            message=str(message),
        )

    @staticmethod
    def _resolvable(module: str) -> bool:
        try:
            return importlib.util.find_spec(module) is not None
        except (ImportError, ValueError):
            return False
