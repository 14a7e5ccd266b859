"""
编译诊断 - 编译器报告的错误与警告
Compile diagnostics - errors and warnings reported by a compiler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from AetherForge.scripting.module_image import ModuleImage


class Severity(str, Enum):
    """诊断级别 / Diagnostic severity."""

    ERROR = "Error"
    WARNING = "Warning"


@dataclass(frozen=True)
class Diagnostic:
    """
    单条诊断；行列号从 1 开始，0 表示未知
    One diagnostic; line and column are 1-based, 0 means unknown.
    """

    file: str
    line: int = 0
    column: int = 0
    severity: Severity = Severity.ERROR
    code: str = ""
    message: str = ""

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    @property
    def kind(self) -> str:
        """"Error" or "Warning"."""
        return self.severity.value


@dataclass
class CompileResult:
    """
    编译结果 - 没有错误级诊断时才视为成功
    Compile result - successful exactly when no diagnostic is an error.
    """

    source_files: list[str]
    diagnostics: list[Diagnostic] = field(default_factory=list)
    image: ModuleImage | None = None
    output_path: str | None = None

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_warning]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_warning]

    @property
    def has_errors(self) -> bool:
        return any(not d.is_warning for d in self.diagnostics)

    @property
    def success(self) -> bool:
        return not self.has_errors

    @classmethod
    def failed(cls, source_files: list[str], *diagnostics: Diagnostic) -> CompileResult:
        return cls(source_files=list(source_files), diagnostics=list(diagnostics))
