"""
脚本子系统异常
Scripting subsystem exceptions.

编译诊断不是异常，而是 Diagnostic 值；这里只有加载期和工具链的失败。
Compile diagnostics are Diagnostic values, not exceptions; only toolchain
and load-time failures are raised. IO failures surface as OSError.
"""

from __future__ import annotations


class ScriptingError(Exception):
    """Base class for extension compile/load failures."""


class ToolchainUnavailableError(ScriptingError):
    """The compiler for a language could not be created on this machine."""


class LoadFormatError(ScriptingError):
    """
    模块格式错误，或其中某个扩展类无法构造
    A module is malformed, or one of its extension classes failed to construct.
    """


class DependencyMissingError(ScriptingError):
    """A module referenced by a compiled module could not be imported."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"referenced module {reference!r} could not be found")
        self.reference = reference
