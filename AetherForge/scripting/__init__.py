"""
脚本子系统 - 把源码编译为可加载模块，并加载其中的命令与插件
Scripting subsystem - compiles source into loadable modules and loads the
commands and plugins inside them.
"""

from AetherForge.scripting.backend import CompilerBackend, SourceLanguage
from AetherForge.scripting.compiler import COMPILERS, Compiler, lookup
from AetherForge.scripting.diagnostics import CompileResult, Diagnostic, Severity
from AetherForge.scripting.errors import (
    DependencyMissingError,
    LoadFormatError,
    ScriptingError,
    ToolchainUnavailableError,
)
from AetherForge.scripting.loader import (
    ModuleLoader,
    discover_and_instantiate,
    load_from_disk,
)
from AetherForge.scripting.module_image import ModuleImage
from AetherForge.scripting.reporting import summarise_errors
from AetherForge.scripting.source_map import SourceMap

__all__ = [
    "COMPILERS",
    "CompileResult",
    "Compiler",
    "CompilerBackend",
    "DependencyMissingError",
    "Diagnostic",
    "LoadFormatError",
    "ModuleImage",
    "ModuleLoader",
    "ScriptingError",
    "Severity",
    "SourceLanguage",
    "SourceMap",
    "ToolchainUnavailableError",
    "discover_and_instantiate",
    "load_from_disk",
    "lookup",
    "summarise_errors",
]
