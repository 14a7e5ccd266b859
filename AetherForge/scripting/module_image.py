"""
模块镜像 - 编译产物（.bin）及其调试符号（.dbg）
Module image - the compiled artifact (.bin) and its debug symbols (.dbg).

.bin 格式：FORMAT_HEADER + 解释器字节码魔数 + marshal((版本, 引用, ((文件名, 代码对象), ...)))
.bin layout: FORMAT_HEADER + interpreter bytecode magic + marshal((version, references, ((filename, code), ...)))

.dbg 是 JSON：{文件名: 源码文本}，加载时写入 linecache，使回溯能显示源码行。
.dbg is JSON {filename: source text}; on load it seeds linecache so tracebacks show source lines.
"""

from __future__ import annotations

import importlib
import importlib.util
import json
import linecache
import logging
import marshal
import os
import sys
import types
from dataclasses import dataclass
from pathlib import Path

from AetherForge.kernel.paths import debug_symbols_path
from AetherForge.scripting.errors import DependencyMissingError, LoadFormatError

logger = logging.getLogger(__name__)

FORMAT_HEADER = b"AFMOD\x00"
FORMAT_VERSION = 1
# 加载后的模块注册在此前缀下
LOADED_PREFIX = "AetherForge.loaded."


@dataclass(frozen=True)
class CodeUnit:
    """一个源文件编译出的代码对象 / The code object compiled from one source file."""

    filename: str
    code: types.CodeType


class ModuleImage:
    """
    已编译的扩展模块 - 可来自磁盘或内存编译
    A compiled extension module, read from disk or compiled in memory.

    所有代码单元在 activate() 时按顺序执行进同一个模块命名空间。
    All code units run, in order, into one module namespace on activate().
    模块从不卸载；重新加载会创建新模块，旧实例继续存活。
    Modules are never unloaded; a reload creates a new module and old instances linger.
    """

    def __init__(
        self,
        name: str,
        units: list[CodeUnit],
        references: list[str] | tuple[str, ...] = (),
        debug_sources: dict[str, str] | None = None,
        origin: str | None = None,
    ) -> None:
        self.name = name
        self.units = list(units)
        self.references = list(references)
        self.debug_sources = debug_sources
        self.origin = origin
        self._module: types.ModuleType | None = None

    @property
    def qualified_name(self) -> str:
        return LOADED_PREFIX + self.name

    @property
    def module(self) -> types.ModuleType | None:
        """已激活的模块，未激活时为 None / The activated module, or None."""
        return self._module

    # ── 序列化 ──

    def to_bytes(self) -> bytes:
        payload = (
            FORMAT_VERSION,
            tuple(self.references),
            tuple((unit.filename, unit.code) for unit in self.units),
        )
        return FORMAT_HEADER + importlib.util.MAGIC_NUMBER + marshal.dumps(payload)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        name: str,
        origin: str | None = None,
        debug_sources: dict[str, str] | None = None,
    ) -> ModuleImage:
        """
        解析 .bin 数据；格式不符时抛出 LoadFormatError
        Parse .bin data; raises LoadFormatError when the data is malformed.
        """
        if not data.startswith(FORMAT_HEADER):
            raise LoadFormatError(f"{name}: missing module header")

        offset = len(FORMAT_HEADER)
        magic = data[offset:offset + len(importlib.util.MAGIC_NUMBER)]
        if magic != importlib.util.MAGIC_NUMBER:
            raise LoadFormatError(f"{name}: built by an incompatible interpreter")

        try:
            payload = marshal.loads(data[offset + len(magic):])
        except (EOFError, ValueError, TypeError) as exc:
            raise LoadFormatError(f"{name}: corrupt module payload") from exc

        if not isinstance(payload, tuple) or len(payload) != 3:
            raise LoadFormatError(f"{name}: unexpected module layout")

        version, references, raw_units = payload
        if version != FORMAT_VERSION:
            raise LoadFormatError(f"{name}: unsupported module format version {version!r}")

        units = []
        for entry in raw_units:
            if (
                not isinstance(entry, tuple)
                or len(entry) != 2
                or not isinstance(entry[0], str)
                or not isinstance(entry[1], types.CodeType)
            ):
                raise LoadFormatError(f"{name}: malformed code unit")
            units.append(CodeUnit(entry[0], entry[1]))

        if not all(isinstance(ref, str) for ref in references):
            raise LoadFormatError(f"{name}: malformed reference list")

        return cls(name, units, list(references), debug_sources, origin)

    def save(self, path: str | os.PathLike[str]) -> None:
        """
        写入 .bin（原子替换）以及同名 .dbg
        Write the .bin (atomically replaced) and the matching .dbg.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp = path.with_name(path.name + ".tmp")
        tmp.write_bytes(self.to_bytes())
        os.replace(tmp, path)

        if self.debug_sources:
            debug_symbols_path(path).write_text(
                json.dumps(self.debug_sources, ensure_ascii=False), encoding="utf-8"
            )
        self.origin = str(path)

    # ── 激活 ──

    def activate(self) -> types.ModuleType:
        """
        导入引用并执行所有代码单元，返回模块对象（只执行一次）
        Import the references and run every code unit, returning the module (runs once).
        """
        if self._module is not None:
            return self._module

        for reference in self.references:
            try:
                importlib.import_module(reference)
            except ModuleNotFoundError as exc:
                raise DependencyMissingError(reference) from exc

        self._install_debug_sources()

        module = types.ModuleType(self.qualified_name)
        module.__file__ = self.origin or f"<{self.name}>"
        previous = sys.modules.get(self.qualified_name)
        sys.modules[self.qualified_name] = module
        try:
            for unit in self.units:
                exec(unit.code, module.__dict__)
        except Exception:
            if previous is None:
                sys.modules.pop(self.qualified_name, None)
            else:
                sys.modules[self.qualified_name] = previous
            raise

        self._module = module
        logger.debug("模块已激活: %s (%d 个代码单元)", self.qualified_name, len(self.units))
        return module

    def _install_debug_sources(self) -> None:
        if not self.debug_sources:
            return

        for filename, text in self.debug_sources.items():
            lines = text.splitlines(keepends=True)
            if lines and not lines[-1].endswith("\n"):
                lines[-1] += "\n"
            # mtime 为 None 时 linecache.checkcache 不会清除该条目
            linecache.cache[filename] = (len(text), None, lines, filename)

    def __repr__(self) -> str:
        return f"<ModuleImage {self.name!r} units={len(self.units)} refs={self.references}>"


def read_debug_sources(path: str | os.PathLike[str]) -> dict[str, str] | None:
    """
    读取与模块同名的 .dbg；缺失或损坏时返回 None
    Read the .dbg that sits beside a module; None when missing or unreadable.
    """
    dbg = debug_symbols_path(path)
    if not dbg.exists():
        return None

    try:
        data = json.loads(dbg.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.exception("加载调试符号失败: %s", dbg)
        return None

    if not isinstance(data, dict):
        logger.warning("调试符号格式无效: %s", dbg)
        return None
    return {str(k): str(v) for k, v in data.items()}
