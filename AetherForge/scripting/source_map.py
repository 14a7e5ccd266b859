"""
源码映射 - 按需读取源文件，用于在诊断报告中显示出错的源码行
Source map - lazily reads source files so diagnostic reports can show the offending line.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


class SourceMap:
    """
    每次诊断报告构建一个，用完即弃；不跨线程共享。
    Built once per diagnostic report and discarded afterwards; never shared across threads.
    """

    def __init__(self, paths: Iterable[str]) -> None:
        self._files = [str(p) for p in paths]
        self._sources: list[list[str] | None] = [None] * len(self._files)

    def _find_file(self, file: str) -> int:
        key = file.casefold()
        for i, path in enumerate(self._files):
            if path.casefold() == key:
                return i
        return -1

    def _lines(self, index: int) -> list[str]:
        source = self._sources[index]
        if source is None:
            try:
                text = Path(self._files[index]).read_text(encoding="utf-8-sig", errors="replace")
                source = text.splitlines()
            except OSError:
                logger.debug("无法读取源文件: %s", self._files[index])
                source = []
            self._sources[index] = source
        return source

    def get(self, file: str, line: int) -> str:
        """
        返回指定文件的第 line 行（从 0 开始）；找不到时返回空字符串
        Returns the given 0-based line of the given file, or "" when unavailable.
        """
        i = self._find_file(file)
        if i == -1 or line < 0:
            return ""

        source = self._lines(i)
        return source[line] if line < len(source) else ""
