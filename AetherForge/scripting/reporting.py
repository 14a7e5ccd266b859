"""
诊断报告 - 交互式摘要与持久化错误日志
Diagnostic reporting - the interactive summary and the persistent error log.
"""

from __future__ import annotations

import os
from pathlib import Path

from AetherForge.extensions.base import Requester
from AetherForge.scripting.diagnostics import CompileResult
from AetherForge.scripting.source_map import SourceMap

# 聊天频道有刷屏限制，最多直接显示的诊断条数
MAX_SUMMARY = 2

BANNER = "#" * 60
DIVIDER = "-" * 25


def summarise_errors(result: CompileResult, requester: Requester) -> None:
    """
    向请求者发送警告与错误的摘要
    Messages a summary of warnings and errors to the given requester.
    """
    for diag in result.diagnostics[:MAX_SUMMARY]:
        requester.message(f"{diag.kind} #{diag.code} on line {diag.line} - {diag.message}")

    remaining = len(result.diagnostics) - MAX_SUMMARY
    if remaining > 0:
        requester.message(f" .. and {remaining} more")


def format_report(result: CompileResult, sources: SourceMap) -> str:
    """
    生成一个完整的诊断报告块
    Build one complete report block for the compiler log.
    """
    lines = [
        BANNER,
        "Errors when compiling " + ", ".join(result.source_files),
        BANNER,
        "",
    ]

    for diag in result.diagnostics:
        kind = diag.kind
        lines.append(f"{kind} on line {diag.line}:")
        if diag.line > 0:
            lines.append(sources.get(diag.file, diag.line - 1))

        marker = " " * (diag.column - 1) if diag.column > 0 else ""
        lines.append(f"{marker}^-- {kind} #{diag.code} - {diag.message}")
        lines.extend(["", DIVIDER, ""])

    return "\n".join(lines) + "\n"


def append_report(path: str | os.PathLike[str], report: str) -> None:
    """
    以一次写入追加报告，避免并发写入交错破坏块结构
    Append the report with a single write so concurrent reports never split a block.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(report)
