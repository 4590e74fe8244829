"""MCP 响应格式化器。

生成对 LLM 和 Markdown 客户端友好的文本：

- 成功：每张图片一条 Markdown 图片引用（file:// URI）+ 一行纯路径
- 部分失败：追加逐张错误信息
- 失败：错误信息 + 按关键字匹配的处理建议
"""

from __future__ import annotations

import errno
import os

import aiohttp

from .image.errors import UpstreamError, UpstreamTimeoutError

__all__ = [
    "to_display_path",
    "to_file_uri",
    "format_saved_summary",
    "suggest_fix",
    "format_error_message",
]


def to_display_path(file_path: str) -> str:
    """统一使用 / 作为路径分隔符。"""
    return str(file_path or "").replace("\\", "/")


def to_file_uri(file_path: str) -> str:
    """转换为 file:/// URI，兼容大多数 Markdown 渲染器。"""
    return f"file:///{to_display_path(file_path).lstrip('/')}"


def format_saved_summary(saved: list[str], errors: list[str]) -> str:
    """格式化落盘结果摘要。

    Args:
        saved: 成功写入的文件路径
        errors: 逐张失败信息

    Returns:
        Markdown 文本
    """
    lines: list[str] = []

    if saved:
        lines.append(f"Generated {len(saved)} image(s):\n")
        for path in saved:
            lines.append(f"![{os.path.basename(path)}]({to_file_uri(path)})")
            lines.append(f"{to_display_path(path)}\n")

    if errors:
        lines.append("Some images failed:")
        lines.extend(errors)

    return "\n".join(lines)


def suggest_fix(error: BaseException) -> str:
    """根据异常类型和错误信息关键字给出处理建议，无匹配时返回空字符串。"""
    message = str(error)
    cause = getattr(error, "cause", None)

    if (
        isinstance(cause, aiohttp.ClientConnectorError)
        or "ECONNREFUSED" in message
        or "ENOTFOUND" in message
        or "Connection refused" in message
        or "Cannot connect to host" in message
    ):
        return "Check that IMAGE_BASE_URL is correct and the upstream service is running."

    if (isinstance(error, UpstreamError) and error.status_code == 401) or "401" in message or "API key" in message:
        return "Set IMAGE_API_KEY (or OPENAI_API_KEY / GEMINI_API_KEY)."

    if isinstance(error, UpstreamTimeoutError) or "timed out" in message:
        return "Increase IMAGE_TIMEOUT_MS (default 120000)."

    os_errno = getattr(error, "errno", None)
    if os_errno == errno.ENOSPC or "ENOSPC" in message or "No space left" in message:
        return "The disk is full; free some space and retry."

    if (
        isinstance(error, PermissionError)
        or os_errno in (errno.EACCES, errno.EPERM)
        or "EACCES" in message
        or "EPERM" in message
    ):
        return "No write permission; check the outDir directory permissions."

    return ""


def format_error_message(error: BaseException) -> str:
    """格式化失败信息，附带处理建议。"""
    text = f"Generation failed: {error}"
    suggestion = suggest_fix(error)
    if suggestion:
        text += f"\nSuggestion: {suggestion}"
    return text
