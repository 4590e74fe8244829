"""图片编解码工具。

gemini-image-mcp shared/image v0.1.0

统一处理上游返回的三种图片编码：裸 base64、data URI、远程 URL 下载的字节。
"""

from __future__ import annotations

import base64
import re

from .types import DecodedImage

__all__ = [
    "DEFAULT_MIME_TYPE",
    "parse_data_url",
    "parse_base64_payload",
    "image_from_bytes",
    "mime_from_content_type",
    "ext_from_mime",
]

DEFAULT_MIME_TYPE = "image/png"

_DATA_URL_PATTERN = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)

_EXT_MAP = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/png": "png",
}


def parse_data_url(value: str) -> tuple[str, str] | None:
    """解析 ``data:<mime>;base64,<payload>``。

    Returns:
        (mime_type, payload) 元组；不是 data URI 时返回 None
    """
    match = _DATA_URL_PATTERN.match(value or "")
    if not match:
        return None
    mime_type = match.group(1).strip() or "application/octet-stream"
    return mime_type, match.group(2)


def parse_base64_payload(value: str, fallback_mime: str = DEFAULT_MIME_TYPE) -> DecodedImage:
    """解析 base64 文本（可带 data URI 前缀）。

    Args:
        value: base64 文本或 data URI
        fallback_mime: 没有 data URI 前缀时使用的 MIME 类型

    Returns:
        DecodedImage
    """
    parsed = parse_data_url(value)
    if parsed:
        mime_type, payload = parsed
        return DecodedImage(data=payload, mime_type=mime_type)
    return DecodedImage(data=value, mime_type=fallback_mime or DEFAULT_MIME_TYPE)


def mime_from_content_type(content_type: str | None) -> str:
    """从 Content-Type 头提取 MIME 类型（去掉 charset 等参数）。"""
    mime_type = (content_type or "").split(";")[0].strip()
    return mime_type or DEFAULT_MIME_TYPE


def image_from_bytes(data: bytes, content_type: str | None = None) -> DecodedImage:
    """将下载的图片字节编码为 DecodedImage。"""
    return DecodedImage(
        data=base64.b64encode(data).decode("ascii"),
        mime_type=mime_from_content_type(content_type),
    )


def ext_from_mime(mime_type: str | None) -> str:
    """根据 MIME 类型推断文件扩展名，默认 png。"""
    return _EXT_MAP.get((mime_type or "").strip().lower(), "png")
