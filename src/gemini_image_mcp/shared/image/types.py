"""Image 模块类型定义。

gemini-image-mcp shared/image v0.1.0
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

from .config import OutputMode
from .errors import DecodeError

__all__ = [
    "ImageRequest",
    "DecodedImage",
    "ToolResponse",
]


@dataclass(frozen=True)
class ImageRequest:
    """规范化后的图像生成请求。

    只由 normalizer 构造，字段均已校验：
    n 在 [1, 4]，size 为 ``WxH`` 形式，out_dir 为绝对路径。

    Attributes:
        base_url: 上游 API 基础 URL
        api_key: API 认证 token（可为空）
        model: 模型名称
        prompt: 提示词（非空）
        size: 图片尺寸（WxH）
        n: 生成数量
        timeout_ms: 单次请求超时（毫秒）
        output: 返回格式
        out_dir: 保存目录（绝对路径）
    """
    base_url: str
    model: str
    prompt: str
    size: str
    n: int
    timeout_ms: int
    output: OutputMode
    out_dir: str
    api_key: str = ""

    def to_arguments(self) -> dict[str, Any]:
        """转换回工具参数形式（normalizer 的不动点）。"""
        return {
            "prompt": self.prompt,
            "size": self.size,
            "n": self.n,
            "output": self.output.value,
            "outDir": self.out_dir,
        }


@dataclass(frozen=True)
class DecodedImage:
    """上游返回的单张图片。

    Attributes:
        data: base64 编码的图片数据（不含 data URI 前缀，由 to_bytes 严格校验）
        mime_type: MIME 类型
    """
    data: str
    mime_type: str = "image/png"

    @property
    def estimated_size(self) -> int:
        """按 base64 长度估算解码后的字节数（无需解码）。"""
        return len(self.data) * 3 // 4

    def to_bytes(self) -> bytes:
        """严格解码 base64 数据。

        Raises:
            DecodeError: 数据无效或解码后为空
        """
        if not self.data or not isinstance(self.data, str):
            raise DecodeError("invalid image data")
        try:
            raw = base64.b64decode("".join(self.data.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"invalid image data: {e}") from e
        if not raw:
            raise DecodeError("image data is empty")
        return raw


@dataclass
class ToolResponse:
    """工具调用结果。

    Attributes:
        text: 文本摘要（Markdown）
        images: 需要附带返回的图片
        is_error: 是否为错误结果
    """
    text: str = ""
    images: list[DecodedImage] = field(default_factory=list)
    is_error: bool = False
