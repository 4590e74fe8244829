"""生成结果落盘与内联。

gemini-image-mcp shared/image v0.1.0

- inline 模式：直接返回所有图片数据，不写文件
- path 模式：写入 <out_dir>/image-<batch>-<index>.<ext>，生成 Markdown 摘要，
  并按内联大小上限附带小图片数据
"""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..response_formatter import format_saved_summary
from .codec import ext_from_mime
from .config import DEFAULT_INLINE_MAX_SIZE, OutputMode
from .errors import DecodeError
from .types import DecodedImage, ImageRequest, ToolResponse

__all__ = [
    "SaveResult",
    "make_batch_id",
    "select_inline_images",
    "save_images",
    "materialize",
]

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    """落盘结果。

    Attributes:
        saved: 成功写入的文件路径
        saved_images: 成功写入的图片（与 saved 一一对应）
        errors: 逐张失败信息
    """
    saved: list[str] = field(default_factory=list)
    saved_images: list[DecodedImage] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def make_batch_id(now: datetime | None = None) -> str:
    """生成批次 ID：时间戳 + 8 位随机十六进制，避免并发调用文件名冲突。"""
    now = now or datetime.now()
    return f"{now.strftime('%Y%m%d-%H%M%S')}-{secrets.token_hex(4)}"


def select_inline_images(images: list[DecodedImage], inline_max_size: int) -> list[DecodedImage]:
    """选出估算大小不超过上限的图片，上限 <= 0 时不内联。"""
    if inline_max_size <= 0:
        return []
    return [img for img in images if img.data and img.estimated_size <= inline_max_size]


def save_images(images: list[DecodedImage], out_dir: str, batch_id: str | None = None) -> SaveResult:
    """逐张写入文件，单张失败不影响其余图片。

    Raises:
        OSError: 无法创建保存目录
    """
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    batch_id = batch_id or make_batch_id()
    result = SaveResult()

    for index, image in enumerate(images, start=1):
        file_path = os.path.join(out_dir, f"image-{batch_id}-{index}.{ext_from_mime(image.mime_type)}")
        try:
            Path(file_path).write_bytes(image.to_bytes())
        except DecodeError as e:
            result.errors.append(f"image {index}: {e}")
            continue
        except OSError as e:
            result.errors.append(f"image {index}: save failed - {e}")
            continue
        result.saved.append(file_path)
        result.saved_images.append(image)

    logger.info(f"Saved {len(result.saved)} image(s) to {out_dir}")
    return result


def _validated_inline(images: list[DecodedImage]) -> list[DecodedImage]:
    """inline 模式下校验数据；唯一一张图片无效时直接失败。"""
    valid: list[DecodedImage] = []
    last_error: DecodeError | None = None
    for index, image in enumerate(images, start=1):
        try:
            image.to_bytes()
        except DecodeError as e:
            logger.warning(f"Dropping image {index}: {e}")
            last_error = e
            continue
        valid.append(image)

    if not valid:
        raise last_error or DecodeError("no decodable image data")
    return valid


def materialize(
    images: list[DecodedImage],
    request: ImageRequest,
    inline_max_size: int = DEFAULT_INLINE_MAX_SIZE,
    batch_id: str | None = None,
) -> ToolResponse:
    """根据 output 模式生成工具结果。

    Args:
        images: 上游返回的图片
        request: 规范化后的请求
        inline_max_size: path 模式下附带图片数据的大小上限（字节）
        batch_id: 批次 ID（默认自动生成）

    Returns:
        ToolResponse；path 模式下全部失败时 is_error=True

    Raises:
        DecodeError: inline 模式下没有可解码的图片
        OSError: 无法创建保存目录
    """
    if request.output is OutputMode.INLINE:
        return ToolResponse(images=_validated_inline(images))

    result = save_images(images, request.out_dir, batch_id)
    text = format_saved_summary(result.saved, result.errors)

    if not result.saved:
        return ToolResponse(text=text, is_error=True)

    return ToolResponse(text=text, images=select_inline_images(result.saved_images, inline_max_size))
