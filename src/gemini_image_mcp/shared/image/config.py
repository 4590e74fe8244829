"""Image 模块配置。

gemini-image-mcp shared/image v0.1.0

环境变量（括号内为兼容的旧名称）:
    IMAGE_BASE_URL (OPENAI_BASE_URL): 上游 API 基础 URL
    IMAGE_API_KEY (OPENAI_API_KEY, GEMINI_API_KEY): API 认证 token
    IMAGE_MODEL (OPENAI_MODEL): 模型名称
    IMAGE_SIZE (OPENAI_IMAGE_SIZE): 默认图片尺寸
    IMAGE_MODE (OPENAI_IMAGE_MODE): 上游接口模式（chat/images/auto）
    IMAGE_RETURN (OPENAI_IMAGE_RETURN): 默认返回格式（path/image）
    IMAGE_OUT_DIR (OPENAI_IMAGE_OUT_DIR): 默认保存目录
    IMAGE_INLINE_MAX_SIZE (OPENAI_IMAGE_INLINE_MAX_SIZE): 内联图片大小上限（字节，0=禁用）
    IMAGE_TIMEOUT_MS (OPENAI_TIMEOUT_MS): 单次请求超时（毫秒）
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
    "DEFAULT_SIZE",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_INLINE_MAX_SIZE",
    "MIN_TIMEOUT_MS",
    "MAX_TIMEOUT_MS",
    "PROJECT_ROOT",
    "ImageMode",
    "OutputMode",
    "ImageEnvConfig",
    "get_image_config",
    "parse_int",
    "clamp_int",
    "normalize_base_url",
    "to_v1_base_url",
]

# 默认上游（本地 OpenAI 兼容代理）
DEFAULT_BASE_URL = "http://127.0.0.1:8317"

# 默认模型
DEFAULT_MODEL = "gemini-3-pro-image-preview"

DEFAULT_SIZE = "1024x1024"

DEFAULT_TIMEOUT_MS = 120_000
MIN_TIMEOUT_MS = 5_000
MAX_TIMEOUT_MS = 600_000

# 512 KiB
DEFAULT_INLINE_MAX_SIZE = 512 * 1024

# 相对 outDir 与默认保存目录的解析基准（不依赖进程工作目录）
PROJECT_ROOT = Path.home() / "gemini-image-mcp"

_INT_PREFIX = re.compile(r"^[+-]?\d+")


class ImageMode(Enum):
    """上游接口模式。

    - CHAT: 只使用 /chat/completions（默认）
    - IMAGES: 只使用 /images/generations
    - AUTO: 先尝试 /images/generations，404 时回退到 /chat/completions
    """

    CHAT = "chat"
    IMAGES = "images"
    AUTO = "auto"

    @classmethod
    def from_string(cls, value: str | None) -> "ImageMode":
        """从字符串解析模式，无效值返回 CHAT。"""
        value = (value or "").lower().strip()
        for mode in cls:
            if mode.value == value:
                return mode
        return cls.CHAT


class OutputMode(Enum):
    """工具返回格式。

    - PATH: 保存文件并返回路径（可附带小图片数据）
    - INLINE: 只返回图片数据，不落盘
    """

    PATH = "path"
    INLINE = "inline"


def parse_int(value: object, default: int) -> int:
    """宽松解析整数。

    与 ``parseInt`` 语义一致：取去除空白后开头的整数部分，
    如 ``"2abc"`` -> 2，``2.7`` -> 2；无法解析时返回 default。
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return default
        return int(value)
    match = _INT_PREFIX.match(str(value).strip())
    if not match:
        return default
    return int(match.group(0))


def clamp_int(value: int, minimum: int, maximum: int) -> int:
    """将整数限制在 [minimum, maximum] 范围内。"""
    return max(minimum, min(maximum, value))


def normalize_base_url(url: str | None) -> str:
    """规范化 BASE_URL：去除首尾空白和末尾斜杠，空值使用默认地址。"""
    trimmed = (url or "").strip()
    if not trimmed:
        return DEFAULT_BASE_URL
    return trimmed.rstrip("/")


def to_v1_base_url(url: str | None) -> str:
    """规范化 BASE_URL，自动补全 /v1 版本路径。"""
    normalized = normalize_base_url(url)
    if normalized.endswith("/v1"):
        return normalized
    return f"{normalized}/v1"


@dataclass(frozen=True)
class ImageEnvConfig:
    """Image 环境配置。

    Attributes:
        base_url: 上游 API 基础 URL（未补全 /v1）
        api_key: API 认证 token（可为空）
        model: 模型名称
        default_size: 默认图片尺寸
        mode: 上游接口模式
        default_output: 默认返回格式（原始字符串，由 normalizer 解析）
        out_dir: 默认保存目录（原始字符串，由 normalizer 解析）
        inline_max_size: 内联图片大小上限（字节，<=0 表示禁用）
        timeout_ms: 单次请求超时（毫秒）
    """
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    model: str = DEFAULT_MODEL
    default_size: str = DEFAULT_SIZE
    mode: ImageMode = ImageMode.CHAT
    default_output: str = OutputMode.PATH.value
    out_dir: str = ""
    inline_max_size: int = DEFAULT_INLINE_MAX_SIZE
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def is_configured(self) -> bool:
        """检查是否已配置 API key。"""
        return bool(self.api_key)


def _env(*names: str) -> str | None:
    """按顺序读取第一个已设置的环境变量。"""
    for name in names:
        value = os.environ.get(name)
        if value is not None:
            return value
    return None


def get_image_config() -> ImageEnvConfig:
    """从环境变量加载配置。

    Returns:
        ImageEnvConfig 实例
    """
    timeout_ms = clamp_int(
        parse_int(_env("IMAGE_TIMEOUT_MS", "OPENAI_TIMEOUT_MS"), DEFAULT_TIMEOUT_MS),
        MIN_TIMEOUT_MS,
        MAX_TIMEOUT_MS,
    )

    return ImageEnvConfig(
        base_url=normalize_base_url(_env("IMAGE_BASE_URL", "OPENAI_BASE_URL")),
        api_key=(_env("IMAGE_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY") or "").strip(),
        model=(_env("IMAGE_MODEL", "OPENAI_MODEL") or "").strip() or DEFAULT_MODEL,
        default_size=(_env("IMAGE_SIZE", "OPENAI_IMAGE_SIZE") or "").strip() or DEFAULT_SIZE,
        mode=ImageMode.from_string(_env("IMAGE_MODE", "OPENAI_IMAGE_MODE")),
        default_output=(_env("IMAGE_RETURN", "OPENAI_IMAGE_RETURN") or "").strip()
        or OutputMode.PATH.value,
        out_dir=(_env("IMAGE_OUT_DIR", "OPENAI_IMAGE_OUT_DIR") or "").strip(),
        inline_max_size=parse_int(
            _env("IMAGE_INLINE_MAX_SIZE", "OPENAI_IMAGE_INLINE_MAX_SIZE"),
            DEFAULT_INLINE_MAX_SIZE,
        ),
        timeout_ms=timeout_ms,
    )
