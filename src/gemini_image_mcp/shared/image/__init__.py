"""Image 模块。

gemini-image-mcp shared/image v0.1.0

提供统一的图像生成 API 封装，支持 chat/completions 与 images/generations 两种上游格式。
"""

from __future__ import annotations

from .client import ImageClient
from .codec import ext_from_mime, parse_base64_payload, parse_data_url
from .config import (
    DEFAULT_MODEL,
    ImageEnvConfig,
    ImageMode,
    OutputMode,
    get_image_config,
)
from .errors import (
    DecodeError,
    ImageError,
    ImageFetchError,
    InvalidArgumentError,
    NetworkError,
    NoImagesError,
    UpstreamError,
    UpstreamTimeoutError,
)
from .materializer import materialize
from .normalizer import normalize_request
from .types import DecodedImage, ImageRequest, ToolResponse

__all__ = [
    # Client
    "ImageClient",
    # Codec
    "ext_from_mime",
    "parse_base64_payload",
    "parse_data_url",
    # Config
    "DEFAULT_MODEL",
    "ImageEnvConfig",
    "ImageMode",
    "OutputMode",
    "get_image_config",
    # Errors
    "ImageError",
    "InvalidArgumentError",
    "NetworkError",
    "UpstreamTimeoutError",
    "UpstreamError",
    "ImageFetchError",
    "DecodeError",
    "NoImagesError",
    # Pipeline
    "materialize",
    "normalize_request",
    # Types
    "DecodedImage",
    "ImageRequest",
    "ToolResponse",
]
