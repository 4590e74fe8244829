"""Image providers 模块。

gemini-image-mcp shared/image/providers v0.1.0

提供两种上游 API 格式的图像生成实现。
"""

from __future__ import annotations

from .base import BaseProvider
from .chat_completions import ChatCompletionsProvider, extract_image_url
from .openai_images import OpenAIImagesProvider

__all__ = [
    "BaseProvider",
    "ChatCompletionsProvider",
    "OpenAIImagesProvider",
    "extract_image_url",
]
