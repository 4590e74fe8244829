"""Chat Completions Provider - 使用 chat/completions + modalities 生成图像。

gemini-image-mcp shared/image/providers v0.1.0

适用于 Gemini 图像模型的 OpenAI 兼容代理：
图片位于 choices[].message.images[]，每次调用最多返回一批图片。
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import aiohttp

from ..codec import parse_data_url
from ..config import to_v1_base_url
from ..types import DecodedImage, ImageRequest
from .base import BaseProvider

__all__ = ["ChatCompletionsProvider", "extract_image_url"]

logger = logging.getLogger(__name__)


def _nested_url(entry: dict[str, Any]) -> Any:
    image_url = entry.get("image_url")
    return image_url.get("url") if isinstance(image_url, dict) else None


# 不同上游对图片 URL 字段的命名不一致，按优先级依次尝试：
# image_url.url > url > imageUrl > image_url（字符串）
_IMAGE_URL_ACCESSORS: tuple[Callable[[dict[str, Any]], Any], ...] = (
    _nested_url,
    lambda entry: entry.get("url"),
    lambda entry: entry.get("imageUrl"),
    lambda entry: entry.get("image_url"),
)


def extract_image_url(entry: Any) -> str:
    """从 images[] 条目中取出图片 URL 或 data URI，找不到时返回空字符串。"""
    if not isinstance(entry, dict):
        return ""
    for accessor in _IMAGE_URL_ACCESSORS:
        value = accessor(entry)
        if isinstance(value, str) and value.strip():
            return value
    return ""


class ChatCompletionsProvider(BaseProvider):
    """Chat Completions Provider。

    使用 chat/completions API + modalities 参数生成图像。
    """

    endpoint = "chat/completions"

    def _build_request_body(self, request: ImageRequest) -> dict[str, Any]:
        """构建请求体。"""
        return {
            "model": request.model,
            "messages": [{"role": "user", "content": request.prompt}],
            "stream": False,
            "modalities": ["image"],
            "image_config": {"image_size": request.size},
        }

    async def _parse_response(
        self,
        api_response: dict[str, Any],
        request: ImageRequest,
        session: aiohttp.ClientSession,
    ) -> list[DecodedImage]:
        """解析 API 响应，遍历所有 choices 的 message.images[]。"""
        choices = api_response.get("choices")
        if not isinstance(choices, list):
            return []

        images: list[DecodedImage] = []
        for choice in choices:
            message = choice.get("message") if isinstance(choice, dict) else None
            message_images = message.get("images") if isinstance(message, dict) else None
            if not isinstance(message_images, list):
                continue

            for entry in message_images:
                image_url = extract_image_url(entry)
                if not image_url:
                    continue

                parsed = parse_data_url(image_url)
                if parsed:
                    mime_type, payload = parsed
                    images.append(DecodedImage(data=payload, mime_type=mime_type))
                    continue

                images.append(await self._fetch_image(image_url, request, session))

        return images

    async def generate(
        self,
        request: ImageRequest,
        request_id: str,
        session: aiohttp.ClientSession,
    ) -> list[DecodedImage]:
        """发起一次 chat/completions 调用。

        单次调用没有图片时返回空列表，是否致命由调用方决定。
        """
        url = f"{to_v1_base_url(request.base_url)}/{self.endpoint}"
        logger.debug(
            f"[upstream] POST {url} (chat/completions) model={request.model} "
            f"image_config.image_size={request.size} has_api_key={bool(request.api_key)}"
        )

        api_response = await self._post_json(
            url, self._build_request_body(request), request, request_id, session
        )
        return await self._parse_response(api_response, request, session)
