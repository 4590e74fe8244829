"""OpenAI Images Provider - 使用 /images/generations API 生成图像。

gemini-image-mcp shared/image/providers v0.1.0

一次请求返回 n 张图片，每项为 b64_json（可能是 data URI）或远程 url。
"""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ..codec import parse_base64_payload
from ..config import to_v1_base_url
from ..errors import NoImagesError
from ..types import DecodedImage, ImageRequest
from .base import BaseProvider

__all__ = ["OpenAIImagesProvider"]

logger = logging.getLogger(__name__)


class OpenAIImagesProvider(BaseProvider):
    """OpenAI Images Provider。

    使用 /images/generations API 生成图像。
    """

    endpoint = "images/generations"

    def _build_request_body(self, request: ImageRequest) -> dict[str, Any]:
        """构建请求体。"""
        return {
            "model": request.model,
            "prompt": request.prompt,
            "size": request.size,
            "n": request.n,
            "response_format": "b64_json",
        }

    async def _parse_response(
        self,
        api_response: dict[str, Any],
        request: ImageRequest,
        session: aiohttp.ClientSession,
    ) -> list[DecodedImage]:
        """解析 API 响应。"""
        data_list = api_response.get("data")
        if not isinstance(data_list, list):
            data_list = []

        images: list[DecodedImage] = []
        for item in data_list:
            if not isinstance(item, dict):
                continue

            b64_json = item.get("b64_json")
            if isinstance(b64_json, str) and b64_json.strip():
                images.append(parse_base64_payload(b64_json))
                continue

            url = item.get("url")
            if isinstance(url, str) and url.strip():
                images.append(await self._fetch_image(url, request, session))

        return images

    async def generate(
        self,
        request: ImageRequest,
        request_id: str,
        session: aiohttp.ClientSession,
    ) -> list[DecodedImage]:
        """生成图像。

        Raises:
            NoImagesError: 响应中没有可用的图片数据
        """
        url = f"{to_v1_base_url(request.base_url)}/{self.endpoint}"
        logger.debug(
            f"[upstream] POST {url} (images/generations) model={request.model} "
            f"size={request.size} n={request.n} has_api_key={bool(request.api_key)}"
        )

        api_response = await self._post_json(
            url, self._build_request_body(request), request, request_id, session
        )
        images = await self._parse_response(api_response, request, session)

        if not images:
            raise NoImagesError("no usable image data in images/generations response")
        return images
