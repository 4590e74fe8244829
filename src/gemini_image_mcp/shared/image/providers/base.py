"""Provider 公共逻辑：请求头、带超时的 POST/GET、事件推送。

gemini-image-mcp shared/image/providers v0.1.0
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import aiohttp

from ..codec import image_from_bytes
from ..debug_utils import EventCallback, sanitize_for_debug, sanitize_headers
from ..errors import ImageFetchError, NetworkError, UpstreamError, UpstreamTimeoutError
from ..types import DecodedImage, ImageRequest

__all__ = ["BaseProvider"]

logger = logging.getLogger(__name__)


class BaseProvider:
    """上游 Provider 基类。

    子类实现 ``endpoint`` 与 ``generate``，共享鉴权、超时和错误映射。
    """

    endpoint = ""

    def __init__(self, event_callback: EventCallback | None = None) -> None:
        self._event_callback = event_callback

    def _emit_event(self, event: dict[str, Any]) -> None:
        """发送事件到回调。"""
        if self._event_callback:
            self._event_callback(event)

    def _build_headers(self, api_key: str) -> dict[str, str]:
        """构建请求头，配置了 key 时附带 Bearer 认证。"""
        headers = {"Content-Type": "application/json"}
        if api_key:
            if api_key.startswith("Bearer "):
                headers["Authorization"] = api_key
            else:
                headers["Authorization"] = f"Bearer {api_key}"
        return headers

    @staticmethod
    def _timeout(timeout_ms: int) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=timeout_ms / 1000)

    async def _post_json(
        self,
        url: str,
        body: dict[str, Any],
        request: ImageRequest,
        request_id: str,
        session: aiohttp.ClientSession,
    ) -> dict[str, Any]:
        """POST JSON 并返回解析后的响应体。

        Raises:
            UpstreamError: 非 2xx 响应或响应不是 JSON
            UpstreamTimeoutError: 超时
            NetworkError: 其他网络错误
        """
        headers = self._build_headers(request.api_key)

        self._emit_event({
            "type": "api_request",
            "request_id": request_id,
            "url": url,
            "method": "POST",
            "headers": sanitize_headers(headers),
            "body": sanitize_for_debug(body),
        })

        start_time = time.time()
        try:
            async with session.post(
                url,
                json=body,
                headers=headers,
                timeout=self._timeout(request.timeout_ms),
            ) as resp:
                duration_ms = int((time.time() - start_time) * 1000)
                text = await resp.text()

                if not 200 <= resp.status < 300:
                    self._emit_event({
                        "type": "api_response",
                        "request_id": request_id,
                        "status_code": resp.status,
                        "duration_ms": duration_ms,
                        "body": text[:2000],
                    })
                    raise UpstreamError(resp.status, text, url)

                try:
                    api_response = await resp.json(content_type=None)
                except ValueError as e:
                    raise UpstreamError(
                        resp.status, text[:2000], url, message="Invalid JSON from upstream"
                    ) from e

                self._emit_event({
                    "type": "api_response",
                    "request_id": request_id,
                    "status_code": resp.status,
                    "duration_ms": duration_ms,
                    "body": sanitize_for_debug(api_response),
                })
                return api_response if isinstance(api_response, dict) else {}

        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError(request.timeout_ms, url, e) from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network request failed: {e}", cause=e, api_url=url) from e

    async def _fetch_image(
        self,
        url: str,
        request: ImageRequest,
        session: aiohttp.ClientSession,
    ) -> DecodedImage:
        """GET 远程图片并编码为 DecodedImage。"""
        logger.debug(f"Downloading image: {url}")
        try:
            async with session.get(url, timeout=self._timeout(request.timeout_ms)) as resp:
                if not 200 <= resp.status < 300:
                    body = await resp.text()
                    raise ImageFetchError(resp.status, body, url)
                image_bytes = await resp.read()
                content_type = resp.headers.get("Content-Type")
        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError(request.timeout_ms, url, e) from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network request failed: {e}", cause=e, api_url=url) from e

        logger.debug(f"Downloaded image: {len(image_bytes)} bytes ({content_type})")
        return image_from_bytes(image_bytes, content_type)

    async def generate(
        self,
        request: ImageRequest,
        request_id: str,
        session: aiohttp.ClientSession,
    ) -> list[DecodedImage]:
        raise NotImplementedError
