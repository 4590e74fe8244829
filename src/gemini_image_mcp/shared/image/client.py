"""Image API 客户端。

gemini-image-mcp shared/image v0.1.0

统一的图片生成客户端，按 IMAGE_MODE 选择上游接口：
1. chat: /chat/completions + modalities（默认，按 n 顺序调用多次）
2. images: /images/generations
3. auto: 先尝试 images，仅在该接口本身返回 HTTP 404 时回退到 chat
   （下载图片 URL 的 404 不触发回退）
"""

from __future__ import annotations

import logging
import uuid
from types import TracebackType

import aiohttp

from .config import ImageEnvConfig, ImageMode, get_image_config
from .debug_utils import EventCallback, mask_token
from .errors import ImageError, ImageFetchError, NoImagesError, UpstreamError
from .providers import ChatCompletionsProvider, OpenAIImagesProvider
from .types import DecodedImage, ImageRequest

__all__ = ["ImageClient"]

logger = logging.getLogger(__name__)


class ImageClient:
    """Image API 客户端。

    Example:
        async with ImageClient() as client:
            images = await client.generate(request)
    """

    def __init__(
        self,
        config: ImageEnvConfig | None = None,
        event_callback: EventCallback | None = None,
        session: aiohttp.ClientSession | None = None,
        mode: ImageMode | None = None,
    ) -> None:
        """初始化客户端。

        Args:
            config: 环境配置（可选，默认从环境变量加载）
            event_callback: 事件回调函数（用于调试日志）
            session: 外部 HTTP 会话（可选，传入时不负责关闭）
            mode: 覆盖配置中的上游接口模式
        """
        self._config = config or get_image_config()
        self._mode = mode or self._config.mode
        self._event_callback = event_callback
        self._session = session
        self._owns_session = session is None

        self._images_provider = OpenAIImagesProvider(event_callback)
        self._chat_provider = ChatCompletionsProvider(event_callback)

    @property
    def mode(self) -> ImageMode:
        return self._mode

    async def __aenter__(self) -> "ImageClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话。"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """关闭自己创建的 HTTP 会话。"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    def _emit_event(self, event: dict) -> None:
        """发送事件到回调。"""
        if self._event_callback:
            self._event_callback(event)

    async def _generate_via_chat(
        self,
        request: ImageRequest,
        request_id: str,
        session: aiohttp.ClientSession,
    ) -> list[DecodedImage]:
        """顺序调用 chat/completions，直到凑够 n 张图片。

        任意一次调用失败都直接向上抛出，已累计的图片不作为成功结果返回。
        """
        images: list[DecodedImage] = []
        for attempt in range(request.n):
            batch = await self._chat_provider.generate(request, request_id, session)
            logger.debug(f"chat/completions call {attempt + 1}/{request.n} returned {len(batch)} image(s)")
            images.extend(batch)
            if len(images) >= request.n:
                break

        if not images:
            raise NoImagesError(
                "no usable image data found "
                "(chat/completions returned no choices[].message.images)"
            )
        return images[:request.n]

    async def _dispatch(
        self,
        request: ImageRequest,
        request_id: str,
        session: aiohttp.ClientSession,
    ) -> list[DecodedImage]:
        if self._mode is ImageMode.IMAGES:
            images = await self._images_provider.generate(request, request_id, session)
            return images[:request.n]

        if self._mode is ImageMode.AUTO:
            try:
                images = await self._images_provider.generate(request, request_id, session)
                return images[:request.n]
            except UpstreamError as e:
                if e.status_code != 404 or isinstance(e, ImageFetchError):
                    raise
                logger.info("images/generations returned 404, falling back to chat/completions")
                self._emit_event({
                    "type": "fallback",
                    "request_id": request_id,
                    "from": "images",
                    "to": "chat",
                    "status_code": e.status_code,
                })

        return await self._generate_via_chat(request, request_id, session)

    async def generate(self, request: ImageRequest) -> list[DecodedImage]:
        """调用图像生成 API。

        Args:
            request: 规范化后的请求

        Returns:
            1..n 张 DecodedImage

        Raises:
            UpstreamError: 上游返回非 2xx
            NetworkError: 网络错误（含超时）
            NoImagesError: 没有可用的图片数据
        """
        request_id = str(uuid.uuid4())[:8]

        self._emit_event({
            "type": "generation_started",
            "request_id": request_id,
            "mode": self._mode.value,
            "prompt": request.prompt[:100],
            "n": request.n,
            "auth_hint": mask_token(request.api_key),
        })

        session = await self._get_session()
        try:
            images = await self._dispatch(request, request_id, session)
        except ImageError as e:
            self._emit_event({
                "type": "generation_failed",
                "request_id": request_id,
                "error": str(e)[:500],
                "api_url": getattr(e, "api_url", ""),
            })
            raise

        self._emit_event({
            "type": "generation_completed",
            "request_id": request_id,
            "image_count": len(images),
        })
        return images
