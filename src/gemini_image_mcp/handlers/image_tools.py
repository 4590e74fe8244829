"""图像生成工具处理器。

处理 generate_image 工具调用：参数规范化 -> 上游生成 -> 落盘/内联。
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from .base import ToolContext, ToolHandler
from ..shared.image import (
    ImageClient,
    ImageError,
    ToolResponse,
    materialize,
    normalize_request,
)
from ..shared.response_formatter import format_error_message
from ..tool_schema import TOOL_DESCRIPTION, TOOL_NAME, create_tool_schema

__all__ = ["ImageHandler"]

logger = logging.getLogger(__name__)


class ImageHandler(ToolHandler):
    """generate_image 工具处理器。"""

    @property
    def name(self) -> str:
        return TOOL_NAME

    @property
    def description(self) -> str:
        return TOOL_DESCRIPTION

    def get_input_schema(self) -> dict[str, Any]:
        return create_tool_schema()

    async def handle(
        self,
        arguments: dict[str, Any],
        ctx: ToolContext,
    ) -> ToolResponse:
        start_time = time.time()

        try:
            request = normalize_request(arguments, ctx.image_config)
        except ImageError as e:
            return ToolResponse(text=format_error_message(e), is_error=True)

        await ctx.log(
            "debug",
            f"generate_image: mode={ctx.image_config.mode.value} model={request.model} "
            f"size={request.size} n={request.n} output={request.output.value}",
        )

        try:
            async with ImageClient(
                ctx.image_config,
                event_callback=ctx.event_callback,
                session=ctx.http_session,
            ) as client:
                images = await client.generate(request)

            response = materialize(images, request, ctx.image_config.inline_max_size)

        except asyncio.CancelledError:
            raise

        except (ImageError, OSError) as e:
            logger.warning(f"generate_image failed: {type(e).__name__}: {e}")
            return ToolResponse(text=format_error_message(e), is_error=True)

        except Exception as e:
            logger.exception(f"Image tool error: {e}")
            return ToolResponse(text=format_error_message(e), is_error=True)

        await ctx.log(
            "info",
            f"generate_image: {len(images)} image(s) in {time.time() - start_time:.3f}s, "
            f"{len(response.images)} attached, output={request.output.value}",
        )
        return response
