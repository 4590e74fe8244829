"""Tool Handler 基础抽象。

定义工具处理器的协议和上下文。
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

if TYPE_CHECKING:
    import aiohttp

    from ..config import Config
    from ..shared.image import ImageEnvConfig, ToolResponse
    from ..shared.image.debug_utils import EventCallback

__all__ = [
    "ToolContext",
    "ToolHandler",
]

logger = logging.getLogger(__name__)

# (level, message) -> 推送到 MCP 客户端
LogSender = Callable[[str, str], Awaitable[None]]


@dataclass
class ToolContext:
    """工具执行上下文。

    封装工具执行所需的所有依赖，避免在函数间传递大量参数。

    Attributes:
        config: 进程级配置（debug 开关）
        image_config: 上游与图片配置
        send_log: 向 MCP 客户端推送日志（可选）
        event_callback: 上游事件回调（可选）
        http_session: 共享的 HTTP 会话（可选，默认每次调用新建）
    """

    config: "Config"
    image_config: "ImageEnvConfig"
    send_log: LogSender | None = None
    event_callback: "EventCallback | None" = None
    http_session: "aiohttp.ClientSession | None" = None

    async def log(self, level: str, message: str) -> None:
        """记录日志；debug 模式下同时推送给 MCP 客户端。"""
        logger.log(logging.getLevelName(level.upper()), message)
        if not (self.config.debug and self.send_log):
            return
        try:
            await self.send_log(level, message)
        except Exception as e:
            logger.debug(f"Failed to send log notification: {e}")


class ToolHandler(ABC):
    """工具处理器协议。

    所有工具处理器必须实现此接口。
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """工具名称。"""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """工具描述。"""
        ...

    @abstractmethod
    def get_input_schema(self) -> dict[str, Any]:
        """获取输入参数 schema。"""
        ...

    @abstractmethod
    async def handle(
        self,
        arguments: dict[str, Any],
        ctx: ToolContext,
    ) -> "ToolResponse":
        """处理工具调用。

        Args:
            arguments: 工具参数
            ctx: 执行上下文

        Returns:
            ToolResponse
        """
        ...
