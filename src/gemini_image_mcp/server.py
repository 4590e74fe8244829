"""Gemini Image MCP Server。

通过 stdio 暴露单个 generate_image 工具，调用 OpenAI 兼容的图像生成接口。

环境变量见 config.py 与 shared/image/config.py。

用法:
    uvx gemini-image-mcp
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server import Server
from mcp.types import ImageContent, LoggingLevel, TextContent, Tool

from .config import Config, get_config
from .handlers import ImageHandler, ToolContext
from .shared.image import ImageEnvConfig, ToolResponse, get_image_config
from .tool_schema import TOOL_NAME

__all__ = ["SERVER_NAME", "ToolCallError", "create_server", "to_content"]

logger = logging.getLogger(__name__)

SERVER_NAME = "gemini-image-mcp"

# MCP 日志级别 -> logging 级别
_MCP_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}


class ToolCallError(Exception):
    """工具调用失败。

    由 MCP Server 转换为 isError=true 的 CallToolResult。
    """
    pass


def to_content(response: ToolResponse) -> list[TextContent | ImageContent]:
    """将 ToolResponse 转换为 MCP content 列表。"""
    content: list[TextContent | ImageContent] = []
    if response.text:
        content.append(TextContent(type="text", text=response.text))
    for image in response.images:
        content.append(ImageContent(type="image", data=image.data, mimeType=image.mime_type or "image/png"))
    return content


def create_server(
    config: Config | None = None,
    image_config: ImageEnvConfig | None = None,
) -> Server:
    """创建 MCP Server 实例。

    Args:
        config: 进程级配置（可选，默认从环境变量加载）
        image_config: 上游与图片配置（可选，默认从环境变量加载）
    """
    config = config or get_config()
    image_config = image_config or get_image_config()
    server = Server(SERVER_NAME)
    handler = ImageHandler()

    def log_event(event: dict[str, Any]) -> None:
        """记录上游事件（已脱敏）。"""
        logger.debug(f"[event] {json.dumps(event, ensure_ascii=False, default=str)}")

    async def send_log(level: str, message: str) -> None:
        """通过当前请求的 session 推送日志通知。"""
        try:
            session = server.request_context.session
        except LookupError:
            return
        await session.send_log_message(level=level, data=message, logger=SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """列出可用工具。"""
        return [
            Tool(
                name=handler.name,
                description=handler.description,
                inputSchema=handler.get_input_schema(),
            )
        ]

    @server.set_logging_level()
    async def set_logging_level(level: LoggingLevel) -> None:
        """客户端调整日志级别。"""
        logging.getLogger("gemini_image_mcp").setLevel(_MCP_LOG_LEVELS.get(level, logging.INFO))
        logger.info(f"Log level set to {level} by client")

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent | ImageContent]:
        """调用工具。"""
        arguments = arguments or {}
        logger.debug(
            f"[MCP] call_tool request: {name} "
            f"{json.dumps({k: v[:100] + '...' if isinstance(v, str) and len(v) > 100 else v for k, v in arguments.items()}, ensure_ascii=False, default=str)}"
        )

        if name != TOOL_NAME:
            raise ToolCallError(f"Unknown tool: {name}")

        ctx = ToolContext(
            config=config,
            image_config=image_config,
            send_log=send_log,
            event_callback=log_event,
        )

        response = await handler.handle(arguments, ctx)
        if response.is_error:
            raise ToolCallError(response.text)
        return to_content(response)

    return server
