"""Gemini Image MCP 应用入口。

包含日志配置、服务器生命周期管理和主入口点。
"""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from mcp.server.stdio import stdio_server

from . import __version__
from .config import Config, get_config
from .server import create_server
from .shared.image import get_image_config
from .shared.image.debug_utils import mask_token

__all__ = ["configure_logging", "run_server", "main"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: Config) -> None:
    """配置日志输出。

    stdout 保留给 stdio 协议，日志只写 stderr 或临时文件。
    """
    log_handlers: list[logging.Handler] = []

    if config.log_debug and config.log_file:
        # LOG_DEBUG 模式：输出到临时文件
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(file_handler)
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(stderr_handler)

    log_level = logging.DEBUG if (config.debug or config.log_debug) else logging.INFO

    # 配置 root logger（第三方库）为 WARNING，减少噪音
    logging.basicConfig(
        level=logging.WARNING,
        handlers=log_handlers,
        force=True,
    )
    # 只对 gemini_image_mcp 命名空间启用详细日志
    logging.getLogger("gemini_image_mcp").setLevel(log_level)


async def run_server() -> None:
    """运行 MCP Server（stdio）。"""
    config = get_config()
    image_config = get_image_config()
    logger.info(
        f"Starting gemini-image-mcp {__version__}: {config}, "
        f"base_url={image_config.base_url}, model={image_config.model}, "
        f"mode={image_config.mode.value}, api_key={mask_token(image_config.api_key)}"
    )

    server = create_server(config, image_config)

    async with stdio_server() as (read_stream, write_stream):
        logger.info("gemini-image-mcp started (stdio)")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )

    logger.info("gemini-image-mcp stopped")


def main() -> None:
    """主入口点。"""
    load_dotenv()
    config = get_config()
    configure_logging(config)

    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    main()
