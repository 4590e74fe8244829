"""Gemini Image MCP - 通过 OpenAI 兼容接口生成图片的 MCP 服务器。

环境变量:
    IMAGE_BASE_URL: 上游 API 地址 (默认 http://127.0.0.1:8317)
    IMAGE_API_KEY: API key
    IMAGE_MODE: 上游接口模式 chat/images/auto (默认 chat)
    GIM_DEBUG: 调试模式 (默认 false)

用法:
    uvx gemini-image-mcp
"""

__version__ = "0.1.0"

from .app import main


__all__ = ["__version__", "main"]
