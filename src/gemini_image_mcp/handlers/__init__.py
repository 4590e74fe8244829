"""Tool Handlers 模块。

提供工具处理器抽象和具体实现。
"""

from .base import ToolContext, ToolHandler
from .image_tools import ImageHandler

__all__ = [
    "ToolContext",
    "ToolHandler",
    "ImageHandler",
]
