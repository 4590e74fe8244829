"""Gemini Image MCP 入口点。

支持: python -m gemini_image_mcp
"""

from .app import main

if __name__ == "__main__":
    main()
