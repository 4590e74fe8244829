"""Tool Schema 定义。

包含工具名称、描述和参数 schema。
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "TOOL_NAME",
    "TOOL_DESCRIPTION",
    "create_tool_schema",
]

TOOL_NAME = "generate_image"

TOOL_DESCRIPTION = """Generate AI images. Use this tool whenever the user wants to create, draw or generate a picture, illustration, icon or photo.

WHEN TO USE:
- "Draw a ...", "Generate an image of ...", "Create a picture ..."
- Visualizing a concept or idea
- Illustrations, icons, artwork

RESPONSE FORMAT:
- Default (output="path"): images are saved to disk; returns Markdown image links and file paths, plus image data for small images
- output="image": returns image data only, nothing is saved

BEST PRACTICES:
- The more detailed the prompt, the better: subject, style, colors, composition, lighting"""

# 参数 schema（宽松类型，由 normalizer 统一解析）
IMAGE_PROPERTIES: dict[str, Any] = {
    "prompt": {
        "anyOf": [
            {"type": "string"},
            {"type": "array", "items": {"type": "string"}},
        ],
        "description": (
            "Image description (required). Describe the content in detail, e.g. "
            "'an orange cat sitting on a windowsill, sunlight through the window, watercolor style'"
        ),
    },
    "size": {
        "anyOf": [{"type": "string"}, {"type": "number"}, {"type": "integer"}],
        "description": (
            "Image size. Default 1024x1024. Options: 512x512, 1024x1024, "
            "1024x1792 (portrait), 1792x1024 (landscape). A bare number like 512 becomes 512x512"
        ),
    },
    "n": {
        "anyOf": [{"type": "integer"}, {"type": "number"}, {"type": "string"}],
        "description": "Number of images. Default 1, max 4",
    },
    "output": {
        "type": "string",
        "description": (
            "Return format. Default 'path' (save files + return paths + show images). "
            "Set to 'image' to return image data only without saving"
        ),
    },
    "outDir": {
        "type": "string",
        "description": (
            "Output directory. Defaults to ~/gemini-image-mcp/debug-output; relative paths resolve under ~/gemini-image-mcp. "
            "Absolute, relative and ~ paths are accepted"
        ),
    },
}


def create_tool_schema() -> dict[str, Any]:
    """创建 generate_image 工具的 JSON Schema。

    prompt 在 normalizer 中校验，schema 不标记 required，
    以便空 prompt 返回可读的错误信息而不是 schema 校验失败。
    """
    return {
        "type": "object",
        "properties": dict(IMAGE_PROPERTIES),
    }
