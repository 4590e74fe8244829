"""本地调试脚本：不经过 MCP，直接生成一次图片。

Usage:
    gemini-image-mcp-generate "a red circle" [-n 2] [--size 512] [--output path|image]
                              [--out-dir ./debug-output] [--mode chat|images|auto]
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from .app import configure_logging
from .config import get_config
from .shared.image import (
    ImageClient,
    ImageError,
    ImageMode,
    ToolResponse,
    get_image_config,
    materialize,
    normalize_request,
)
from .shared.response_formatter import format_error_message

__all__ = ["build_parser", "run", "main"]

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini-image-mcp-generate",
        description="Generate images once via the configured upstream (no MCP).",
    )
    parser.add_argument("prompt", nargs="+", help="Image description")
    parser.add_argument("-n", "--count", dest="n", default=None, help="Number of images (1-4)")
    parser.add_argument("--size", default=None, help="Image size, e.g. 1024x1024 or 512")
    parser.add_argument("--output", default=None, help="path (default) or image")
    parser.add_argument("--out-dir", dest="out_dir", default=None, help="Output directory")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ImageMode],
        default=None,
        help="Override IMAGE_MODE for this run",
    )
    return parser


async def run(args: argparse.Namespace) -> ToolResponse:
    """按命令行参数执行一次 normalizer -> client -> materializer。"""
    image_config = get_image_config()
    if args.mode:
        image_config = dataclasses.replace(image_config, mode=ImageMode.from_string(args.mode))

    arguments: dict[str, Any] = {
        "prompt": args.prompt,
        "size": args.size,
        "n": args.n,
        "output": args.output,
        "outDir": args.out_dir,
    }

    try:
        request = normalize_request(arguments, image_config)
        async with ImageClient(image_config) as client:
            images = await client.generate(request)
        return materialize(images, request, image_config.inline_max_size)
    except (ImageError, OSError) as e:
        return ToolResponse(text=format_error_message(e), is_error=True)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    configure_logging(get_config())
    args = build_parser().parse_args(argv)

    response = asyncio.run(run(args))

    if response.is_error:
        print(response.text, file=sys.stderr)
        return 1

    if response.text:
        print(response.text)
    for index, image in enumerate(response.images, start=1):
        print(f"[image {index}] {image.mime_type}, ~{image.estimated_size} bytes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
