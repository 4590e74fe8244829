"""工具参数规范化。

gemini-image-mcp shared/image v0.1.0

把调用方传入的宽松参数（字符串/数字/列表混用）转换为 ImageRequest。
宽松类型只存在于本模块的输入侧，之后一律使用 ImageRequest。
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Mapping

from .config import (
    DEFAULT_SIZE,
    MAX_TIMEOUT_MS,
    MIN_TIMEOUT_MS,
    PROJECT_ROOT,
    ImageEnvConfig,
    OutputMode,
    clamp_int,
    parse_int,
)
from .errors import InvalidArgumentError
from .types import ImageRequest

__all__ = [
    "MIN_IMAGES",
    "MAX_IMAGES",
    "INLINE_OUTPUT_ALIASES",
    "OUT_DIR_KEYS",
    "DEFAULT_OUT_DIR_NAME",
    "normalize_prompt",
    "normalize_size",
    "normalize_count",
    "normalize_output",
    "resolve_out_dir",
    "normalize_request",
]

MIN_IMAGES = 1
MAX_IMAGES = 4

# 这些取值都表示「只返回图片数据」
INLINE_OUTPUT_ALIASES = frozenset({"image", "base64", "b64", "data", "inline"})

# outDir 的同义参数名，按优先级排列
OUT_DIR_KEYS = ("outDir", "out_dir", "outdir", "output_dir")

DEFAULT_OUT_DIR_NAME = "debug-output"

_DIGITS = re.compile(r"^\d+$")


def normalize_prompt(value: Any) -> str:
    """解析 prompt：列表按空格拼接，其余类型转为字符串。

    Raises:
        InvalidArgumentError: prompt 为空
    """
    if isinstance(value, (list, tuple)):
        prompt = " ".join("" if item is None else str(item) for item in value).strip()
    else:
        prompt = ("" if value is None else str(value)).strip()
    if not prompt:
        raise InvalidArgumentError("prompt required")
    return prompt


def normalize_size(value: Any, default: str = DEFAULT_SIZE) -> str:
    """解析 size：纯数字如 512 扩展为 512x512，其余原样透传。"""
    if value is None or isinstance(value, bool):
        value = default
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    size = str(value).strip() or default
    if _DIGITS.match(size):
        return f"{size}x{size}"
    return size


def normalize_count(value: Any) -> int:
    """解析 n：无法解析时为 1，并限制在 [1, 4]。"""
    return clamp_int(parse_int(value, MIN_IMAGES), MIN_IMAGES, MAX_IMAGES)


def normalize_output(value: Any, default: str = OutputMode.PATH.value) -> OutputMode:
    """解析 output：识别 image/base64/b64/data/inline 等同义词。"""
    if value is None:
        value = default
    raw = str(value).strip().lower()
    return OutputMode.INLINE if raw in INLINE_OUTPUT_ALIASES else OutputMode.PATH


def resolve_out_dir(value: Any, project_root: Path = PROJECT_ROOT) -> str:
    """解析保存目录。

    - 空值: <project_root>/debug-output（默认 ~/gemini-image-mcp/debug-output）
    - ~ 开头: 相对于用户主目录
    - 相对路径: 相对于 project_root
    - 绝对路径: 原样返回
    """
    out_dir = ("" if value is None else str(value)).strip()
    if not out_dir:
        return str(project_root / DEFAULT_OUT_DIR_NAME)

    if out_dir.startswith("~"):
        out_dir = os.path.join(str(Path.home()), out_dir[1:].lstrip("/\\"))

    if os.path.isabs(out_dir):
        return out_dir
    return os.path.normpath(os.path.join(str(project_root), out_dir))


def _pick_out_dir(arguments: Mapping[str, Any]) -> Any:
    for key in OUT_DIR_KEYS:
        if arguments.get(key) is not None:
            return arguments[key]
    return None


def normalize_request(
    arguments: Mapping[str, Any] | None,
    env: ImageEnvConfig,
    project_root: Path = PROJECT_ROOT,
) -> ImageRequest:
    """将工具参数和环境配置合并为 ImageRequest。

    Args:
        arguments: 工具调用参数（可为 None）
        env: 环境配置（提供默认值和上游信息）
        project_root: 相对路径的解析基准

    Returns:
        ImageRequest

    Raises:
        InvalidArgumentError: 参数无效
    """
    arguments = arguments or {}

    out_dir_value = _pick_out_dir(arguments)
    if out_dir_value is None:
        out_dir_value = env.out_dir

    return ImageRequest(
        base_url=env.base_url,
        api_key=env.api_key,
        model=env.model,
        prompt=normalize_prompt(arguments.get("prompt")),
        size=normalize_size(arguments.get("size"), env.default_size or DEFAULT_SIZE),
        n=normalize_count(arguments.get("n")),
        timeout_ms=clamp_int(env.timeout_ms, MIN_TIMEOUT_MS, MAX_TIMEOUT_MS),
        output=normalize_output(arguments.get("output"), env.default_output),
        out_dir=resolve_out_dir(out_dir_value, project_root),
    )
