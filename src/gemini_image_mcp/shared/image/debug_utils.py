"""Debug utilities for image API clients.

gemini-image-mcp shared/image v0.1.0
"""

from __future__ import annotations

import re
from typing import Any, Callable

EventCallback = Callable[[dict[str, Any]], None]

_BASE64_PREFIX = re.compile(r"^[A-Za-z0-9+/=]+$")


def sanitize_for_debug(data: Any) -> Any:
    """Sanitize data for debug output, replacing base64 strings with summaries."""
    if isinstance(data, dict):
        return {k: sanitize_for_debug(v) for k, v in data.items()}
    if isinstance(data, list):
        return [sanitize_for_debug(item) for item in data]
    if isinstance(data, str) and len(data) > 100:
        if data.startswith("data:") and ";base64," in data[:100]:
            header = data.split(",", 1)[0]
            return f"<{header}:{len(data)} chars>"
        if _BASE64_PREFIX.match(data[:100]):
            return f"<base64:{len(data)} chars>"
    return data


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Sanitize headers for debug output, masking auth tokens."""
    result = {}
    for k, v in headers.items():
        if k.lower() in ("authorization", "x-goog-api-key"):
            result[k] = "***"
        else:
            result[k] = v
    return result


def mask_token(token: str) -> str:
    """Mask a token, keeping only the first and last 4 characters."""
    if not token:
        return "(empty)"
    clean = token.replace("Bearer ", "")
    if len(clean) <= 8:
        return clean[:2] + "***"
    return f"{clean[:4]}...{clean[-4:]}"
