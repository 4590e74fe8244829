"""Pytest 配置和 fixtures。"""

from __future__ import annotations

import asyncio
import base64
import sys
from pathlib import Path
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 添加 src 目录到 Python 路径
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from gemini_image_mcp.shared.image import ImageEnvConfig, ImageMode, ImageRequest, OutputMode  # noqa: E402

# 8 字节 PNG 签名 + 少量数据，足以区分文件内容
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake-png-body"
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"fake-jpeg-body"
JPEG_B64 = base64.b64encode(JPEG_BYTES).decode("ascii")


def chat_response(*urls: str) -> dict[str, Any]:
    """构造 chat/completions 响应，每个 URL 一个 images[] 条目。"""
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": "",
                    "images": [{"type": "image_url", "image_url": {"url": url}} for url in urls],
                }
            }
        ]
    }


def images_response(*items: dict[str, Any]) -> dict[str, Any]:
    """构造 images/generations 响应。"""
    return {"created": 0, "data": list(items)}


class FakeUpstream:
    """本地 OpenAI 兼容上游（aiohttp.web + TestServer）。

    每个路由维护一个响应队列：按顺序弹出，最后一个响应会被重复使用；
    队列为空时返回 404。
    """

    def __init__(self) -> None:
        self.images_queue: list[tuple[int, Any, float]] = []
        self.chat_queue: list[tuple[int, Any, float]] = []
        self.files: dict[str, tuple[int, bytes, str]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.auth_headers: list[str | None] = []
        self._server: TestServer | None = None

    # --- 配置 ---

    def on_images(self, body: Any, status: int = 200, delay: float = 0.0) -> "FakeUpstream":
        self.images_queue.append((status, body, delay))
        return self

    def on_chat(self, body: Any, status: int = 200, delay: float = 0.0) -> "FakeUpstream":
        self.chat_queue.append((status, body, delay))
        return self

    def serve_file(
        self,
        name: str,
        data: bytes,
        content_type: str = "image/png",
        status: int = 200,
    ) -> str:
        self.files[name] = (status, data, content_type)
        return self.url(f"/files/{name}")

    # --- 查询 ---

    @property
    def base_url(self) -> str:
        assert self._server is not None
        return str(self._server.make_url("")).rstrip("/")

    def url(self, path: str) -> str:
        assert self._server is not None
        return str(self._server.make_url(path))

    def paths(self) -> list[str]:
        return [path for path, _ in self.calls]

    def bodies(self, path: str) -> list[Any]:
        return [body for call_path, body in self.calls if call_path == path]

    # --- 生命周期 ---

    async def __aenter__(self) -> "FakeUpstream":
        app = web.Application()
        app.router.add_post("/v1/images/generations", self._handle_images)
        app.router.add_post("/v1/chat/completions", self._handle_chat)
        app.router.add_get("/files/{name}", self._handle_file)
        self._server = TestServer(app)
        await self._server.start_server()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        assert self._server is not None
        await self._server.close()

    # --- handlers ---

    async def _respond(self, request: web.Request, queue: list[tuple[int, Any, float]]) -> web.StreamResponse:
        body = await request.json()
        self.calls.append((request.path, body))
        self.auth_headers.append(request.headers.get("Authorization"))

        if not queue:
            return web.json_response({"error": {"message": "not found"}}, status=404)

        status, payload, delay = queue.pop(0) if len(queue) > 1 else queue[0]
        if delay:
            await asyncio.sleep(delay)
        if isinstance(payload, str):
            return web.Response(status=status, text=payload)
        return web.json_response(payload, status=status)

    async def _handle_images(self, request: web.Request) -> web.StreamResponse:
        return await self._respond(request, self.images_queue)

    async def _handle_chat(self, request: web.Request) -> web.StreamResponse:
        return await self._respond(request, self.chat_queue)

    async def _handle_file(self, request: web.Request) -> web.StreamResponse:
        name = request.match_info["name"]
        self.calls.append((request.path, None))
        if name not in self.files:
            return web.Response(status=404, text="missing")
        status, data, content_type = self.files[name]
        return web.Response(status=status, body=data, headers={"Content-Type": content_type})


@pytest.fixture
def upstream() -> FakeUpstream:
    """未启动的假上游，测试中使用 ``async with upstream:``。"""
    return FakeUpstream()


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    """图片保存目录（不预先创建）。"""
    return tmp_path / "images"


@pytest.fixture
def make_request(out_dir: Path):
    """构造 ImageRequest 的工厂。"""

    def _make(**overrides: Any) -> ImageRequest:
        fields: dict[str, Any] = {
            "base_url": "http://127.0.0.1:1",
            "api_key": "",
            "model": "test-model",
            "prompt": "a red circle",
            "size": "1024x1024",
            "n": 1,
            "timeout_ms": 10_000,
            "output": OutputMode.PATH,
            "out_dir": str(out_dir),
        }
        fields.update(overrides)
        return ImageRequest(**fields)

    return _make


@pytest.fixture
def make_env(out_dir: Path):
    """构造 ImageEnvConfig 的工厂。"""

    def _make(**overrides: Any) -> ImageEnvConfig:
        fields: dict[str, Any] = {
            "base_url": "http://127.0.0.1:1",
            "api_key": "",
            "model": "test-model",
            "mode": ImageMode.CHAT,
            "out_dir": str(out_dir),
            "timeout_ms": 10_000,
        }
        fields.update(overrides)
        return ImageEnvConfig(**fields)

    return _make
