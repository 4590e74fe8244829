"""ImageHandler 端到端测试（假上游 + 真实落盘）。"""

from __future__ import annotations

from pathlib import Path

import pytest

from gemini_image_mcp.config import Config
from gemini_image_mcp.handlers import ImageHandler, ToolContext
from gemini_image_mcp.shared.image import ImageMode

from conftest import PNG_B64, PNG_BYTES, chat_response, images_response


def make_ctx(image_config, debug: bool = False, sent: list | None = None) -> ToolContext:
    async def send_log(level: str, message: str) -> None:
        if sent is not None:
            sent.append((level, message))

    return ToolContext(config=Config(debug=debug), image_config=image_config, send_log=send_log)


class TestGenerateImage:
    """测试 generate_image 完整流程。"""

    @pytest.mark.asyncio
    async def test_two_images_saved_in_chat_mode(self, upstream, make_env, out_dir: Path):
        upstream.on_chat(chat_response(f"data:image/png;base64,{PNG_B64}"))
        async with upstream:
            ctx = make_ctx(make_env(base_url=upstream.base_url, mode=ImageMode.CHAT))
            response = await ImageHandler().handle(
                {"prompt": "a red circle", "n": 2, "output": "path", "outDir": str(out_dir)},
                ctx,
            )

        assert not response.is_error
        assert upstream.paths() == ["/v1/chat/completions", "/v1/chat/completions"]

        files = sorted(out_dir.iterdir())
        assert len(files) == 2
        assert all(f.read_bytes() == PNG_BYTES for f in files)

        lines = response.text.splitlines()
        assert lines[0] == "Generated 2 image(s):"
        for f in files:
            assert any(line.startswith(f"![{f.name}](file:///") for line in lines)
            assert str(f).replace("\\", "/") in lines
        assert "Some images failed" not in response.text
        assert len(response.images) == 2

    @pytest.mark.asyncio
    async def test_inline_output(self, upstream, make_env, out_dir: Path):
        upstream.on_images(images_response({"b64_json": PNG_B64}))
        async with upstream:
            ctx = make_ctx(make_env(base_url=upstream.base_url, mode=ImageMode.IMAGES))
            response = await ImageHandler().handle({"prompt": ["a", "cat"], "output": "image"}, ctx)

        assert not response.is_error
        assert response.text == ""
        assert [img.data for img in response.images] == [PNG_B64]
        assert not out_dir.exists()
        assert upstream.bodies("/v1/images/generations")[0]["prompt"] == "a cat"

    @pytest.mark.asyncio
    async def test_auto_mode_falls_back(self, upstream, make_env, out_dir: Path):
        upstream.on_chat(chat_response(f"data:image/png;base64,{PNG_B64}"))
        async with upstream:
            ctx = make_ctx(make_env(base_url=upstream.base_url, mode=ImageMode.AUTO))
            response = await ImageHandler().handle({"prompt": "x", "outDir": str(out_dir)}, ctx)

        assert not response.is_error
        assert upstream.paths() == ["/v1/images/generations", "/v1/chat/completions"]
        assert len(list(out_dir.iterdir())) == 1

    @pytest.mark.asyncio
    async def test_empty_prompt(self, make_env):
        response = await ImageHandler().handle({"prompt": "   "}, make_ctx(make_env()))

        assert response.is_error
        assert response.text == "Generation failed: prompt required"

    @pytest.mark.asyncio
    async def test_upstream_error_with_suggestion(self, upstream, make_env, out_dir: Path):
        upstream.on_chat({"error": "unauthorized"}, status=401)
        async with upstream:
            ctx = make_ctx(make_env(base_url=upstream.base_url))
            response = await ImageHandler().handle({"prompt": "x", "outDir": str(out_dir)}, ctx)

        assert response.is_error
        assert response.text.startswith("Generation failed: Image generation failed: HTTP 401")
        assert "Suggestion: Set IMAGE_API_KEY" in response.text
        assert not out_dir.exists()

    @pytest.mark.asyncio
    async def test_network_error_with_suggestion(self, make_env, out_dir: Path):
        ctx = make_ctx(make_env(base_url="http://127.0.0.1:1"))
        response = await ImageHandler().handle({"prompt": "x", "outDir": str(out_dir)}, ctx)

        assert response.is_error
        assert "IMAGE_BASE_URL" in response.text

    @pytest.mark.asyncio
    async def test_no_images(self, upstream, make_env, out_dir: Path):
        upstream.on_chat({"choices": []})
        async with upstream:
            ctx = make_ctx(make_env(base_url=upstream.base_url))
            response = await ImageHandler().handle({"prompt": "x", "outDir": str(out_dir)}, ctx)

        assert response.is_error
        assert "no usable image data" in response.text

    @pytest.mark.asyncio
    async def test_unwritable_out_dir(self, upstream, make_env, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        upstream.on_chat(chat_response(f"data:image/png;base64,{PNG_B64}"))
        async with upstream:
            ctx = make_ctx(make_env(base_url=upstream.base_url))
            response = await ImageHandler().handle({"prompt": "x", "outDir": str(blocker / "sub")}, ctx)

        assert response.is_error
        assert response.text.startswith("Generation failed:")


class TestContextLog:
    """测试 debug 模式下的日志推送。"""

    @pytest.mark.asyncio
    async def test_logs_sent_in_debug_mode(self, upstream, make_env, out_dir: Path):
        sent: list = []
        upstream.on_chat(chat_response(f"data:image/png;base64,{PNG_B64}"))
        async with upstream:
            ctx = make_ctx(make_env(base_url=upstream.base_url), debug=True, sent=sent)
            await ImageHandler().handle({"prompt": "x", "outDir": str(out_dir)}, ctx)

        assert [level for level, _ in sent] == ["debug", "info"]
        assert "generate_image" in sent[0][1]

    @pytest.mark.asyncio
    async def test_logs_not_sent_without_debug(self, make_env):
        sent: list = []
        ctx = make_ctx(make_env(), debug=False, sent=sent)
        await ctx.log("info", "hello")
        assert sent == []

    @pytest.mark.asyncio
    async def test_send_failure_is_ignored(self, make_env):
        async def broken_send(level: str, message: str) -> None:
            raise RuntimeError("session closed")

        ctx = ToolContext(config=Config(debug=True), image_config=make_env(), send_log=broken_send)
        await ctx.log("info", "hello")
