"""本地调试命令测试。"""

from __future__ import annotations

import os
from pathlib import Path
from unittest import mock

import pytest

from gemini_image_mcp.cli import build_parser, main, run

from conftest import PNG_B64, PNG_BYTES, chat_response, images_response


def cli_env(base_url: str, **values: str) -> dict[str, str]:
    env = {
        k: v for k, v in os.environ.items()
        if not k.startswith(("GIM_", "IMAGE_", "OPENAI_", "GEMINI_")) and k != "DEBUG"
    }
    env.update(IMAGE_BASE_URL=base_url, IMAGE_TIMEOUT_MS="10000", **values)
    return env


class TestParser:
    """测试参数解析。"""

    def test_defaults(self):
        args = build_parser().parse_args(["a", "red", "circle"])
        assert args.prompt == ["a", "red", "circle"]
        assert args.n is None
        assert args.size is None
        assert args.output is None
        assert args.out_dir is None
        assert args.mode is None

    def test_options(self):
        args = build_parser().parse_args(
            ["cat", "-n", "2", "--size", "512", "--output", "image", "--out-dir", "out", "--mode", "auto"]
        )
        assert args.n == "2"
        assert args.size == "512"
        assert args.output == "image"
        assert args.out_dir == "out"
        assert args.mode == "auto"

    def test_invalid_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["cat", "--mode", "stream"])


class TestRun:
    """测试单次生成。"""

    @pytest.mark.asyncio
    async def test_saves_files(self, upstream, out_dir: Path):
        upstream.on_chat(chat_response(f"data:image/png;base64,{PNG_B64}"))
        async with upstream:
            args = build_parser().parse_args(["a", "red", "circle", "-n", "2", "--out-dir", str(out_dir)])
            with mock.patch.dict(os.environ, cli_env(upstream.base_url), clear=True):
                response = await run(args)

        assert not response.is_error
        files = sorted(out_dir.iterdir())
        assert len(files) == 2
        assert files[0].read_bytes() == PNG_BYTES
        assert upstream.bodies("/v1/chat/completions")[0]["messages"][0]["content"] == "a red circle"

    @pytest.mark.asyncio
    async def test_mode_override(self, upstream, out_dir: Path):
        upstream.on_images(images_response({"b64_json": PNG_B64}))
        async with upstream:
            args = build_parser().parse_args(["cat", "--mode", "images", "--output", "image"])
            with mock.patch.dict(os.environ, cli_env(upstream.base_url, IMAGE_MODE="chat"), clear=True):
                response = await run(args)

        assert not response.is_error
        assert upstream.paths() == ["/v1/images/generations"]
        assert [img.data for img in response.images] == [PNG_B64]

    @pytest.mark.asyncio
    async def test_error_response(self, upstream):
        upstream.on_chat({"error": "boom"}, status=500)
        async with upstream:
            args = build_parser().parse_args(["cat"])
            with mock.patch.dict(os.environ, cli_env(upstream.base_url), clear=True):
                response = await run(args)

        assert response.is_error
        assert response.text.startswith("Generation failed:")


class TestMain:
    """测试退出码与输出。"""

    def test_connection_failure_exit_code(self, capsys, out_dir: Path):
        with mock.patch.dict(os.environ, cli_env("http://127.0.0.1:1"), clear=True), \
                mock.patch("gemini_image_mcp.cli.configure_logging") as configure_logging:
            code = main(["cat", "--out-dir", str(out_dir)])

        configure_logging.assert_called_once()

        assert code == 1
        captured = capsys.readouterr()
        assert "Generation failed:" in captured.err
        assert "IMAGE_BASE_URL" in captured.err
        assert captured.out == ""
