"""Image 模块异常类。

gemini-image-mcp shared/image v0.1.0
"""

from __future__ import annotations

__all__ = [
    "ImageError",
    "InvalidArgumentError",
    "NetworkError",
    "UpstreamTimeoutError",
    "UpstreamError",
    "ImageFetchError",
    "DecodeError",
    "NoImagesError",
]


class ImageError(Exception):
    """Image 模块基础异常。"""
    pass


class InvalidArgumentError(ImageError):
    """调用参数错误（如 prompt 为空），不重试。"""
    pass


class NetworkError(ImageError):
    """网络层错误（连接失败、DNS 失败等）。

    Attributes:
        cause: 原始异常
        api_url: 请求的 URL
    """

    def __init__(self, message: str, cause: BaseException | None = None, api_url: str = "") -> None:
        self.cause = cause
        self.api_url = api_url
        super().__init__(message)


class UpstreamTimeoutError(NetworkError):
    """请求超时。

    Attributes:
        timeout_ms: 超时时间（毫秒）
    """

    def __init__(self, timeout_ms: int, api_url: str = "", cause: BaseException | None = None) -> None:
        self.timeout_ms = timeout_ms
        seconds = round(timeout_ms / 1000)
        super().__init__(
            f"Request timed out after {seconds}s; check the network or raise IMAGE_TIMEOUT_MS",
            cause=cause,
            api_url=api_url,
        )


class UpstreamError(ImageError):
    """上游返回非 2xx 响应。

    Attributes:
        status_code: HTTP 状态码
        body: 响应正文
        api_url: 请求的 API 完整路径
    """

    def __init__(
        self,
        status_code: int,
        body: str,
        api_url: str = "",
        message: str = "Image generation failed",
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.api_url = api_url
        hint = " (an API key appears to be required, set IMAGE_API_KEY)" if status_code == 401 else ""
        super().__init__(f"{message}: HTTP {status_code}{hint} {body}".rstrip())


class ImageFetchError(UpstreamError):
    """下载上游返回的图片 URL 失败（非 2xx）。

    与接口本身的非 2xx 区分：状态码来自图片地址而不是生成接口，
    auto 模式不会因此回退到 chat。
    """

    def __init__(self, status_code: int, body: str, api_url: str = "") -> None:
        super().__init__(status_code, body, api_url, message="Failed to fetch image")


class DecodeError(ImageError):
    """图片数据存在但无法解码（或解码后为空）。"""
    pass


class NoImagesError(ImageError):
    """上游调用成功但没有返回可用的图片数据。"""
    pass
