# -*- coding: utf-8 -*-
"""请求分发器 - 基于 httpx 的带重试请求与错误分类"""

import json
import math
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import httpx

from .. import __version__
from .base_client import BaseAPIClient
from ..config import TransportConfig
from ..types import (
    WaterlightError,
    AuthenticationError,
    RateLimitError,
    InsufficientCreditsError,
    APIError,
)

USER_AGENT = f"waterlight-python/{__version__}"
RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
BASE_BACKOFF_SECONDS = 0.5
DEFAULT_ERROR_MESSAGE = "Request failed"


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    解析 retry-after 头（秒，整数或小数）

    Args:
        value: 头部原始值

    Returns:
        秒数；头部缺失或无法解析为有限数值时返回 None
    """
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    return seconds


def backoff_delay(attempt: int, retry_after: Optional[float] = None) -> float:
    """
    计算重试等待时间（秒）

    服务端给出的 retry-after 优先，否则使用指数退避 0.5s * 2^attempt。

    Examples:
        >>> backoff_delay(0), backoff_delay(1), backoff_delay(1, retry_after=2.0)
        (0.5, 1.0, 2.0)
    """
    if retry_after is not None:
        return max(0.0, retry_after)
    return BASE_BACKOFF_SECONDS * 2 ** attempt


def transport_error(exc: httpx.RequestError, timeout_message: str = "Request timed out") -> APIError:
    """
    将 httpx 传输层异常转换为 APIError

    Args:
        exc: httpx 抛出的请求异常
        timeout_message: 超时时使用的错误信息

    Returns:
        超时返回 status=408 的 APIError，其他网络错误返回 status=0 的 APIError
    """
    if isinstance(exc, httpx.TimeoutException):
        return APIError(timeout_message, 408)
    return APIError(f"Network error: {exc}", 0)


def error_from_response(response: httpx.Response, content: bytes) -> WaterlightError:
    """
    根据非 2xx 响应构造对应的错误

    Args:
        response: httpx 响应（读取状态码和头部）
        content: 已读取的响应体

    Returns:
        401 -> AuthenticationError, 429 -> RateLimitError,
        402 -> InsufficientCreditsError, 其他 -> APIError
    """
    try:
        data = json.loads(content)
    except ValueError:
        data = {}

    error = data.get("error") if isinstance(data, dict) else None
    message = error.get("message") if isinstance(error, dict) else error
    message = DEFAULT_ERROR_MESSAGE if message is None else str(message)

    request_id = response.headers.get("x-request-id")
    status = response.status_code

    if status == 401:
        return AuthenticationError(message, request_id)
    if status == 429:
        retry_after = parse_retry_after(response.headers.get("retry-after"))
        return RateLimitError(message, retry_after, request_id)
    if status == 402:
        return InsufficientCreditsError(message, request_id)
    return APIError(message, status, request_id)


class Dispatcher(BaseAPIClient):
    """
    请求分发器

    每次逻辑调用按 "尝试 -> 分类失败 -> 等待 -> 重试" 循环执行，
    重试只针对 429/500/502/503/504，且不超过 max_retries 次。
    尝试之间严格串行，每次尝试单独计时：从发起连接到读完响应体
    （流式调用则到流结束）不得超过 timeout_ms，httpx 的超时只约束单次读写。

    Attributes:
        config: 传输配置
        client: httpx.Client 实例
        logger: 注入的 logger 实例

    Example:
        >>> dispatcher = Dispatcher(resolve_config(api_key="wl-..."))
        >>> models = dispatcher.request("GET", "/v1/models")
        >>> with dispatcher.open_stream("/v1/chat/completions", body) as chunks:
        ...     for chunk in chunks:
        ...         ...
    """

    def __init__(self, config: TransportConfig, http_client: Optional[httpx.Client] = None, logger=None):
        """
        初始化分发器

        Args:
            config: 传输配置
            http_client: 可选的 httpx.Client，传入时由调用方负责关闭
            logger: 可选的 logger 实例，默认使用标准 logging
        """
        self.config = config
        self._owns_client = http_client is None
        self.client = http_client if http_client is not None else httpx.Client()

        if logger is not None:
            self.logger = logger
        else:
            import logging
            self.logger = logging.getLogger(__name__)

    def _build_headers(self, has_body: bool, stream: bool = False) -> Dict[str, str]:
        """构造请求头，Content-Type 仅在有请求体时发送"""
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "User-Agent": USER_AGENT,
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        if stream:
            headers["Accept"] = "text/event-stream"
        return headers

    def _iter_body(
        self,
        response: httpx.Response,
        deadline: float,
        label: str,
        timeout_message: str = "Request timed out",
    ) -> Iterator[bytes]:
        """
        在截止时间内逐块读取响应体

        Args:
            response: 以 stream=True 发送得到的响应
            deadline: time.monotonic() 时钟上的截止时间
            label: 日志中使用的请求描述
            timeout_message: 超时时使用的错误信息

        Yields:
            bytes: 解码（gzip 等）后的响应体分块

        Raises:
            APIError: 超过截止时间或读取超时（408）、网络错误（0）
        """
        chunks = response.iter_bytes()
        while True:
            try:
                chunk = next(chunks, None)
            except httpx.RequestError as e:
                self.logger.error(f"Dispatcher: {label} read failure: {str(e)}")
                raise transport_error(e, timeout_message) from e
            if time.monotonic() > deadline:
                self.logger.error(f"Dispatcher: {label} exceeded {self.config.timeout_ms}ms")
                raise APIError(timeout_message, 408)
            if chunk is None:
                return
            yield chunk

    def request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """
        执行一次逻辑调用

        Args:
            method: HTTP 方法（GET 或 POST）
            path: 服务端相对路径
            body: 可选的 JSON 请求体

        Returns:
            解析后的 JSON 响应

        Raises:
            AuthenticationError: 401
            RateLimitError: 429 且重试已耗尽
            InsufficientCreditsError: 402
            APIError: 其他非 2xx、超时（408）或网络错误（0）
        """
        url = f"{self.config.base_url}{path}"
        headers = self._build_headers(has_body=body is not None)
        content = json.dumps(body) if body is not None else None

        attempt = 0
        while True:
            self.logger.debug(f"Dispatcher: {method} {path}, attempt={attempt}")

            request = self.client.build_request(
                method,
                url,
                headers=headers,
                content=content,
                timeout=self.config.timeout_seconds,
            )
            deadline = time.monotonic() + self.config.timeout_seconds
            try:
                response = self.client.send(request, stream=True)
            except httpx.RequestError as e:
                self.logger.error(f"Dispatcher: {method} {path} transport failure: {str(e)}")
                raise transport_error(e) from e

            try:
                data = b"".join(self._iter_body(response, deadline, f"{method} {path}"))
            finally:
                response.close()

            if response.is_success:
                try:
                    return json.loads(data)
                except ValueError as e:
                    raise APIError(f"Network error: {str(e)}", 0) from e

            status = response.status_code
            if status in RETRYABLE_STATUS and attempt < self.config.max_retries:
                delay = backoff_delay(attempt, parse_retry_after(response.headers.get("retry-after")))
                self.logger.warning(
                    f"Dispatcher: {method} {path} returned {status}, "
                    f"retrying in {delay:.2f}s ({attempt + 1}/{self.config.max_retries})"
                )
                time.sleep(delay)
                attempt += 1
                continue

            error = error_from_response(response, data)
            self.logger.error(f"Dispatcher: {method} {path} failed with {status}: {error.message}")
            raise error

    @contextmanager
    def open_stream(self, path: str, body: Dict[str, Any]) -> Iterator[Iterator[bytes]]:
        """
        建立流式连接（不重试）

        非 2xx 响应只抛出通用的 WaterlightError，不做 401/402/429 分类。
        计时从发起连接开始，覆盖整个流，而不只是单次读取。

        Args:
            path: 服务端相对路径
            body: JSON 请求体

        Yields:
            响应体分块的迭代器，退出上下文时关闭响应

        Raises:
            APIError: 连接或读取超时、流超过 timeout_ms（408），网络错误（0）
            WaterlightError: 响应状态码不是 2xx
        """
        url = f"{self.config.base_url}{path}"
        request = self.client.build_request(
            "POST",
            url,
            headers=self._build_headers(has_body=True, stream=True),
            content=json.dumps(body),
            timeout=self.config.timeout_seconds,
        )

        self.logger.debug(f"Dispatcher: opening stream POST {path}")
        deadline = time.monotonic() + self.config.timeout_seconds
        try:
            response = self.client.send(request, stream=True)
        except httpx.RequestError as e:
            self.logger.error(f"Dispatcher: stream POST {path} transport failure: {str(e)}")
            raise transport_error(e, "Stream request timed out") from e

        try:
            if not response.is_success:
                try:
                    response.read()
                    detail = response.text
                except httpx.HTTPError:
                    detail = ""
                self.logger.error(f"Dispatcher: stream POST {path} failed with {response.status_code}")
                raise WaterlightError(f"Streaming error: {response.status_code} {detail}", response.status_code)
            yield self._iter_body(response, deadline, f"stream POST {path}", "Stream request timed out")
        finally:
            response.close()

    def close(self) -> None:
        """关闭自行创建的 httpx.Client"""
        if self._owns_client:
            self.client.close()
