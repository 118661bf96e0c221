# -*- coding: utf-8 -*-
"""流处理器 - 惰性建立连接并逐个产出 SSE 事件的 Stream 句柄"""

from typing import Any, Dict, Iterator, Optional

from ..types import ChatCompletionChunk, WaterlightError
from ..clients.base_client import BaseAPIClient
from ..parsers.stream_parser import SSEDecoder


class Stream:
    """
    流式响应句柄

    生命周期分两个阶段：构造时不做任何 I/O；第一次迭代时才发起请求，
    随后逐帧读取并产出解码后的事件。只能遍历一次，close() 之后也不能再遍历。
    正常结束、收到 [DONE]、抛出异常、提前放弃迭代或调用 close() 时，
    底层响应都只会被释放一次。

    Attributes:
        path: 服务端相对路径
        body: 请求体（stream 强制为 True）
        logger: 注入的 logger 实例

    Example:
        >>> stream = client.chat.completions.create(model="mist-1-turbo", messages=messages, stream=True)
        >>> with stream:
        ...     for chunk in stream:
        ...         print(chunk["choices"][0]["delta"].get("content") or "", end="")
    """

    def __init__(self, client: BaseAPIClient, path: str, params: Dict[str, Any], logger=None):
        """
        初始化流句柄（不发起请求）

        Args:
            client: 传输层客户端
            path: 服务端相对路径
            params: 请求参数
            logger: 可选的 logger 实例，默认使用标准 logging
        """
        self.client = client
        self.path = path
        self.body = {**params, "stream": True}
        self._iterator: Optional[Iterator[ChatCompletionChunk]] = None
        self._closed = False

        if logger is not None:
            self.logger = logger
        else:
            import logging
            self.logger = logging.getLogger(__name__)

    def __iter__(self) -> Iterator[ChatCompletionChunk]:
        if self._closed:
            raise WaterlightError("Stream is closed")
        if self._iterator is not None:
            raise WaterlightError("Stream can only be iterated once")
        self._iterator = self._iter_events()
        return self._iterator

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """释放底层响应，可重复调用"""
        self._closed = True
        if self._iterator is not None:
            self._iterator.close()

    def _iter_events(self) -> Iterator[ChatCompletionChunk]:
        """
        建立连接并解析事件

        Yields:
            ChatCompletionChunk: 按服务端顺序产出的事件

        Raises:
            APIError: 连接或读取超时、流超过 timeout_ms（408），网络错误（0），缓冲区溢出（0）
            WaterlightError: 连接返回非 2xx
        """
        decoder = SSEDecoder(logger=self.logger)
        count = 0

        with self.client.open_stream(self.path, self.body) as chunks:
            for chunk in chunks:
                for event in decoder.feed(chunk):
                    count += 1
                    yield event
                if decoder.done:
                    break

        self.logger.debug(f"Stream: {self.path} finished, events={count}, done={decoder.done}")
