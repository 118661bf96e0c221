# -*- coding: utf-8 -*-
"""SSE 解析器 - 将字节流增量解析为 JSON 事件"""

import codecs
import json
from typing import Any, List

from ..types import APIError

# 10 MiB：服务端一直不发送帧分隔符时的缓冲上限
MAX_BUFFER_SIZE = 10 * 1024 * 1024
FRAME_DELIMITER = "\n\n"
DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class SSEDecoder:
    """
    增量 SSE 解码器，一个实例只服务一个流

    处理：
    - 跨 chunk 拆分的 UTF-8 多字节字符
    - 以空行（\\n\\n）分隔的帧
    - data: 行的 JSON 解码，格式错误的行直接跳过
    - [DONE] 终止标记，之后的数据全部丢弃

    Attributes:
        buffer: 尚未构成完整帧的文本
        done: 是否已收到 [DONE]
        max_buffer_size: 缓冲上限（字符数）
        logger: 注入的 logger 实例

    Example:
        >>> decoder = SSEDecoder()
        >>> decoder.feed(b'data: {"a":')
        []
        >>> decoder.feed(b' 1}\\n\\ndata: [DONE]\\n\\n')
        [{'a': 1}]
        >>> decoder.done
        True
    """

    def __init__(self, max_buffer_size: int = MAX_BUFFER_SIZE, logger=None):
        """
        初始化解码器

        Args:
            max_buffer_size: 缓冲上限，超过即视为致命错误
            logger: 可选的 logger 实例，默认使用标准 logging
        """
        if logger is not None:
            self.logger = logger
        else:
            import logging
            self.logger = logging.getLogger(__name__)

        self.max_buffer_size = max_buffer_size
        self.buffer: str = ""
        self.done: bool = False
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, chunk: bytes) -> List[Any]:
        """
        处理新读取的字节块，返回本次解析出的完整事件

        Args:
            chunk: 从流中读取的原始字节

        Returns:
            按服务端顺序排列的 JSON 事件列表；收到 [DONE] 后恒为空列表

        Raises:
            APIError: 缓冲区超过上限（status=0）
        """
        if self.done:
            return []

        self.buffer += self._decoder.decode(chunk)
        if len(self.buffer) > self.max_buffer_size:
            raise APIError("SSE buffer overflow: server sent too much data without delimiters", 0)

        events: List[Any] = []
        while not self.done:
            boundary = self.buffer.find(FRAME_DELIMITER)
            if boundary == -1:
                break
            frame = self.buffer[:boundary]
            self.buffer = self.buffer[boundary + len(FRAME_DELIMITER):]
            events.extend(self._process_frame(frame))

        return events

    def _process_frame(self, frame: str) -> List[Any]:
        """
        解析单个帧中的 data: 行

        Args:
            frame: 不含分隔符的帧文本

        Returns:
            该帧中成功解码的事件
        """
        events: List[Any] = []
        for line in frame.split("\n"):
            if not line.startswith(DATA_PREFIX):
                continue

            data = line[len(DATA_PREFIX):].strip()
            if data == DONE_SENTINEL:
                self.done = True
                self.buffer = ""
                break

            try:
                events.append(json.loads(data))
            except ValueError:
                # 单行格式错误不终止整个流
                self.logger.debug(f"SSEDecoder: skipping malformed event: {data[:80]}")

        return events
