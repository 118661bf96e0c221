# -*- coding: utf-8 -*-
"""聊天处理器 - chat.completions 命名空间"""

from typing import Any, Union

from ..types import ChatCompletion
from ..clients.base_client import BaseAPIClient
from .stream_handler import Stream

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


class Completions:
    """
    chat.completions 命名空间

    Attributes:
        client: 传输层客户端
        logger: 注入的 logger 实例

    Example:
        >>> completion = client.chat.completions.create(
        ...     model="mist-1-turbo",
        ...     messages=[{"role": "user", "content": "Hello"}],
        ... )
        >>> print(completion["choices"][0]["message"]["content"])
    """

    def __init__(self, client: BaseAPIClient, logger=None):
        """
        初始化 completions 命名空间

        Args:
            client: 传输层客户端
            logger: 可选的 logger 实例，默认使用标准 logging
        """
        self.client = client

        if logger is not None:
            self.logger = logger
        else:
            import logging
            self.logger = logging.getLogger(__name__)

    def create(self, stream: bool = False, **params: Any) -> Union[ChatCompletion, Stream]:
        """
        创建聊天补全

        Args:
            stream: 是否流式输出
            **params: ChatCompletionCreateParams 中的字段（model、messages、tools 等）

        Returns:
            如果 stream=True，返回尚未建立连接的 Stream
            如果 stream=False，返回 ChatCompletion

        Raises:
            WaterlightError: 非流式调用失败时抛出其子类
        """
        if stream:
            return self.create_stream(**params)

        self.logger.debug(f"Completions: non-streaming, model={params.get('model')}")
        return self.client.request("POST", CHAT_COMPLETIONS_PATH, {**params, "stream": False})

    def create_stream(self, **params: Any) -> Stream:
        """
        创建流式聊天补全

        请求在第一次迭代返回的 Stream 时才会发出。

        Args:
            **params: ChatCompletionCreateParams 中的字段

        Returns:
            Stream，迭代产出 ChatCompletionChunk
        """
        self.logger.debug(f"Completions: streaming, model={params.get('model')}")
        return Stream(self.client, CHAT_COMPLETIONS_PATH, params, logger=self.logger)


class Chat:
    """chat 命名空间，对应 openai.chat"""

    def __init__(self, client: BaseAPIClient, logger=None):
        self.completions = Completions(client, logger=logger)
