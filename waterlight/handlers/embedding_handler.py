# -*- coding: utf-8 -*-
"""Embedding 处理器 - embeddings 命名空间"""

from typing import Any

from ..types import EmbeddingResponse
from ..clients.base_client import BaseAPIClient

EMBEDDINGS_PATH = "/v1/embeddings"


class Embeddings:
    """
    embeddings 命名空间

    Example:
        >>> response = client.embeddings.create(input=["text1", "text2"], model="mist-embed-1")
        >>> vecs = [item["embedding"] for item in response["data"]]
    """

    def __init__(self, client: BaseAPIClient, logger=None):
        """
        初始化 embeddings 命名空间

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

    def create(self, **params: Any) -> EmbeddingResponse:
        """
        创建 embedding

        Args:
            **params: EmbeddingCreateParams 中的字段（input、model、encoding_format）

        Returns:
            EmbeddingResponse，data 顺序与输入一致

        Raises:
            WaterlightError: 调用失败时抛出其子类
        """
        inputs = params.get("input")
        count = len(inputs) if isinstance(inputs, list) else 1
        self.logger.debug(f"Embeddings: inputs={count}, model={params.get('model')}")
        return self.client.request("POST", EMBEDDINGS_PATH, params)
