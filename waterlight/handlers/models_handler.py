# -*- coding: utf-8 -*-
"""模型处理器 - models 命名空间"""

from ..types import ModelList
from ..clients.base_client import BaseAPIClient

MODELS_PATH = "/v1/models"


class Models:
    """models 命名空间"""

    def __init__(self, client: BaseAPIClient):
        self.client = client

    def list(self) -> ModelList:
        """
        列出可用模型

        Returns:
            ModelList

        Raises:
            WaterlightError: 调用失败时抛出其子类
        """
        return self.client.request("GET", MODELS_PATH)
