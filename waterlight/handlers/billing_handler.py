# -*- coding: utf-8 -*-
"""账单处理器 - billing 命名空间（Waterlight 特有，OpenAI SDK 中没有）"""

from ..types import BillingInfo
from ..clients.base_client import BaseAPIClient

BILLING_PATH = "/v1/billing"


class Billing:
    """billing 命名空间"""

    def __init__(self, client: BaseAPIClient):
        self.client = client

    def get(self) -> BillingInfo:
        """获取当前 API 密钥的计划、用量与余额"""
        return self.client.request("GET", BILLING_PATH)
