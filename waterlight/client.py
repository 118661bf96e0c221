# -*- coding: utf-8 -*-
"""Waterlight 客户端统一入口 - OpenAI 兼容接口"""

from typing import Optional

import httpx

from .config import TransportConfig, resolve_config
from .clients.dispatcher import Dispatcher
from .handlers.chat_handler import Chat
from .handlers.embedding_handler import Embeddings
from .handlers.models_handler import Models
from .handlers.billing_handler import Billing


class Waterlight:
    """
    Waterlight API 客户端

    解析配置，创建一个 Dispatcher，并组合各个命名空间。

    Attributes:
        config: 解析后的传输配置
        dispatcher: 请求分发器
        chat: chat 命名空间（chat.completions）
        embeddings: embeddings 命名空间
        models: models 命名空间
        billing: billing 命名空间
        logger: 注入的 logger 实例

    Example:
        >>> from waterlight import Waterlight
        >>> import logging
        >>> logging.basicConfig(level=logging.INFO)
        >>>
        >>> client = Waterlight(api_key="wl-...")
        >>>
        >>> # 非流式
        >>> response = client.chat.completions.create(
        ...     model="mist-1-turbo",
        ...     messages=[{"role": "user", "content": "Hello!"}],
        ... )
        >>> print(response["choices"][0]["message"]["content"])
        >>>
        >>> # 流式
        >>> for chunk in client.chat.completions.create(model="mist-1-turbo", messages=messages, stream=True):
        ...     print(chunk["choices"][0]["delta"].get("content") or "", end="")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        max_retries: Optional[int] = None,
        http_client: Optional[httpx.Client] = None,
        logger=None,
    ):
        """
        初始化客户端

        Args:
            api_key: API 密钥，缺省时读取 WATERLIGHT_API_KEY
            base_url: API 基础 URL，缺省时读取 WATERLIGHT_BASE_URL，默认 https://api.waterlight.io
            timeout_ms: 单次尝试超时（毫秒），默认 120000
            max_retries: 最大重试次数，默认 2
            http_client: 可选的 httpx.Client（测试或自定义代理时使用）
            logger: 可选的 logger 实例，默认使用标准 logging

        Raises:
            WaterlightError: 配置无效时
        """
        if logger is not None:
            self.logger = logger
        else:
            import logging
            self.logger = logging.getLogger(__name__)

        self.config: TransportConfig = resolve_config(
            api_key=api_key,
            base_url=base_url,
            timeout_ms=timeout_ms,
            max_retries=max_retries,
        )
        self.dispatcher = Dispatcher(self.config, http_client=http_client, logger=self.logger)

        self.chat = Chat(self.dispatcher, logger=self.logger)
        self.embeddings = Embeddings(self.dispatcher, logger=self.logger)
        self.models = Models(self.dispatcher)
        self.billing = Billing(self.dispatcher)

        self.logger.info(
            f"Waterlight client initialized, base_url={self.config.base_url}, "
            f"timeout_ms={self.config.timeout_ms}, max_retries={self.config.max_retries}"
        )

    @property
    def api_key(self) -> str:
        """API 密钥（建议通过客户端方法使用，而不是直接读取）"""
        return self.config.api_key

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def timeout_ms(self) -> int:
        return self.config.timeout_ms

    @property
    def max_retries(self) -> int:
        return self.config.max_retries

    def close(self) -> None:
        """关闭底层连接"""
        self.dispatcher.close()

    def __enter__(self) -> "Waterlight":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
