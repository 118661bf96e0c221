# -*- coding: utf-8 -*-
"""API 客户端抽象基类 - 定义命名空间处理器依赖的传输接口"""

from abc import ABC, abstractmethod
from typing import Any, ContextManager, Dict, Iterator, Optional


class BaseAPIClient(ABC):
    """
    传输层抽象基类

    命名空间处理器（chat / embeddings / models / billing）和 Stream 只依赖这个接口，
    不关心具体的 HTTP 实现。

    Example:
        >>> class MyClient(BaseAPIClient):
        ...     def request(self, method, path, body=None):
        ...         # 发送请求并返回解析后的 JSON
        ...         return {}
    """

    @abstractmethod
    def request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """
        执行一次逻辑调用（含重试）

        Args:
            method: HTTP 方法（GET 或 POST）
            path: 服务端相对路径，如 "/v1/models"
            body: 可选的 JSON 请求体

        Returns:
            解析后的 JSON 响应

        Raises:
            WaterlightError: 调用失败时抛出其子类
        """
        pass

    @abstractmethod
    def open_stream(self, path: str, body: Dict[str, Any]) -> ContextManager[Iterator[bytes]]:
        """
        建立流式连接

        Args:
            path: 服务端相对路径
            body: JSON 请求体

        Returns:
            产出响应体分块迭代器的上下文管理器，退出时释放连接

        Raises:
            APIError: 超时（408）或网络错误（0），读取分块时同样适用
            WaterlightError: 响应状态码不是 2xx
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """释放底层连接"""
        pass
