# -*- coding: utf-8 -*-
"""waterlight - Waterlight API 的 Python 客户端（OpenAI 兼容接口）"""

__version__ = "0.1.0"
__license__ = "MIT"

# 主入口类
from .client import Waterlight

# 错误类型
from .types import (
    ErrorKind,
    WaterlightError,
    AuthenticationError,
    RateLimitError,
    InsufficientCreditsError,
    APIError,
)

# 公共 API 导出
__all__ = [
    # 主类
    "Waterlight",
    "Stream",
    # 错误类型
    "ErrorKind",
    "WaterlightError",
    "AuthenticationError",
    "RateLimitError",
    "InsufficientCreditsError",
    "APIError",
    # 版本信息
    "__version__",
]

# 内部类型（可选导出，用于类型提示和高级使用）
__all__ += [
    # TypedDict 类型
    "Message",
    "ToolCall",
    "Tool",
    "ChatCompletionCreateParams",
    "ChatCompletion",
    "ChatCompletionChunk",
    "EmbeddingCreateParams",
    "EmbeddingResponse",
    "Model",
    "ModelList",
    "BillingInfo",
    # 配置
    "TransportConfig",
    "resolve_config",
    # 传输与解析
    "BaseAPIClient",
    "Dispatcher",
    "SSEDecoder",
]

from .types import (
    Message,
    ToolCall,
    Tool,
    ChatCompletionCreateParams,
    ChatCompletion,
    ChatCompletionChunk,
    EmbeddingCreateParams,
    EmbeddingResponse,
    Model,
    ModelList,
    BillingInfo,
)

from .config import TransportConfig, resolve_config
from .clients import BaseAPIClient, Dispatcher
from .parsers import SSEDecoder
from .handlers import Stream
