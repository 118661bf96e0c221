# -*- coding: utf-8 -*-
"""类型定义模块 - 提供请求/响应载荷的 TypedDict 类型与错误类型"""

from enum import Enum
from typing import TypedDict, Dict, Any, List, Optional, Union


# ==================== 消息类型 ====================

class FunctionCall(TypedDict):
    """函数调用"""
    name: str
    arguments: str


class ToolCall(TypedDict):
    """工具调用"""
    id: str
    type: str  # "function"
    function: FunctionCall


class Message(TypedDict, total=False):
    """聊天消息类型"""
    role: str  # "system" | "user" | "assistant" | "tool"
    content: Optional[str]
    name: str
    tool_call_id: str
    tool_calls: List[ToolCall]


# ==================== 工具类型 ====================

class ToolFunction(TypedDict, total=False):
    """工具函数定义"""
    name: str
    description: str
    parameters: Dict[str, Any]


class Tool(TypedDict):
    """工具定义"""
    type: str  # "function"
    function: ToolFunction


# ==================== Chat Completion 类型 ====================

class ChatCompletionCreateParams(TypedDict, total=False):
    """chat.completions.create 参数"""
    model: str
    messages: List[Message]
    stream: bool
    tools: List[Tool]
    tool_choice: Union[str, Dict[str, Any]]
    max_tokens: int
    temperature: float
    top_p: float
    stop: Union[str, List[str]]
    presence_penalty: float
    frequency_penalty: float
    user: str


class Usage(TypedDict):
    """Token 用量"""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class Choice(TypedDict):
    """非流式响应选项"""
    index: int
    message: Message
    finish_reason: Optional[str]


class ChatCompletion(TypedDict):
    """非流式聊天响应"""
    id: str
    object: str  # "chat.completion"
    created: int
    model: str
    choices: List[Choice]
    usage: Usage


class Delta(TypedDict, total=False):
    """流式增量"""
    role: str
    content: Optional[str]
    tool_calls: List[ToolCall]


class StreamChoice(TypedDict):
    """流式响应选项"""
    index: int
    delta: Delta
    finish_reason: Optional[str]


class ChatCompletionChunk(TypedDict):
    """流式块"""
    id: str
    object: str  # "chat.completion.chunk"
    created: int
    model: str
    choices: List[StreamChoice]


# ==================== Embedding 类型 ====================

class EmbeddingCreateParams(TypedDict, total=False):
    """embeddings.create 参数"""
    input: Union[str, List[str]]
    model: str
    encoding_format: str


class Embedding(TypedDict):
    """单条 embedding"""
    object: str  # "embedding"
    index: int
    embedding: List[float]


class EmbeddingResponse(TypedDict):
    """Embedding 响应"""
    object: str  # "list"
    data: List[Embedding]
    model: str
    usage: Usage


# ==================== 模型与账单类型 ====================

class Model(TypedDict):
    """模型信息"""
    id: str
    object: str  # "model"
    created: int
    owned_by: str


class ModelList(TypedDict):
    """模型列表"""
    object: str  # "list"
    data: List[Model]


class BillingInfo(TypedDict, total=False):
    """
    账单信息（Waterlight 特有接口，OpenAI SDK 中没有）

    plan / billing_mode / spent_usd / total_requests / total_tokens /
    rpm_limit / tpm_limit 总是存在，其余字段取决于计费模式。
    """
    plan: str
    billing_mode: str
    spent_usd: float
    total_requests: int
    total_tokens: int
    rpm_limit: int
    tpm_limit: int
    balance_usd: float
    min_deposit_usd: float
    budget_usd: float
    remaining_usd: float
    monthly_usd: float
    daily_limit: int
    daily_used: int
    allowed_models: List[str]


# ==================== 错误类型 ====================

class ErrorKind(str, Enum):
    """
    错误种类标签

    每个错误实例都带有 kind，调用方可以直接对 kind 做穷举匹配，
    而不必依赖 isinstance 链。

    Example:
        >>> try:
        ...     client.models.list()
        ... except WaterlightError as e:
        ...     if e.kind is ErrorKind.RATE_LIMIT:
        ...         time.sleep(e.retry_after or 1)
    """
    LIBRARY = "library"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    API = "api"


class WaterlightError(Exception):
    """
    Waterlight 基础错误类

    直接抛出时表示配置错误（缺少 API 密钥、base_url 非法）或流式连接返回非 2xx。

    Attributes:
        message: 错误信息
        status: HTTP 状态码（配置错误时为 None）
        request_id: 服务端返回的 x-request-id
        kind: 错误种类
    """

    kind: ErrorKind = ErrorKind.LIBRARY

    def __init__(self, message: str, status: Optional[int] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.request_id = request_id


class AuthenticationError(WaterlightError):
    """API 密钥被拒绝（401），不会重试"""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message, 401, request_id)


class RateLimitError(WaterlightError):
    """限流（429），重试耗尽或关闭重试后抛出"""

    kind = ErrorKind.RATE_LIMIT

    def __init__(self, message: str, retry_after: Optional[float] = None, request_id: Optional[str] = None):
        super().__init__(message, 429, request_id)
        self.retry_after = retry_after


class InsufficientCreditsError(WaterlightError):
    """余额不足（402），不会重试"""

    kind = ErrorKind.INSUFFICIENT_CREDITS

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message, 402, request_id)


class APIError(WaterlightError):
    """
    通用 API 错误

    status 为服务端状态码；本地超时时为 408，网络层失败时为 0。
    """

    kind = ErrorKind.API
