# -*- coding: utf-8 -*-
"""配置模块 - 从构造参数与环境变量解析传输配置"""

from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import WaterlightError

DEFAULT_BASE_URL = "https://api.waterlight.io"
DEFAULT_TIMEOUT_MS = 120_000
DEFAULT_MAX_RETRIES = 2

# 仅本地开发允许 HTTP
LOCAL_HTTP_PREFIXES = ("http://localhost", "http://127.0.0.1")


class WaterlightSettings(BaseSettings):
    """环境变量配置：WATERLIGHT_API_KEY / WATERLIGHT_BASE_URL"""

    model_config = SettingsConfigDict(env_prefix="WATERLIGHT_", extra="ignore")

    api_key: Optional[str] = None
    base_url: Optional[str] = None


@dataclass(frozen=True)
class TransportConfig:
    """
    单次调用使用的传输配置（不可变）

    Attributes:
        api_key: Bearer 凭证
        base_url: 已校验、去掉末尾斜杠的 API 基础 URL
        timeout_ms: 单次尝试的超时时间（毫秒）
        max_retries: 可重试状态码的最大重试次数
    """
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


def resolve_config(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout_ms: Optional[int] = None,
    max_retries: Optional[int] = None,
) -> TransportConfig:
    """
    解析客户端配置

    优先级：显式参数 > 环境变量 > 默认值。所有校验都在发起任何网络请求之前完成。

    Args:
        api_key: API 密钥，缺省时读取 WATERLIGHT_API_KEY
        base_url: API 基础 URL，缺省时读取 WATERLIGHT_BASE_URL
        timeout_ms: 超时时间（毫秒），默认 120000
        max_retries: 最大重试次数，默认 2

    Returns:
        TransportConfig 实例

    Raises:
        WaterlightError: 缺少 API 密钥、base_url 不是 HTTPS（localhost 除外）、
            timeout_ms 不是正数或 max_retries 为负数时

    Examples:
        >>> resolve_config(api_key="wl-test", base_url="https://example.com///").base_url
        'https://example.com'
    """
    settings = WaterlightSettings()

    key = api_key if api_key is not None else settings.api_key
    if not key:
        raise WaterlightError(
            "API key required. Pass api_key or set WATERLIGHT_API_KEY env var. "
            "Get your key at https://waterlight.io"
        )

    resolved_url = (base_url or settings.base_url or DEFAULT_BASE_URL).rstrip("/")
    if not resolved_url.startswith("https://") and not resolved_url.startswith(LOCAL_HTTP_PREFIXES):
        raise WaterlightError(
            f"base_url must use HTTPS (got: {resolved_url[:40]}...). "
            "HTTP is only allowed for localhost development."
        )

    timeout = DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms
    if timeout <= 0:
        raise WaterlightError(f"timeout_ms must be a positive number of milliseconds (got: {timeout})")

    retries = DEFAULT_MAX_RETRIES if max_retries is None else max_retries
    if retries < 0:
        raise WaterlightError(f"max_retries must be non-negative (got: {retries})")

    return TransportConfig(api_key=key, base_url=resolved_url, timeout_ms=timeout, max_retries=retries)
