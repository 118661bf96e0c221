# -*- coding: utf-8 -*-
"""传输层客户端模块"""

from .base_client import BaseAPIClient
from .dispatcher import Dispatcher

__all__ = ["BaseAPIClient", "Dispatcher"]
