# -*- coding: utf-8 -*-
"""解析器模块"""

from .stream_parser import SSEDecoder

__all__ = ["SSEDecoder"]
