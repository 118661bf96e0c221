# -*- coding: utf-8 -*-
"""处理器模块"""

from .chat_handler import Chat, Completions
from .stream_handler import Stream
from .embedding_handler import Embeddings
from .models_handler import Models
from .billing_handler import Billing

__all__ = ["Chat", "Completions", "Stream", "Embeddings", "Models", "Billing"]
