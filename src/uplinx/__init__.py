"""
Uplinx — Python SDK for the Uplinx LLM marketplace API.

    from uplinx import UplinxClient

    client = UplinxClient(api_key="upx_your-api-key")
    engines = await client.list_engines()
"""

import logging

from uplinx.client import UplinxClient
from uplinx.core.config import ClientConfig
from uplinx.errors import ErrorCode, UplinxError
from uplinx.models import (
    ApiError,
    ChatReply,
    ChatResponse,
    ChatsResponse,
    ChatSession,
    Engine,
    EngineResponse,
    EnginesResponse,
    LatencyClass,
    Message,
    MessageRole,
    MessagesResponse,
    Provider,
    SendMessageResponse,
    TokenUsage,
    UsageRecord,
    UsageSummary,
)
from uplinx.streaming import StreamCallbacks

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # Client
    "UplinxClient",
    "ClientConfig",
    "StreamCallbacks",
    # Errors
    "UplinxError",
    "ErrorCode",
    # Models
    "Engine",
    "Provider",
    "LatencyClass",
    "Message",
    "MessageRole",
    "ChatSession",
    "TokenUsage",
    "UsageRecord",
    "UsageSummary",
    "SendMessageResponse",
    "ChatReply",
    "ApiError",
    # Envelopes
    "EnginesResponse",
    "EngineResponse",
    "ChatsResponse",
    "ChatResponse",
    "MessagesResponse",
]
