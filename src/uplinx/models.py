"""
Uplinx Models — the records the marketplace API sends back.

Wire names are camelCase, attributes are snake_case. Every model validates in
strict mode: a string where a number belongs, an unknown enum value or a
missing field is rejected rather than coerced. Extra fields the server adds
are ignored.

Two send-message response shapes exist across API versions and are kept
apart on purpose:
  SendMessageResponse  {message, assistantMessage, usage}
  ChatReply            {chatSessionId, engine, message, usage?}
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Provider = Literal[
    "openai",
    "anthropic",
    "google",
    "openrouter",
    "xai",
    "meta",
    "mistral",
    "deepseek",
    "qwen",
]
LatencyClass = Literal["fast", "medium", "slow"]
MessageRole = Literal["user", "assistant", "system"]
EngineSort = Literal["name", "price", "latency", "context"]


class UplinxModel(BaseModel):
    """Base for all API records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        frozen=True,
        protected_namespaces=(),
    )


# ─── Engines ─────────────────────────────────────────────────────


class Engine(UplinxModel):
    """A selectable backing model with pricing and latency metadata."""

    id: str
    slug: str
    name: str
    provider: Provider
    model_id: str
    description: str
    tags: list[str]
    category: str
    context_window: int
    latency_class: LatencyClass
    pricing_input_per_1m: float = Field(alias="pricingInputPer1M")
    pricing_output_per_1m: float = Field(alias="pricingOutputPer1M")
    is_active: bool
    created_at: str | None = None
    updated_at: str | None = None


# ─── Chats ───────────────────────────────────────────────────────


class Message(UplinxModel):
    """One turn of a chat session. Immutable once created."""

    id: str
    chat_session_id: str
    role: MessageRole
    content: str
    engine_id: str | None = None
    created_at: str


class ChatSession(UplinxModel):
    id: str
    user_id: str
    title: str
    engine_id: str | None = None
    message_count: int | None = None
    last_message_at: str | None = None
    created_at: str
    updated_at: str
    engine: Engine | None = None
    messages: list[Message] | None = None


# ─── Usage ───────────────────────────────────────────────────────


class TokenUsage(UplinxModel):
    """Tokens and cost billed for a single exchange."""

    input_tokens: int
    output_tokens: int
    cost_usd: float


class UsageRecord(UplinxModel):
    id: str
    user_id: str
    chat_session_id: str | None = None
    engine_id: str
    input_tokens: int
    output_tokens: int
    cost_usd: float
    created_at: str


class UsageSummary(UplinxModel):
    """Aggregated usage over the requested window."""

    total_input_tokens: int
    total_output_tokens: int
    total_cost_usd: float
    records: list[UsageRecord]


# ─── Send-message responses ──────────────────────────────────────


class SendMessageResponse(UplinxModel):
    """User message, assistant reply and billed usage."""

    message: Message
    assistant_message: Message
    usage: TokenUsage


class ChatReply(UplinxModel):
    """The /v1 reply shape: session id, engine slug and the reply text."""

    chat_session_id: str
    engine: str
    message: str
    usage: TokenUsage | None = None


# ─── Envelopes ───────────────────────────────────────────────────


class EnginesResponse(UplinxModel):
    engines: list[Engine]


class EngineResponse(UplinxModel):
    engine: Engine


class ChatsResponse(UplinxModel):
    chats: list[ChatSession]


class ChatResponse(UplinxModel):
    chat: ChatSession


class MessagesResponse(UplinxModel):
    messages: list[Message]


# ─── Errors ──────────────────────────────────────────────────────


class ApiError(UplinxModel):
    """Flat error body: ``{"error": "...", "code": "...", "details": ...}``."""

    error: str
    code: str | None = None
    details: Any = None
