"""
Shared fixtures for SDK tests.

Every client talks to an httpx.MockTransport; no real server is needed.
Payload factories return wire-format (camelCase) dicts.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from uplinx.client import UplinxClient

API_KEY = "upx_test-key"
BASE_URL = "http://api.uplinx.test"


# ── Payload factories ──────────────────────────────────────


def engine_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "id": "eng_1",
        "slug": "gpt-4o",
        "name": "GPT-4o",
        "provider": "openai",
        "modelId": "gpt-4o-2024-08-06",
        "description": "Flagship multimodal model",
        "tags": ["chat", "vision"],
        "category": "General",
        "contextWindow": 128000,
        "latencyClass": "fast",
        "pricingInputPer1M": 2.5,
        "pricingOutputPer1M": 10,
        "isActive": True,
        "createdAt": "2024-05-13T00:00:00.000Z",
        "updatedAt": "2024-08-06T00:00:00.000Z",
    }
    payload.update(overrides)
    return payload


def message_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "id": "msg_1",
        "chatSessionId": "chat_1",
        "role": "user",
        "content": "Hello!",
        "createdAt": "2024-09-01T10:00:00.000Z",
    }
    payload.update(overrides)
    return payload


def chat_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "id": "chat_1",
        "userId": "user_1",
        "engineId": "eng_1",
        "title": "My conversation",
        "messageCount": 2,
        "createdAt": "2024-09-01T10:00:00.000Z",
        "updatedAt": "2024-09-01T10:05:00.000Z",
    }
    payload.update(overrides)
    return payload


def usage_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "totalInputTokens": 1200,
        "totalOutputTokens": 3400,
        "totalCostUsd": 0.037,
        "records": [
            {
                "id": "use_1",
                "userId": "user_1",
                "chatSessionId": "chat_1",
                "engineId": "eng_1",
                "inputTokens": 1200,
                "outputTokens": 3400,
                "costUsd": 0.037,
                "createdAt": "2024-09-01T10:05:00.000Z",
            }
        ],
    }
    payload.update(overrides)
    return payload


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content) if request.content else None


# ── Clients ────────────────────────────────────────────────


Handler = Callable[[httpx.Request], Any]


@pytest.fixture
def make_client() -> Callable[..., UplinxClient]:
    """Build a client whose transport is the given request handler."""

    def _make(
        handler: Handler,
        base_url: str = BASE_URL,
        timeout_ms: int = 60000,
    ) -> UplinxClient:
        return UplinxClient(
            api_key=API_KEY,
            base_url=base_url,
            timeout_ms=timeout_ms,
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def json_handler(requests_seen: list[httpx.Request]):
    """Handler factory: record each request, answer with a fixed JSON body."""

    def _factory(body: Any, status_code: int = 200) -> Handler:
        def handler(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            return httpx.Response(status_code, json=body)

        return handler

    return _factory
