"""
UplinxClient — async client for the Uplinx LLM marketplace API.

Usage:
    client = UplinxClient(api_key="upx_your-api-key")

    engines = await client.list_engines(q="gpt")
    chat = await client.create_chat(engine_id="gpt-4o", title="Quantum")

    reply = await client.send_message(
        "Explain quantum computing",
        chat_session_id=chat.id,
        response_model=SendMessageResponse,
    )

    await client.send_message_stream(
        "Tell me a story",
        chat_session_id=chat.id,
        callbacks=StreamCallbacks(on_token=lambda t: print(t, end="")),
    )

Every call is a single attempt over its own httpx.AsyncClient: no retries, no
connection state kept between calls. Non-streaming calls are bounded by the
configured timeout; streaming calls run until the server finishes.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from datetime import date
from typing import Any, TypeVar, overload
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from uplinx.core.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_MS, ClientConfig
from uplinx.errors import ErrorCode, UplinxError
from uplinx.models import (
    ChatResponse,
    ChatSession,
    ChatsResponse,
    Engine,
    EngineResponse,
    EngineSort,
    EnginesResponse,
    Message,
    MessagesResponse,
    UsageSummary,
)
from uplinx.streaming import StreamCallbacks, invoke, read_token_stream

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

CHAT_PATH = "/v1/chat"


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):  # datetime included
        return value.isoformat()
    return str(value)


def build_query(params: Mapping[str, Any] | None) -> dict[str, str]:
    """Stringify query parameters, dropping the ones that are None."""
    if not params:
        return {}
    return {
        key: _query_value(value) for key, value in params.items() if value is not None
    }


def _compact(body: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in body.items() if value is not None}


def _segment(value: str) -> str:
    return quote(value, safe="")


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _require_stream(response: httpx.Response) -> None:
    if not isinstance(response.stream, httpx.AsyncByteStream):
        raise UplinxError("No response body", 500, ErrorCode.STREAM_ERROR.value)


class UplinxClient:
    """Typed access to engines, chats, messages and usage."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = ClientConfig(
            api_key=api_key, base_url=base_url, timeout_ms=timeout_ms
        )
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> UplinxClient:
        return cls(
            config.api_key,
            config.base_url,
            config.timeout_ms,
            transport=transport,
        )

    @classmethod
    def from_env(
        cls, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> UplinxClient:
        """Build a client from UPLINX_* environment variables."""
        return cls.from_config(ClientConfig.from_env(), transport=transport)

    def __repr__(self) -> str:
        return (
            f"UplinxClient(base_url={self.config.base_url!r}, "
            f"timeout_ms={self.config.timeout_ms})"
        )

    # ─── Request pipeline ────────────────────────────────────────

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

    def _http(self) -> httpx.AsyncClient:
        # Deadlines are enforced around the call, not inside httpx
        return httpx.AsyncClient(transport=self._transport, timeout=None)

    async def _send(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None,
        body: Any,
    ) -> httpx.Response:
        async with self._http() as client:
            return await client.request(
                method,
                self._url(path),
                params=build_query(params),
                json=body,
                headers=self._headers(),
            )

    @overload
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = ...,
        body: Any = ...,
        schema: type[ModelT],
    ) -> ModelT: ...

    @overload
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = ...,
        body: Any = ...,
        schema: None = ...,
    ) -> Any: ...

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        schema: type[BaseModel] | None = None,
    ) -> Any:
        """Make one authenticated request.

        With ``schema`` the body is validated and the model instance returned;
        without it the parsed JSON comes back unchecked.

        Raises:
            UplinxError: on HTTP errors, transport failures, timeouts and
                bodies that do not match ``schema``.
        """
        started = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._send(method, path, params, body),
                timeout=self.config.timeout,
            )
            duration_ms = round((time.monotonic() - started) * 1000, 1)
            logger.debug(
                "%s %s → %d (%.0fms)",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                },
            )

            if not response.is_success:
                raise UplinxError.from_response(
                    response.status_code, _error_body(response)
                )

            data = response.json()
            if schema is None:
                return data
            try:
                return schema.model_validate(data)
            except ValidationError as exc:
                raise UplinxError.validation_error(
                    exc.errors(include_url=False)
                ) from exc
        except Exception as exc:
            error = UplinxError.from_exception(exc)
            logger.warning(
                "%s %s failed: [%s] %s",
                method,
                path,
                error.code,
                error.message,
                extra={
                    "method": method,
                    "path": path,
                    "status": error.status,
                    "code": error.code,
                },
            )
            if error is exc:
                raise
            raise error from exc

    # ─── Engines ─────────────────────────────────────────────────

    async def list_engines(
        self,
        q: str | None = None,
        category: str | None = None,
        sort: EngineSort | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[Engine]:
        """List available engines, optionally searched, filtered and paged."""
        response = await self.request(
            "GET",
            "/engines",
            params={
                "q": q,
                "category": category,
                "sort": sort,
                "page": page,
                "limit": limit,
            },
            schema=EnginesResponse,
        )
        return list(response.engines)

    async def get_engine(self, slug: str) -> Engine:
        """Get one engine by slug (e.g. "gpt-4o")."""
        response = await self.request(
            "GET", f"/engines/{_segment(slug)}", schema=EngineResponse
        )
        return response.engine

    # ─── Chats ───────────────────────────────────────────────────

    async def list_chats(self) -> list[ChatSession]:
        response = await self.request("GET", "/chats", schema=ChatsResponse)
        return list(response.chats)

    async def create_chat(
        self, engine_id: str | None = None, title: str | None = None
    ) -> ChatSession:
        response = await self.request(
            "POST",
            "/chats",
            body=_compact({"engineId": engine_id, "title": title}),
            schema=ChatResponse,
        )
        return response.chat

    async def get_chat(self, chat_session_id: str) -> ChatSession:
        response = await self.request(
            "GET", f"/chats/{_segment(chat_session_id)}", schema=ChatResponse
        )
        return response.chat

    async def get_messages(self, chat_session_id: str) -> list[Message]:
        response = await self.request(
            "GET",
            f"/chats/{_segment(chat_session_id)}/messages",
            schema=MessagesResponse,
        )
        return list(response.messages)

    # ─── Messages ────────────────────────────────────────────────

    @overload
    async def send_message(
        self,
        message: str,
        *,
        chat_session_id: str | None = ...,
        engine_id: str | None = ...,
        response_model: type[ModelT],
    ) -> ModelT: ...

    @overload
    async def send_message(
        self,
        message: str,
        *,
        chat_session_id: str | None = ...,
        engine_id: str | None = ...,
        response_model: None = ...,
    ) -> Any: ...

    async def send_message(
        self,
        message: str,
        *,
        chat_session_id: str | None = None,
        engine_id: str | None = None,
        response_model: type[BaseModel] | None = None,
    ) -> Any:
        """Send a message and wait for the full reply.

        Without a chat_session_id the server starts a new session. The reply
        shape differs between API versions, so it comes back as plain JSON
        unless ``response_model`` (SendMessageResponse or ChatReply) is given.
        """
        return await self.request(
            "POST",
            CHAT_PATH,
            body=_compact(
                {
                    "chatSessionId": chat_session_id,
                    "engineId": engine_id,
                    "message": message,
                }
            ),
            schema=response_model,
        )

    async def send_message_stream(
        self,
        message: str,
        *,
        chat_session_id: str | None = None,
        engine_id: str | None = None,
        callbacks: StreamCallbacks | None = None,
    ) -> Message | None:
        """Send a message and stream the reply token by token.

        Returns the completed assistant message once the server sends [DONE],
        or None if the connection closed before that. Failures are passed to
        ``callbacks.on_error`` and then raised.
        """
        callbacks = callbacks or StreamCallbacks()
        body = _compact(
            {
                "chatSessionId": chat_session_id,
                "engineId": engine_id,
                "message": message,
                "stream": True,
            }
        )
        headers = {**self._headers(), "Accept": "text/event-stream"}

        try:
            async with self._http() as client:
                async with client.stream(
                    "POST", self._url(CHAT_PATH), json=body, headers=headers
                ) as response:
                    if not response.is_success:
                        await response.aread()
                        raise UplinxError.from_response(
                            response.status_code, _error_body(response)
                        )
                    _require_stream(response)
                    logger.debug(
                        "Stream opened for chat %s",
                        chat_session_id or "(new)",
                        extra={"chat_session_id": chat_session_id},
                    )
                    return await read_token_stream(
                        response.aiter_lines(), chat_session_id, callbacks
                    )
        except Exception as exc:
            error = UplinxError.from_exception(exc)
            logger.warning(
                "Stream failed: [%s] %s",
                error.code,
                error.message,
                extra={
                    "method": "POST",
                    "path": CHAT_PATH,
                    "status": error.status,
                    "code": error.code,
                    "chat_session_id": chat_session_id,
                },
            )
            await invoke(callbacks.on_error, error)
            if error is exc:
                raise
            raise error from exc

    # ─── Usage ───────────────────────────────────────────────────

    async def get_usage(
        self,
        from_: str | date | None = None,
        to: str | date | None = None,
    ) -> UsageSummary:
        """Usage totals and per-exchange records, optionally within a date range."""
        return await self.request(
            "GET",
            "/profile/usage",
            params={"from": from_, "to": to},
            schema=UsageSummary,
        )
