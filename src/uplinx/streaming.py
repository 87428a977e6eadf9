"""
Streaming Reader — server-sent events to token callbacks.

The /v1/chat endpoint streams lines of the form:

    data: {"token": "Hel"}
    data: {"token": "lo"}
    data: [DONE]

Lines come from httpx's ``aiter_lines()``, which decodes the body incrementally
and carries partial lines over between chunks. Each ``data:`` payload is either
the [DONE] sentinel or a JSON token delta. Unparseable payloads are skipped:
a torn fragment is expected, not an error.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from uplinx.models import Message

if TYPE_CHECKING:
    from uplinx.errors import UplinxError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class StreamCallbacks:
    """Optional hooks for a streaming exchange.

    Each may be a plain function or a coroutine function.
    """

    on_token: Callable[[str], Any] | None = None
    on_complete: Callable[[Message], Any] | None = None
    on_error: Callable[[UplinxError], Any] | None = None


async def invoke(callback: Callable[..., Any] | None, *args: Any) -> None:
    """Call a sync or async callback; no-op when it is None."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


async def iter_data_payloads(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the payload of every ``data:`` line."""
    async for line in lines:
        if line.startswith(DATA_PREFIX):
            yield line[len(DATA_PREFIX) :]


def _extract_token(payload: str) -> str | None:
    try:
        data = json.loads(payload)
    except ValueError:
        logger.debug("Skipping unparseable stream line: %.80s", payload)
        return None
    if isinstance(data, dict):
        token = data.get("token")
        if isinstance(token, str) and token:
            return token
    return None


async def read_token_stream(
    lines: AsyncIterator[str],
    chat_session_id: str | None,
    callbacks: StreamCallbacks,
) -> Message | None:
    """Drive callbacks from the decoded lines of an SSE response.

    Returns the completed assistant message when [DONE] arrives, or None when
    the stream ends without it (no terminal callback fires in that case).
    """
    content: list[str] = []

    async with aclosing(iter_data_payloads(lines)) as payloads:
        async for payload in payloads:
            if payload == DONE_SENTINEL:
                message = Message(
                    id="",
                    chat_session_id=chat_session_id or "",
                    role="assistant",
                    content="".join(content),
                    created_at=datetime.now(timezone.utc).isoformat(),
                )
                await invoke(callbacks.on_complete, message)
                return message

            token = _extract_token(payload)
            if token:
                content.append(token)
                await invoke(callbacks.on_token, token)

    logger.warning(
        "Stream ended without %s (%d tokens received)",
        DONE_SENTINEL,
        len(content),
        extra={"chat_session_id": chat_session_id},
    )
    return None
