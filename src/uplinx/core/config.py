"""
Uplinx Configuration — static client settings.

Reads from environment variables (and a local .env) with sensible defaults.
The config object is frozen: a client never mutates it after construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

DEFAULT_BASE_URL = "http://localhost:3001"
DEFAULT_TIMEOUT_MS = 60000


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for the marketplace API."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS  # applies to non-streaming calls only

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("Uplinx API key is required")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")
        # Normalized once here so every request URL is built the same way
        base_url = (self.base_url or DEFAULT_BASE_URL).rstrip("/")
        object.__setattr__(self, "base_url", base_url)

    @property
    def timeout(self) -> float:
        """Timeout in seconds."""
        return self.timeout_ms / 1000

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Read UPLINX_* variables; non-None keyword overrides win."""
        load_dotenv()
        values: dict[str, Any] = {
            "api_key": os.getenv("UPLINX_API_KEY", ""),
            "base_url": os.getenv("UPLINX_BASE_URL", DEFAULT_BASE_URL),
            "timeout_ms": int(
                os.getenv("UPLINX_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))
            ),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
