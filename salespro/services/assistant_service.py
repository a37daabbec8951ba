"""
Gemini text-completion client and the assistant built on it.
Callers of AssistantService never see an exception: every failure becomes
the generic "unavailable" reply.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx
import structlog

from salespro.config import (
    ASSISTANT_API_URL,
    ASSISTANT_MODEL,
    ASSISTANT_TIMEOUT_SECONDS,
    GEMINI_API_KEY,
)
from salespro.constants import (
    ASSISTANT_MISSING_KEY_MESSAGE,
    ASSISTANT_SALES_INSTRUCTION,
    ASSISTANT_SUPPORT_INSTRUCTION,
    ASSISTANT_UNAVAILABLE_MESSAGE,
)
from salespro.errors import AssistantUnavailableError
from salespro.state import AppState

logger = structlog.get_logger(__name__)

INSTRUCTIONS = {
    "sales": ASSISTANT_SALES_INSTRUCTION,
    "support": ASSISTANT_SUPPORT_INSTRUCTION,
}


class GeminiClient:
    """Client for the generateContent endpoint"""

    def __init__(
        self,
        api_key: str,
        model: str = ASSISTANT_MODEL,
        base_url: str = ASSISTANT_API_URL,
        timeout: float = ASSISTANT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("Gemini API key is required")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _payload(self, prompt: str, system_instruction: Optional[str]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    async def generate(self, prompt: str, system_instruction: Optional[str] = None) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                url,
                json=self._payload(prompt, system_instruction),
                headers={"x-goog-api-key": self.api_key},
            )
            response.raise_for_status()
            data = response.json()

        candidates = data.get("candidates") or []
        if not candidates:
            raise AssistantUnavailableError("No candidates in response")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts)
        if not text:
            raise AssistantUnavailableError("No response text")
        return text


@dataclass(frozen=True)
class AssistantReply:
    ok: bool
    text: str


class AssistantService:
    def __init__(self, state: AppState, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.state = state
        self.transport = transport

    def api_key(self) -> str:
        settings = self.state.settings
        return (settings.ai_api_key if settings else "") or GEMINI_API_KEY

    async def ask(self, prompt: str, mode: str = "sales") -> AssistantReply:
        if not prompt.strip():
            return AssistantReply(False, "")
        key = self.api_key()
        if not key:
            return AssistantReply(False, ASSISTANT_MISSING_KEY_MESSAGE)

        client = GeminiClient(key, transport=self.transport)
        try:
            text = await client.generate(prompt, INSTRUCTIONS.get(mode, ASSISTANT_SALES_INSTRUCTION))
        except (httpx.HTTPError, AssistantUnavailableError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("assistant_failed", mode=mode, kind=type(exc).__name__, error=str(exc))
            return AssistantReply(False, ASSISTANT_UNAVAILABLE_MESSAGE)
        return AssistantReply(True, text)
