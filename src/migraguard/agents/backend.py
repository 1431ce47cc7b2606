"""LLM backends for sub-agents.

OpenAICompatBackend works with any provider exposing /v1/chat/completions
(OpenAI, Azure OpenAI, Groq, OpenRouter, local vLLM).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """Raised when a backend cannot produce a completion."""


class LLMResponse(BaseModel):
    content: str
    model: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    raw: dict[str, Any] = Field(default_factory=dict)


class LLMBackend(ABC):
    @abstractmethod
    async def generate(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """Generate a completion given system and user prompts."""
        ...

    async def close(self) -> None:
        """Release any held connections."""


class OpenAICompatBackend(LLMBackend):
    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str = "",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers: dict[str, str] = {}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=httpx.Timeout(120.0, connect=10.0),
                transport=self._transport,
            )
        return self._client

    async def generate(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "stream": False,
        }
        logger.debug("chat completion: model=%s, prompt_len=%d", self._model, len(user_prompt))

        try:
            resp = await self._get_client().post("/v1/chat/completions", json=payload)
        except httpx.HTTPError as e:
            raise LLMError(f"request to {self._base_url} failed: {e}") from e

        if resp.status_code != 200:
            try:
                err_msg = resp.json().get("error", {}).get("message", resp.text)
            except ValueError:
                err_msg = resp.text
            raise LLMError(f"API error ({resp.status_code}): {err_msg}")

        try:
            data = resp.json()
        except ValueError as e:
            preview = resp.text[:200] if resp.text else "(empty)"
            raise LLMError(f"API returned non-JSON response: {preview}") from e

        if not isinstance(data, dict) or not data.get("choices"):
            keys = list(data) if isinstance(data, dict) else type(data).__name__
            raise LLMError(f"Unexpected API response format (missing 'choices'). Got: {keys}")

        message = data["choices"][0].get("message") or {}
        usage = data.get("usage") or {}
        return LLMResponse(
            content=message.get("content") or "",
            model=data.get("model", self._model),
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            raw=data,
        )

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
