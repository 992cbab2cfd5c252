"""AI chat relay: persona prompt plus OpenAI with a hosted gateway fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from aspire_voice.errors import ChatError, RateLimitedError
from aspire_voice.persona import DEFAULT_PERSONA, Persona, build_system_prompt

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChatReply:
    """Assistant text and the provider that produced it."""

    response: str
    provider: str


@dataclass(slots=True)
class ChatProvider:
    """An OpenAI-compatible chat completions endpoint."""

    name: str
    base_url: str
    api_key: str
    model: str


class ChatService:
    """Produces one persona-guided reply per user message."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        gateway: ChatProvider,
        openai: ChatProvider | None = None,
        persona: Persona | None = DEFAULT_PERSONA,
        max_tokens: int = 150,
        temperature: float = 0.8,
    ) -> None:
        self._client = client
        self._gateway = gateway
        self._openai = openai
        self._system_prompt = build_system_prompt(persona, "chat")
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    async def reply(self, message: str, *, use_openai: bool = False) -> ChatReply:
        """Answer ``message``, trying OpenAI first when requested and configured."""
        if not message or not message.strip():
            raise ChatError("Message is required", 400)

        if use_openai and self._openai is not None and self._openai.api_key:
            try:
                response = await self._complete(self._openai, message)
                if response.is_success:
                    content = _message_content(response.json())
                    if content:
                        return ChatReply(response=content, provider=self._openai.name)
                logger.warning("openai_chat_unusable", extra={"status": response.status_code})
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("openai_chat_failed", extra={"error": f"{type(exc).__name__}: {exc}"})

        return await self._reply_with_gateway(message)

    async def _reply_with_gateway(self, message: str) -> ChatReply:
        if not self._gateway.api_key:
            logger.error("gateway_api_key_missing")
            raise ChatError("AI service unavailable", 500)

        try:
            response = await self._complete(self._gateway, message)
        except httpx.HTTPError as exc:
            logger.error("gateway_chat_failed", extra={"error": f"{type(exc).__name__}: {exc}"})
            raise ChatError("Internal server error", 500) from exc

        if not response.is_success:
            logger.error("gateway_chat_error", extra={"status": response.status_code, "body": response.text})
            if response.status_code == 429:
                raise RateLimitedError("Rate limit exceeded")
            raise ChatError("Failed to get AI response", 500)

        try:
            data = response.json()
        except ValueError as exc:
            raise ChatError("No response from AI", 500) from exc

        content = _message_content(data)
        if not content:
            logger.error("gateway_chat_empty", extra={"payload": data})
            raise ChatError("No response from AI", 500)
        return ChatReply(response=content, provider=self._gateway.name)

    async def _complete(self, provider: ChatProvider, message: str) -> httpx.Response:
        return await self._client.post(
            f"{provider.base_url.rstrip('/')}/chat/completions",
            headers={"Authorization": f"Bearer {provider.api_key}"},
            json={
                "model": provider.model,
                "messages": [
                    {"role": "system", "content": self._system_prompt},
                    {"role": "user", "content": message},
                ],
                "max_tokens": self._max_tokens,
                "temperature": self._temperature,
            },
        )


def _message_content(payload: Any) -> str | None:
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content or None
