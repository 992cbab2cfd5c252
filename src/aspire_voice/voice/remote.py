"""Hosted text-to-speech client."""

from __future__ import annotations

import logging

import httpx

from aspire_voice.errors import SynthesisTransportError

from .interfaces import RemoteSynthesizer

logger = logging.getLogger(__name__)


class HttpSpeechSynthesizer(RemoteSynthesizer):
    """Fetch synthesized audio from an HTTP endpoint accepting ``{"text": ...}``."""

    def __init__(self, endpoint: str, client: httpx.AsyncClient | None = None) -> None:
        self._endpoint = endpoint
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def synthesize(self, text: str) -> bytes:
        try:
            response = await self._client.post(self._endpoint, json={"text": text})
        except httpx.HTTPError as exc:
            raise SynthesisTransportError(f"Speech request failed: {type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise SynthesisTransportError(f"Failed to generate speech (HTTP {response.status_code})")
        if not response.content:
            raise SynthesisTransportError("Speech endpoint returned no audio")

        logger.debug("remote_synthesis_received", extra={"bytes": len(response.content)})
        return response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
