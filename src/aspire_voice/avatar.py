"""Video-avatar session relay for the hosted avatar service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from aspire_voice.errors import AvatarServiceError
from aspire_voice.persona import DEFAULT_PERSONA, Persona, build_system_prompt

logger = logging.getLogger(__name__)

AGENT_NAME = "Aspirational Self Avatar"
AGENT_DESCRIPTION = "A compassionate video avatar for self-reflection"


@dataclass(slots=True)
class AvatarSession:
    """A live video session and the agent that speaks in it."""

    session_id: str
    agent_id: str
    session_data: dict[str, Any] = field(default_factory=dict)


class AvatarSessionService:
    """Creates, ends and lists avatar resources using bearer-token JSON calls."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str,
        base_url: str = "https://api.bey.dev/v1",
        persona: Persona | None = DEFAULT_PERSONA,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._persona = persona

    async def create_session(self) -> AvatarSession:
        """Create a persona agent, then a video session bound to it."""
        headers = self._headers()
        try:
            agent_response = await self._client.post(
                f"{self._base_url}/agents",
                headers=headers,
                json={
                    "system_prompt": build_system_prompt(self._persona, "video"),
                    "name": AGENT_NAME,
                    "description": AGENT_DESCRIPTION,
                },
            )
            if not agent_response.is_success:
                logger.error(
                    "avatar_agent_create_failed",
                    extra={"status": agent_response.status_code, "body": agent_response.text},
                )
                raise AvatarServiceError("Failed to create avatar agent", 500)
            agent_id = str(agent_response.json()["id"])

            session_response = await self._client.post(
                f"{self._base_url}/sessions",
                headers=headers,
                json={"agent_id": agent_id},
            )
            if not session_response.is_success:
                logger.error(
                    "avatar_session_create_failed",
                    extra={"status": session_response.status_code, "body": session_response.text},
                )
                raise AvatarServiceError("Failed to create video session", 500)
            session_data = session_response.json()
            if not isinstance(session_data, dict):
                raise ValueError(f"unexpected session payload: {type(session_data).__name__}")
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.error("avatar_session_init_failed", extra={"error": f"{type(exc).__name__}: {exc}"})
            raise AvatarServiceError("Failed to initialize avatar session", 500) from exc

        logger.info("avatar_session_created", extra={"session_id": session_data.get("id"), "agent_id": agent_id})
        return AvatarSession(session_id=str(session_data.get("id", "")), agent_id=agent_id, session_data=session_data)

    async def end_session(self, session_id: str | None) -> None:
        """End ``session_id``; an upstream refusal is logged, not raised."""
        if not session_id:
            raise AvatarServiceError("Session ID is required to end session", 400)

        headers = self._headers()
        try:
            response = await self._client.delete(f"{self._base_url}/sessions/{session_id}", headers=headers)
        except httpx.HTTPError as exc:
            logger.error("avatar_session_end_failed", extra={"session_id": session_id, "error": str(exc)})
            raise AvatarServiceError("Failed to end session", 500) from exc

        if not response.is_success:
            logger.error(
                "avatar_session_end_rejected",
                extra={"session_id": session_id, "status": response.status_code},
            )

    async def list_avatars(self) -> Any:
        headers = self._headers(json_body=False)
        try:
            response = await self._client.get(f"{self._base_url}/avatars", headers=headers)
            if not response.is_success:
                logger.error("avatar_list_failed", extra={"status": response.status_code, "body": response.text})
                raise AvatarServiceError("Failed to fetch avatars", 500)
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("avatar_list_failed", extra={"error": f"{type(exc).__name__}: {exc}"})
            raise AvatarServiceError("Failed to list avatars", 500) from exc

    def ensure_configured(self) -> None:
        """Raise before any action is dispatched when no API key is set."""
        if not self._api_key:
            logger.error("avatar_api_key_missing")
            raise AvatarServiceError("Avatar service unavailable", 500)

    def _headers(self, *, json_body: bool = True) -> dict[str, str]:
        self.ensure_configured()
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers
