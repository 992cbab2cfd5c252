"""
HTTP relays for the companion front end.

Routes:
  POST /ai                  persona-guided chat reply
  POST /beyond-presence     avatar session actions
  POST /api/text-to-speech  hosted speech synthesis (WAV)
  GET  /health
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from aspire_voice.avatar import AvatarSessionService
from aspire_voice.chat import ChatProvider, ChatService
from aspire_voice.config import Settings, settings as default_settings
from aspire_voice.errors import ServiceError
from aspire_voice.telemetry import configure_logging

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    message: str = ""
    use_openai: bool = Field(default=False, alias="useOpenAI")

    model_config = ConfigDict(populate_by_name=True)


class AvatarRequest(BaseModel):
    action: str = ""
    session_id: str | None = Field(default=None, alias="sessionId")

    model_config = ConfigDict(populate_by_name=True)


class SpeechRequestBody(BaseModel):
    text: str = ""


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def build_chat_service(client: httpx.AsyncClient, config: Settings) -> ChatService:
    return ChatService(
        client,
        gateway=ChatProvider(
            name="gateway",
            base_url=config.gateway_base_url,
            api_key=config.gateway_api_key,
            model=config.gateway_chat_model,
        ),
        openai=ChatProvider(
            name="openai",
            base_url=config.openai_base_url,
            api_key=config.openai_api_key,
            model=config.openai_chat_model,
        ),
        max_tokens=config.chat_max_tokens,
        temperature=config.chat_temperature,
    )


def create_app(config: Settings | None = None, client: httpx.AsyncClient | None = None) -> FastAPI:
    """Build the relay app; ``client`` replaces the outbound HTTP client."""
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http = client or httpx.AsyncClient(timeout=config.http_timeout_seconds)
        app.state.chat = build_chat_service(http, config)
        app.state.avatar = AvatarSessionService(
            http,
            api_key=config.beyond_presence_api_key,
            base_url=config.avatar_base_url,
        )
        app.state.http = http
        logger.info("relay_started", extra={"app_name": config.app_name})
        yield
        if client is None:
            await http.aclose()
        logger.info("relay_stopped")

    app = FastAPI(title="Aspire Voice Relay", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError) -> JSONResponse:
        return _error(exc.message, exc.status_code)

    @app.post("/ai")
    async def ai(body: ChatRequest, request: Request) -> dict:
        reply = await request.app.state.chat.reply(body.message, use_openai=body.use_openai)
        return {"response": reply.response, "provider": reply.provider}

    @app.post("/beyond-presence")
    async def beyond_presence(body: AvatarRequest, request: Request):
        if not body.action:
            return _error("Action is required", 400)

        avatar: AvatarSessionService = request.app.state.avatar
        avatar.ensure_configured()
        if body.action == "create_session":
            session = await avatar.create_session()
            return {
                "success": True,
                "sessionId": session.session_id,
                "agentId": session.agent_id,
                "sessionData": session.session_data,
            }
        if body.action == "end_session":
            await avatar.end_session(body.session_id)
            return {"success": True, "message": "Session ended successfully"}
        if body.action == "list_avatars":
            return {"success": True, "avatars": await avatar.list_avatars()}
        return _error("Invalid action", 400)

    @app.post("/api/text-to-speech")
    async def text_to_speech(body: SpeechRequestBody, request: Request):
        if not body.text.strip():
            return _error("Text is required", 400)
        if not config.openai_api_key:
            logger.error("openai_api_key_missing")
            return _error("Speech service unavailable", 500)

        http: httpx.AsyncClient = request.app.state.http
        try:
            upstream = await http.post(
                f"{config.openai_base_url.rstrip('/')}/audio/speech",
                headers={"Authorization": f"Bearer {config.openai_api_key}"},
                json={
                    "model": config.tts_model,
                    "voice": config.tts_voice,
                    "input": body.text,
                    "response_format": "wav",
                },
            )
        except httpx.HTTPError as exc:
            logger.error("speech_upstream_failed", extra={"error": f"{type(exc).__name__}: {exc}"})
            return _error("Failed to generate speech", 502)

        if not upstream.is_success:
            logger.error("speech_upstream_rejected", extra={"status": upstream.status_code, "body": upstream.text})
            return _error("Failed to generate speech", 502)
        return Response(content=upstream.content, media_type="audio/wav")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "app_name": config.app_name}

    return app


def build_app() -> FastAPI:
    """Uvicorn factory: ``uvicorn --factory aspire_voice.api:build_app``."""
    configure_logging(default_settings.log_level)
    return create_app()
