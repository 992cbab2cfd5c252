"""CLI entrypoint for the aspire voice companion."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich import print

from aspire_voice.api import build_chat_service
from aspire_voice.avatar import AvatarSessionService
from aspire_voice.config import settings
from aspire_voice.errors import CapabilityUnavailable, ServiceError, SynthesisPlaybackError
from aspire_voice.telemetry import configure_logging
from aspire_voice.voice import HttpSpeechSynthesizer, RecognitionConfig, VoiceInputService, VoiceOutputService

app = typer.Typer(help="Aspire voice companion")

VOICE_EXTRAS_HINT = "Install with: pip install 'aspire-voice[voice]'"


@app.callback()
def _configure() -> None:
    configure_logging(settings.log_level)


def _build_provider():
    from aspire_voice.voice.platform import DesktopCapabilityProvider

    return DesktopCapabilityProvider()


def _http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.http_timeout_seconds)


async def _listen_once(service: VoiceInputService, results: asyncio.Queue[tuple[str, str]]) -> tuple[str, str]:
    """Run one recognition session and wait for its outcome."""
    service.start()
    while True:
        try:
            return await asyncio.wait_for(results.get(), timeout=0.1)
        except asyncio.TimeoutError:
            if not service.is_listening and results.empty():
                return "end", ""


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "recognition_lang": settings.recognition_lang,
            "tts_endpoint": settings.tts_endpoint,
            "prefer_remote_voice": settings.prefer_remote_voice,
            "openai_configured": bool(settings.openai_api_key),
            "gateway_configured": bool(settings.gateway_api_key),
            "avatar_configured": bool(settings.beyond_presence_api_key),
        }
    )


@app.command()
def chat(
    message: str,
    use_openai: bool = typer.Option(False, help="Prefer OpenAI before the hosted gateway"),
) -> None:
    """Send one message to the companion and print the reply."""

    async def _run() -> dict:
        async with _http_client() as client:
            reply = await build_chat_service(client, settings).reply(message, use_openai=use_openai)
        return {"response": reply.response, "provider": reply.provider}

    try:
        print(asyncio.run(_run()))
    except ServiceError as exc:
        print({"error": exc.message, "status": exc.status_code})
        raise typer.Exit(code=1)


@app.command()
def say(
    text: str,
    remote: bool = typer.Option(None, "--remote/--local", help="Prefer the hosted voice (default from settings)"),
) -> None:
    """Speak text aloud."""
    prefer_remote = settings.prefer_remote_voice if remote is None else remote

    async def _run() -> None:
        synthesizer = HttpSpeechSynthesizer(settings.tts_endpoint)
        try:
            with VoiceOutputService(_build_provider(), remote=synthesizer) as output:
                await output.speak(text, prefer_remote=prefer_remote)
        finally:
            await synthesizer.aclose()

    try:
        asyncio.run(_run())
    except CapabilityUnavailable as exc:
        print({"error": str(exc), "hint": VOICE_EXTRAS_HINT})
        raise typer.Exit(code=1)
    except SynthesisPlaybackError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)


@app.command("voice-chat")
def voice_chat(
    remote_voice: bool = typer.Option(None, "--remote-voice/--local-voice", help="Prefer the hosted voice"),
    use_openai: bool = typer.Option(False, help="Prefer OpenAI before the hosted gateway"),
) -> None:
    """Run an interactive voice loop: listen, reply, speak."""
    prefer_remote = settings.prefer_remote_voice if remote_voice is None else remote_voice

    async def _run() -> None:
        results: asyncio.Queue[tuple[str, str]] = asyncio.Queue()
        provider = _build_provider()
        input_service = VoiceInputService(
            provider,
            on_result=lambda text: results.put_nowait(("result", text)),
            on_error=lambda reason: results.put_nowait(("error", reason)),
            config=RecognitionConfig(lang=settings.recognition_lang),
        )
        if not input_service.is_supported:
            input_service.close()
            print({"error": "Speech recognition is not available on this machine.", "hint": VOICE_EXTRAS_HINT})
            raise typer.Exit(code=1)

        synthesizer = HttpSpeechSynthesizer(settings.tts_endpoint)
        async with _http_client() as client:
            chat_service = build_chat_service(client, settings)
            try:
                with input_service, VoiceOutputService(provider, remote=synthesizer) as output:
                    print({"voice_chat": "started", "hint": "Press Enter to speak; say 'stop listening' to exit."})
                    while True:
                        await asyncio.to_thread(input, "Press Enter to capture voice (Ctrl+C to quit) ...")
                        kind, value = await _listen_once(input_service, results)
                        if kind == "error":
                            print({"recognition_error": value})
                            continue
                        transcript = value.strip()
                        if not transcript:
                            continue
                        if "stop listening" in transcript.lower():
                            await output.speak("Okay, take care. Until next time.", prefer_remote=prefer_remote)
                            print({"voice_chat": "stopped"})
                            break

                        try:
                            reply = await chat_service.reply(transcript, use_openai=use_openai)
                        except ServiceError as exc:
                            print({"heard": transcript, "error": exc.message})
                            continue
                        print({"heard": transcript, "response": reply.response, "provider": reply.provider})
                        try:
                            await output.speak(reply.response, prefer_remote=prefer_remote)
                        except (CapabilityUnavailable, SynthesisPlaybackError) as exc:
                            print({"speech_error": str(exc)})
            finally:
                await synthesizer.aclose()

    asyncio.run(_run())


@app.command("avatar-create")
def avatar_create() -> None:
    """Create a video-avatar session."""

    async def _run() -> dict:
        async with _http_client() as client:
            session = await _avatar_service(client).create_session()
        return {"sessionId": session.session_id, "agentId": session.agent_id}

    _run_avatar(_run)


@app.command("avatar-end")
def avatar_end(session_id: str) -> None:
    """End a video-avatar session."""

    async def _run() -> dict:
        async with _http_client() as client:
            await _avatar_service(client).end_session(session_id)
        return {"success": True, "message": "Session ended successfully"}

    _run_avatar(_run)


@app.command("avatar-list")
def avatar_list() -> None:
    """List avatars offered by the hosting service."""

    async def _run() -> dict:
        async with _http_client() as client:
            return {"avatars": await _avatar_service(client).list_avatars()}

    _run_avatar(_run)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
) -> None:
    """Serve the chat, avatar and speech relays over HTTP."""
    try:
        import uvicorn
    except ImportError:
        print({"error": "Server extras are missing. Install with: pip install 'aspire-voice[server]'"})
        raise typer.Exit(code=1)

    uvicorn.run("aspire_voice.api:build_app", factory=True, host=host, port=port)


def _avatar_service(client: httpx.AsyncClient) -> AvatarSessionService:
    return AvatarSessionService(client, api_key=settings.beyond_presence_api_key, base_url=settings.avatar_base_url)


def _run_avatar(runner) -> None:
    try:
        print(asyncio.run(runner()))
    except ServiceError as exc:
        print({"error": exc.message, "status": exc.status_code})
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
