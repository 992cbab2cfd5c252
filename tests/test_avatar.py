from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from aspire_voice.avatar import AGENT_NAME, AvatarSessionService
from aspire_voice.errors import AvatarServiceError

BASE_URL = "https://avatar.test/v1"


class RecordingHandler:
    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes[(request.method, request.url.path)]


def _service(handler: RecordingHandler, api_key: str = "bp-key") -> AvatarSessionService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AvatarSessionService(client, api_key=api_key, base_url=BASE_URL)


def test_create_session_creates_agent_then_session() -> None:
    handler = RecordingHandler(
        {
            ("POST", "/v1/agents"): httpx.Response(201, json={"id": "agent-1"}),
            ("POST", "/v1/sessions"): httpx.Response(201, json={"id": "sess-9", "url": "https://video.test/sess-9"}),
        }
    )

    session = asyncio.run(_service(handler).create_session())

    assert (session.session_id, session.agent_id) == ("sess-9", "agent-1")
    assert session.session_data["url"] == "https://video.test/sess-9"
    agent_request, session_request = handler.requests
    agent_body = json.loads(agent_request.content)
    assert agent_body["name"] == AGENT_NAME
    assert "RESPONSE REQUIREMENTS FOR VIDEO" in agent_body["system_prompt"]
    assert agent_request.headers["Authorization"] == "Bearer bp-key"
    assert json.loads(session_request.content) == {"agent_id": "agent-1"}


def test_create_session_reports_agent_failure() -> None:
    handler = RecordingHandler({("POST", "/v1/agents"): httpx.Response(400, text="bad prompt")})

    with pytest.raises(AvatarServiceError, match="Failed to create avatar agent"):
        asyncio.run(_service(handler).create_session())


def test_create_session_reports_session_failure() -> None:
    handler = RecordingHandler(
        {
            ("POST", "/v1/agents"): httpx.Response(201, json={"id": "agent-1"}),
            ("POST", "/v1/sessions"): httpx.Response(503, text="busy"),
        }
    )

    with pytest.raises(AvatarServiceError, match="Failed to create video session"):
        asyncio.run(_service(handler).create_session())


def test_end_session_requires_id() -> None:
    with pytest.raises(AvatarServiceError) as excinfo:
        asyncio.run(_service(RecordingHandler({})).end_session(None))

    assert excinfo.value.status_code == 400


def test_end_session_tolerates_upstream_refusal() -> None:
    handler = RecordingHandler({("DELETE", "/v1/sessions/sess-9"): httpx.Response(404, text="gone")})

    asyncio.run(_service(handler).end_session("sess-9"))

    assert handler.requests[0].method == "DELETE"


def test_list_avatars_returns_payload() -> None:
    handler = RecordingHandler({("GET", "/v1/avatars"): httpx.Response(200, json=[{"id": "av-1"}])})

    assert asyncio.run(_service(handler).list_avatars()) == [{"id": "av-1"}]


def test_list_avatars_failure() -> None:
    handler = RecordingHandler({("GET", "/v1/avatars"): httpx.Response(500, text="down")})

    with pytest.raises(AvatarServiceError, match="Failed to fetch avatars"):
        asyncio.run(_service(handler).list_avatars())


def test_missing_api_key_is_unavailable_without_network() -> None:
    handler = RecordingHandler({})

    with pytest.raises(AvatarServiceError, match="Avatar service unavailable"):
        asyncio.run(_service(handler, api_key="").create_session())

    assert handler.requests == []


def test_create_session_rejects_non_object_session_payload() -> None:
    handler = RecordingHandler(
        {
            ("POST", "/v1/agents"): httpx.Response(201, json={"id": "agent-1"}),
            ("POST", "/v1/sessions"): httpx.Response(201, json=[{"id": "sess-1"}]),
        }
    )

    with pytest.raises(AvatarServiceError, match="Failed to initialize avatar session"):
        asyncio.run(_service(handler).create_session())
