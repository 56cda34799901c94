"""Unit tests for the webhook server module."""

import json
from typing import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from review_queue.coordinator import QueueLifecycleEngine
from review_queue.settings import SettingModel
from review_queue.webhook.app import web_factory
from review_queue.webhook.server import create_slack_app, resolve_bot_user_id, verify_slack_request


@pytest.fixture
def mock_request():
    """Create a mock FastAPI request."""
    request = MagicMock()
    request.headers = {"X-Slack-Signature": "test_signature", "X-Slack-Request-Timestamp": "1234567890"}
    request.body = AsyncMock(return_value=b"test_body")
    return request


@pytest.fixture
def mock_client() -> AsyncMock:
    """Create a mock Slack client."""
    client = AsyncMock(spec=AsyncWebClient)
    client.chat_postMessage.return_value = AsyncMock(data={"ok": True, "ts": "1234567890.123456"})
    return client


@pytest.fixture
def mock_verify_slack_request() -> Generator[AsyncMock, None, None]:
    """Accept every request signature."""
    with patch("review_queue.webhook.server.verify_slack_request", new=AsyncMock(return_value=True)) as mock:
        yield mock


@pytest.fixture
def app(engine: QueueLifecycleEngine, mock_client: AsyncMock, settings: SettingModel) -> FastAPI:
    """Create the app with the shared engine and a mock client."""
    return create_slack_app(engine=engine, client=mock_client, settings=settings)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def _message_event(text: str, user: str = "U1", channel: str = "C1") -> dict:
    return {
        "type": "event_callback",
        "event_id": "Ev1",
        "event": {"type": "message", "channel": channel, "user": user, "text": text, "ts": "1.0"},
    }


@pytest.mark.asyncio
async def test_verify_slack_request_valid(mock_request):
    """Test verifying a valid Slack request."""
    with patch("review_queue.webhook.server.SignatureVerifier") as mock_sv:
        mock_sv.return_value.is_valid.return_value = True

        result = await verify_slack_request(mock_request, signing_secret="test_secret")

        assert result is True
        mock_sv.assert_called_once_with("test_secret")
        mock_sv.return_value.is_valid.assert_called_once_with(
            signature="test_signature",
            timestamp="1234567890",
            body="test_body",
        )


@pytest.mark.asyncio
async def test_verify_slack_request_invalid(mock_request):
    """Test verifying an invalid Slack request."""
    with patch("review_queue.webhook.server.SignatureVerifier") as mock_sv:
        mock_sv.return_value.is_valid.return_value = False

        result = await verify_slack_request(mock_request, signing_secret="test_secret")

        assert result is False


@pytest.mark.asyncio
async def test_verify_slack_request_uses_settings(mock_request, settings: SettingModel, signing_secret: str):
    """Test that the signing secret falls back to settings."""
    with (
        patch("review_queue.webhook.server.SignatureVerifier") as mock_sv,
        patch("review_queue.webhook.server.get_settings", return_value=settings),
    ):
        mock_sv.return_value.is_valid.return_value = True

        assert await verify_slack_request(mock_request) is True
        mock_sv.assert_called_once_with(signing_secret)


@pytest.mark.asyncio
async def test_verify_slack_request_without_secret(mock_request):
    """Test that a missing signing secret rejects the request."""
    no_secret = SettingModel(_env_file=None, slack_signing_secret=None)
    with patch("review_queue.webhook.server.get_settings", return_value=no_secret):
        assert await verify_slack_request(mock_request) is False


@pytest.mark.asyncio
async def test_resolve_bot_user_id(mock_client: AsyncMock):
    """Test resolving the bot user id with auth.test."""
    mock_client.auth_test.return_value = {"ok": True, "user_id": "UBOT"}
    assert await resolve_bot_user_id(mock_client) == "UBOT"


@pytest.mark.asyncio
async def test_resolve_bot_user_id_failure(mock_client: AsyncMock):
    """Test that auth failures are logged and yield None."""
    mock_client.auth_test.side_effect = SlackApiError("invalid_auth", {"ok": False, "error": "invalid_auth"})
    assert await resolve_bot_user_id(mock_client) is None


def test_create_slack_app_routes(app: FastAPI):
    """Test that the app exposes the expected routes."""
    paths = {route.path for route in app.routes}
    assert {"/slack/events", "/queue", "/health"} <= paths
    assert web_factory.get() is app


def test_create_slack_app_defaults(settings: SettingModel):
    """Test that an engine over a fresh registry is created when none is given."""
    app = create_slack_app(settings=settings)
    assert isinstance(app.state.engine, QueueLifecycleEngine)
    assert len(app.state.engine.registry) == 0
    assert app.state.slack_client is None


def test_health_check(client: TestClient, engine: QueueLifecycleEngine):
    """Test the health endpoint reports registry size and client status."""
    engine.add("T", "https://x", [], owner="U1")

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": "review-queue-bot",
        "components": {"registry": {"entries": 1}, "slack_client": "initialized"},
    }


def test_slack_events_invalid_signature(client: TestClient):
    """Test that unsigned requests are rejected."""
    with patch("review_queue.webhook.server.verify_slack_request", new=AsyncMock(return_value=False)):
        response = client.post("/slack/events", json={"type": "url_verification", "challenge": "x"})
    assert response.status_code == 401


def test_slack_events_url_verification(client: TestClient, mock_verify_slack_request):
    """Test the URL verification challenge."""
    response = client.post("/slack/events", json={"type": "url_verification", "challenge": "abc123"})
    assert response.status_code == 200
    assert response.json() == {"challenge": "abc123"}


def test_slack_events_invalid_json(client: TestClient, mock_verify_slack_request):
    """Test that a body that is not JSON is a bad request."""
    response = client.post("/slack/events", content=b"not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400


def test_slack_events_unknown_envelope(client: TestClient, mock_verify_slack_request, mock_client: AsyncMock):
    """Test that unsupported envelopes are acknowledged and ignored."""
    response = client.post("/slack/events", json={"type": "app_rate_limited"})
    assert response.status_code == 200
    assert response.json() == {"status": "ignored"}
    mock_client.chat_postMessage.assert_not_called()


def test_slack_events_command_posts_reply(
    client: TestClient, mock_verify_slack_request, mock_client: AsyncMock, engine: QueueLifecycleEngine
):
    """Test that a queue command is executed and its reply posted to the channel."""
    response = client.post("/slack/events", json=_message_event("queue add Fix-bug https://x <@U2>"))

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert len(engine.registry) == 1
    mock_client.chat_postMessage.assert_awaited_once()
    kwargs = mock_client.chat_postMessage.await_args.kwargs
    assert kwargs["channel"] == "C1"
    assert kwargs["text"].startswith("Queue added: *Fix-bug* (ID: 1)")


def test_slack_events_error_posts_reply(client: TestClient, mock_verify_slack_request, mock_client: AsyncMock):
    """Test that coordinator errors are posted as plain replies."""
    client.post("/slack/events", json=_message_event("queue approve 5"))

    mock_client.chat_postMessage.assert_awaited_once_with(channel="C1", text="Queue not found.")


def test_slack_events_ignores_conversation_and_bot(
    client: TestClient, mock_verify_slack_request, mock_client: AsyncMock
):
    """Test that plain messages and the bot's own messages get no reply."""
    client.post("/slack/events", json=_message_event("hello there"))
    client.post("/slack/events", json=_message_event("queue list", user="UBOT"))
    client.post("/slack/events", json={"type": "event_callback", "event": {"type": "reaction_added"}})

    mock_client.chat_postMessage.assert_not_called()


def test_slack_events_without_client_drops_reply(
    engine: QueueLifecycleEngine, settings: SettingModel, mock_verify_slack_request
):
    """Test that the command still runs when no Slack client is configured."""
    client = TestClient(create_slack_app(engine=engine, settings=settings))

    response = client.post("/slack/events", json=_message_event("queue add T https://x"))

    assert response.status_code == 200
    assert len(engine.registry) == 1


def test_queue_endpoint(client: TestClient, mock_verify_slack_request, engine: QueueLifecycleEngine):
    """Test the form-encoded endpoint shares the registry with the chat path."""
    response = client.post("/queue", data={"text": "add Fix-bug https://x <@U2>", "user_id": "U1"})

    assert response.status_code == 200
    body = response.json()
    assert body["response_type"] == "in_channel"
    assert body["text"].startswith("Queue added: *Fix-bug* (ID: 1)")
    assert engine.registry.get(1).owner == "U1"

    response = client.post("/queue", data={"text": "queue approve 1", "user_id": "U2", "channel_id": "C1"})
    assert response.json()["text"].startswith("Queue 1 approved and tag removed.")


def test_queue_endpoint_errors(client: TestClient, mock_verify_slack_request):
    """Test errors of the form-encoded endpoint."""
    response = client.post("/queue", data={"text": "dance", "user_id": "U1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid command"}

    response = client.post("/queue", data={"text": "list"})
    assert response.status_code == 400

    response = client.post("/queue", data={"text": "remove 3", "user_id": "U1"})
    assert response.status_code == 200
    assert response.json()["text"] == "Queue not found."


def test_queue_endpoint_invalid_signature(client: TestClient):
    """Test that the form endpoint verifies signatures too."""
    with patch("review_queue.webhook.server.verify_slack_request", new=AsyncMock(return_value=False)):
        response = client.post("/queue", data={"text": "list", "user_id": "U1"})
    assert response.status_code == 401


def test_many_deliveries_each_add_one_entry(
    client: TestClient, mock_verify_slack_request, engine: QueueLifecycleEngine
):
    """Test that many deliveries in a row each create one entry."""
    for i in range(20):
        client.post("/slack/events", content=json.dumps(_message_event(f"queue add T{i} https://x")))

    assert [entry.id for entry in engine.registry.snapshot()] == list(range(1, 21))
