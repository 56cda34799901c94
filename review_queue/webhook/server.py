"""Slack webhook server implementation (FastAPI).

This module wires the review queue coordinator to Slack. It receives Events
API requests, verifies their signatures, runs queue commands found in channel
messages and posts the replies back.

Features
========
- Signature verification using Slack's signing secret
- URL verification challenge handling
- Chat commands from ``message`` events (``queue add ...``)
- Slash-command style endpoint (``/queue``) driving the same registry
- Health check endpoint (``/health``)

Commands run in the threadpool so concurrent deliveries are processed in
parallel; replies are posted from a background task once the command has
returned, never while the registry lock is held.

Environment Variables
=====================
- ``SLACK_SIGNING_SECRET``: Required for request verification
- ``SLACK_BOT_TOKEN`` / ``SLACK_TOKEN``: Slack API token used to post replies
- ``SLACK_BOT_ID``: The bot's own user id, whose messages are ignored
- ``QUEUE_COMMAND_PREFIX``: Prefix token of chat commands (default: ``queue``)

Quick Examples
==============

.. code-block:: bash

    # URL verification
    curl -X POST http://localhost:3000/slack/events \
         -H "Content-Type: application/json" \
         -H "X-Slack-Request-Timestamp: 1700000000" \
         -H "X-Slack-Signature: v0=..." \
         -d '{"type": "url_verification", "challenge": "abc123", "token": "..."}'

    # Health check
    curl http://localhost:3000/health
"""

from __future__ import annotations

import json
import logging
from typing import Final, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slack_sdk.errors import SlackApiError
from slack_sdk.signature import SignatureVerifier
from slack_sdk.web.async_client import AsyncWebClient

from review_queue.coordinator import QueueLifecycleEngine, QueueRegistry
from review_queue.settings import SettingModel, get_settings

from .app import web_factory
from .event import QueueCommandHandler, Reply, deliver_reply
from .models import SlackEventModel, UrlVerificationModel, deserialize

__all__: list[str] = [
    "create_slack_app",
    "verify_slack_request",
    "resolve_bot_user_id",
]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


async def verify_slack_request(request: Request, signing_secret: str | None = None) -> bool:
    """Verify that the request is coming from Slack.

    Parameters
    ----------
    request : Request
        The FastAPI request object
    signing_secret : str | None
        The Slack signing secret to use for verification. If None, will use SLACK_SIGNING_SECRET from settings.

    Returns
    -------
    bool
        True if the request is valid, False otherwise
    """
    if signing_secret is None:
        settings = get_settings()
        if settings.slack_signing_secret:
            signing_secret = settings.slack_signing_secret.get_secret_value()

        if not signing_secret:
            _LOG.error("SLACK_SIGNING_SECRET not set in settings or environment")
            return False

    verifier = SignatureVerifier(signing_secret)

    # Get request headers and body
    signature = request.headers.get("X-Slack-Signature", "")
    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")

    # Read the body
    body = await request.body()
    body_str = body.decode("utf-8")

    # Verify the request
    return verifier.is_valid(signature=signature, timestamp=timestamp, body=body_str)


async def resolve_bot_user_id(client: AsyncWebClient) -> Optional[str]:
    """Look up the bot's own user id with ``auth.test``.

    Returns
    -------
    Optional[str]
        The user id, or None if authentication failed
    """
    try:
        response = await client.auth_test()
    except SlackApiError as e:
        _LOG.error(f"Failed to authenticate bot: {e.response.get('error', e)}")
        return None
    return response.get("user_id")


def create_slack_app(
    engine: Optional[QueueLifecycleEngine] = None,
    client: Optional[AsyncWebClient] = None,
    settings: Optional[SettingModel] = None,
    bot_user_id: Optional[str] = None,
) -> FastAPI:
    """Create a FastAPI app answering queue commands from Slack.

    Parameters
    ----------
    engine : Optional[QueueLifecycleEngine]
        Engine to run commands with. A fresh engine over an empty registry is
        created when None.
    client : Optional[AsyncWebClient]
        Client used to post replies to channels. Without a client, chat replies
        are logged and dropped.
    settings : Optional[SettingModel]
        Settings to use instead of the global ones
    bot_user_id : Optional[str]
        The bot's own user id. Falls back to ``SLACK_BOT_ID``.

    Returns
    -------
    FastAPI
        The FastAPI app
    """
    settings = settings or get_settings()
    engine = engine or QueueLifecycleEngine(QueueRegistry())
    handler = QueueCommandHandler(
        engine,
        prefix=settings.queue_command_prefix,
        bot_user_id=bot_user_id or settings.slack_bot_id,
    )

    app = web_factory.create(settings=settings)
    app.state.engine = engine
    app.state.handler = handler
    app.state.slack_client = client

    def _schedule_reply(background_tasks: BackgroundTasks, reply: Reply) -> None:
        slack_client: Optional[AsyncWebClient] = app.state.slack_client
        if slack_client is None:
            _LOG.error(f"Slack client not initialized, dropping reply to channel {reply.channel}")
            return
        background_tasks.add_task(deliver_reply, slack_client, reply)

    @app.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint for monitoring and load balancers."""
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "status": "healthy",
                "service": "review-queue-bot",
                "components": {
                    "registry": {"entries": len(engine.registry)},
                    "slack_client": "initialized" if app.state.slack_client is not None else "not_initialized",
                },
            },
        )

    @app.post("/slack/events")
    async def slack_events(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
        """Handle Slack Events API requests.

        Verifies the request signature, answers URL verification challenges
        and runs queue commands found in message events.

        Examples
        --------
        .. code-block:: bash

            curl -X POST http://localhost:3000/slack/events \
                 -H "Content-Type: application/json" \
                 -H "X-Slack-Request-Timestamp: 1700000000" \
                 -H "X-Slack-Signature: v0=..." \
                 -d '{"type": "event_callback", "event": {"type": "message", "text": "queue list"}}'
        """
        if not await verify_slack_request(request):
            _LOG.warning("Invalid Slack request signature")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid request signature")

        body = await request.body()
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            _LOG.error(f"Failed to parse Slack event body: {e}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")

        try:
            envelope = deserialize(payload)
        except ValidationError as e:
            envelope_type = payload.get("type") if isinstance(payload, dict) else None
            _LOG.warning(f"Unsupported Slack event envelope type={envelope_type}: {e.error_count()} error(s)")
            return JSONResponse(content={"status": "ignored"})

        match envelope:
            case UrlVerificationModel(challenge=challenge):
                _LOG.info("Handling URL verification challenge")
                return JSONResponse(content={"challenge": challenge})
            case SlackEventModel():
                inner_event = envelope.inner_event()
                _LOG.info(f"Received Slack event: {inner_event.type}")
                reply = await run_in_threadpool(handler.handle_event, inner_event)
                if reply is not None:
                    _schedule_reply(background_tasks, reply)

        # Return 200 OK to acknowledge receipt of the event
        return JSONResponse(content={"status": "ok"})

    @app.post("/queue")
    async def queue_command(request: Request) -> JSONResponse:
        """Handle form-encoded ``text``/``user_id`` commands (slash-command shape).

        The command prefix is optional here, so ``text=add Fix-bug <link>``
        and ``text=queue add Fix-bug <link>`` are equivalent.
        """
        if not await verify_slack_request(request):
            _LOG.warning("Invalid Slack request signature")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid request signature")

        form = await request.form()
        text = str(form.get("text", ""))
        user_id = str(form.get("user_id", ""))
        channel_id = str(form.get("channel_id", ""))
        if not user_id:
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Missing user_id"})

        reply_text = await run_in_threadpool(
            handler.handle_text, text, user=user_id, channel=channel_id, require_prefix=False
        )
        if reply_text is None:
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid command"})
        return JSONResponse(content={"response_type": "in_channel", "text": reply_text})

    return app
