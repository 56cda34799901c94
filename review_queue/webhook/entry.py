"""Review queue webhook server entry point.

Starts the FastAPI webhook server that answers queue commands posted in Slack
channels. The queue lives in memory for the life of the process.

Quick Start Examples
====================

**1. Run the server:**

    .. code-block:: bash

        python -m review_queue.webhook --host 0.0.0.0 --port 3000

**2. Load a custom .env file and log verbosely:**

    .. code-block:: bash

        review-queue-bot --env-file /etc/review-queue/.env --log-level DEBUG

**3. From Python:**

    .. code-block:: python

        import asyncio
        from review_queue.webhook.entry import run_slack_server

        asyncio.run(run_slack_server(port=3000, token="xoxb-...", retry=3))

Environment Variables
======================
- **SLACK_BOT_TOKEN**: Slack bot token (required, xoxb-...)
- **SLACK_SIGNING_SECRET**: Slack signing secret for webhook verification (required)
- **SLACK_BOT_ID**: The bot's user id (optional, looked up with ``auth.test`` otherwise)
- **QUEUE_COMMAND_PREFIX**: Prefix token of chat commands (default: queue)
"""

import asyncio
import logging
import os
import pathlib
from typing import Final, Optional

import uvicorn
from dotenv import load_dotenv

from review_queue.client import create_slack_client
from review_queue.coordinator import QueueLifecycleEngine, QueueRegistry
from review_queue.logging.config import setup_logging_from_args
from review_queue.settings import get_settings

from .cli.options import _parse_args
from .server import create_slack_app, resolve_bot_user_id

__all__: list[str] = [
    "run_slack_server",
    "main",
]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


async def run_slack_server(
    host: str = "0.0.0.0",
    port: int = 3000,
    token: Optional[str] = None,
    retry: int = 3,
) -> None:
    """Run the review queue webhook server.

    Parameters
    ----------
    host : str, optional
        The host interface to listen on. Default is "0.0.0.0" (all interfaces).
    port : int, optional
        The port number to listen on. Default is 3000.
    token : Optional[str], optional
        The Slack bot token to use. If None, uses SLACK_BOT_TOKEN from settings.
    retry : int, optional
        Number of retry attempts for Slack API operations. Default is 3.
        Set to 0 to disable retries.

    Raises
    ------
    ValueError
        If no token can be resolved or ``retry`` is negative.
    """
    _LOG.info(f"Starting review queue server on {host}:{port}")

    settings = get_settings()
    client = create_slack_client(token, retry=retry)
    bot_user_id = settings.slack_bot_id or await resolve_bot_user_id(client)
    if bot_user_id is None:
        _LOG.warning("Bot user id unknown; only bot_id and subtype filters apply to incoming messages")

    app = create_slack_app(
        engine=QueueLifecycleEngine(QueueRegistry()),
        client=client,
        settings=settings,
        bot_user_id=bot_user_id,
    )

    config = uvicorn.Config(app=app, host=host, port=port)
    server = uvicorn.Server(config=config)
    await server.serve()


def main(argv: Optional[list[str]] = None) -> None:
    """Run the review queue webhook server as a standalone application.

    This handles:
    1. Parsing command-line arguments
    2. Loading environment variables from .env file
    3. Setting up logging from the CLI options and the ``LOG_*`` settings
    4. Starting the server

    Parameters
    ----------
    argv : Optional[list[str]], optional
        Command-line arguments to parse. If None, uses sys.argv.
    """
    args = _parse_args(argv)

    # Set Slack token from command line argument first (as fallback)
    if args.slack_token:
        os.environ["SLACK_BOT_TOKEN"] = args.slack_token

    # .env values override CLI arguments
    env_path: Optional[pathlib.Path] = None
    if not args.no_env_file:
        env_path = pathlib.Path(args.env_file)
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=True)

    settings = get_settings(env_file=args.env_file, no_env_file=args.no_env_file, force_reload=True)

    # Logging needs the settings, so the steps above are reported only now
    setup_logging_from_args(args, settings)
    if args.slack_token:
        _LOG.info("Using Slack token from command line argument (fallback)")
    if env_path is not None:
        if env_path.exists():
            _LOG.info(f"Loaded environment variables from {env_path.resolve()}")
        else:
            _LOG.warning(f"Environment file not found: {env_path.resolve()}")

    # The token is resolved from settings, where .env takes priority over --slack-token
    asyncio.run(run_slack_server(host=args.host, port=args.port, retry=args.retry))


if __name__ == "__main__":
    main()
