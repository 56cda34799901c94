"""Typed options of the ``review-queue-bot`` command.

``_parse_args`` validates the argparse result into an immutable
:class:`WebhookServerCliOptions`, so ``main`` never reads a raw namespace.

Examples
--------
.. code-block:: python

    from review_queue.webhook.cli.options import _parse_args

    opts = _parse_args(["--port", "3001", "--retry", "0"])
    assert (opts.port, opts.retry) == (3001, 0)
"""

from __future__ import annotations

import argparse

from pydantic import BaseModel, ConfigDict, Field


class WebhookServerCliOptions(BaseModel):
    """Options controlling how the review queue bot is served.

    Logging options left as None are filled from the ``LOG_*`` settings when
    logging is configured.

    Fields
    ------
    host, port : str, int
        Interface and port uvicorn binds (default: 0.0.0.0:3000)
    log_level, log_file, log_dir, log_format : str | None
        Overrides of the ``LOG_*`` settings
    slack_token : str | None
        Exported as ``SLACK_BOT_TOKEN`` before the .env file is read, so a
        token in .env still wins
    env_file, no_env_file : str, bool
        Where to read the .env file from, or skip it entirely
    retry : int
        Attempts of each ``chat.postMessage`` retry handler; 0 posts replies
        without retrying
    """

    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    log_level: str | None = None
    log_file: str | None = None
    log_dir: str | None = None
    log_format: str | None = None

    slack_token: str | None = None

    env_file: str = ".env"
    no_env_file: bool = False

    retry: int = Field(3, ge=0)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def deserialize(cls, ns: argparse.Namespace) -> "WebhookServerCliOptions":
        """Keep the namespace attributes that are options and validate them."""
        data = {name: getattr(ns, name) for name in cls.model_fields.keys() if hasattr(ns, name)}
        return cls(**data)
