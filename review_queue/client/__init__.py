"""Slack Web API client construction."""

from .factory import (
    DefaultSlackClientFactory,
    RetryableSlackClientFactory,
    SlackClientFactory,
    create_slack_client,
)

__all__ = [
    "DefaultSlackClientFactory",
    "RetryableSlackClientFactory",
    "SlackClientFactory",
    "create_slack_client",
]
