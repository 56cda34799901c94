"""Factory pattern implementation for creating Slack clients.

The webhook server only needs an :class:`AsyncWebClient` to post replies.
Factories keep client construction out of the request path and let tests
inject a mock client instead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from slack_sdk.http_retry.async_handler import AsyncRetryHandler
from slack_sdk.http_retry.builtin_async_handlers import (
    AsyncConnectionErrorRetryHandler,
    AsyncRateLimitErrorRetryHandler,
    AsyncServerErrorRetryHandler,
)
from slack_sdk.web.async_client import AsyncWebClient

from review_queue.settings import get_settings

__all__: list[str] = [
    "SlackClientFactory",
    "DefaultSlackClientFactory",
    "RetryableSlackClientFactory",
    "create_slack_client",
]


class SlackClientFactory(ABC):
    """Abstract base class for Slack client factories."""

    @abstractmethod
    def create_async_client(self, token: Optional[str] = None) -> AsyncWebClient:
        """Create and return an AsyncWebClient instance.

        Parameters
        ----------
        token : Optional[str], optional
            Slack token to use for authentication. If not provided, will try to
            resolve it from settings.

        Returns
        -------
        AsyncWebClient
            Initialized Slack AsyncWebClient instance.

        Raises
        ------
        ValueError
            If no token is supplied and none can be resolved from settings.
        """


class DefaultSlackClientFactory(SlackClientFactory):
    """Create plain clients without retry handlers."""

    def _resolve_token(self, token: Optional[str] = None) -> str:
        """Resolve the Slack token from provided value or settings.

        Raises
        ------
        ValueError
            If no token can be resolved
        """
        if token:
            return token
        settings_token = get_settings().slack_bot_token
        if settings_token is None or not settings_token.get_secret_value():
            raise ValueError(
                "Slack token not found. Provide one via the 'token' argument or set "
                "the SLACK_BOT_TOKEN/SLACK_TOKEN environment variable."
            )
        return settings_token.get_secret_value()

    def create_async_client(self, token: Optional[str] = None) -> AsyncWebClient:
        return AsyncWebClient(token=self._resolve_token(token))


class RetryableSlackClientFactory(DefaultSlackClientFactory):
    """Create clients that retry on rate limits, server errors and connection errors.

    Parameters
    ----------
    max_retry_count : int
        Attempts per retry handler (default: 3)
    """

    def __init__(self, max_retry_count: int = 3) -> None:
        if max_retry_count < 0:
            raise ValueError("Retry count must be non-negative")
        self.max_retry_count = max_retry_count

    def _retry_handlers(self) -> list[AsyncRetryHandler]:
        return [
            AsyncRateLimitErrorRetryHandler(max_retry_count=self.max_retry_count),
            AsyncServerErrorRetryHandler(max_retry_count=self.max_retry_count),
            AsyncConnectionErrorRetryHandler(max_retry_count=self.max_retry_count),
        ]

    def create_async_client(self, token: Optional[str] = None) -> AsyncWebClient:
        return AsyncWebClient(token=self._resolve_token(token), retry_handlers=self._retry_handlers())


def create_slack_client(token: Optional[str] = None, retry: int = 0) -> AsyncWebClient:
    """Create the client used to deliver replies.

    Parameters
    ----------
    token : Optional[str]
        Slack bot token; resolved from settings when None
    retry : int
        Retry attempts for Slack API operations. 0 disables retries.

    Raises
    ------
    ValueError
        If no token is found or ``retry`` is negative
    """
    if retry < 0:
        raise ValueError("Retry count must be non-negative")
    factory: SlackClientFactory = RetryableSlackClientFactory(retry) if retry else DefaultSlackClientFactory()
    return factory.create_async_client(token)
