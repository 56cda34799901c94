"""
FastAPI web server factory for the review queue bot.

The factory owns the single FastAPI instance of the process and applies the
CORS settings. Routes are registered by :func:`review_queue.webhook.server.create_slack_app`.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from review_queue import __version__
from review_queue._base import BaseServerFactory
from review_queue.settings import SettingModel, get_settings

_LOG: Final[logging.Logger] = logging.getLogger(__name__)

_WEB_SERVER_INSTANCE: Optional[FastAPI] = None


class WebServerFactory(BaseServerFactory[FastAPI]):
    @staticmethod
    def create(**kwargs) -> FastAPI:
        """
        Create and configure the web API server.

        Args:
            **kwargs: ``settings`` may carry a :class:`SettingModel`; the global
                settings are used otherwise.

        Returns:
            Configured FastAPI server instance
        """
        global _WEB_SERVER_INSTANCE
        assert _WEB_SERVER_INSTANCE is None, "It is not allowed to create more than one instance of web server."

        settings: SettingModel = kwargs.get("settings") or get_settings()

        _WEB_SERVER_INSTANCE = FastAPI(
            title="Review Queue Bot",
            description="A FastAPI web server that answers review queue commands posted in Slack",
            version=__version__,
        )

        _WEB_SERVER_INSTANCE.add_middleware(
            CORSMiddleware,
            allow_origins=SettingModel.split_csv(settings.cors_allow_origins),
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=SettingModel.split_csv(settings.cors_allow_methods),
            allow_headers=SettingModel.split_csv(settings.cors_allow_headers),
        )
        _LOG.debug("Created web server instance")
        return _WEB_SERVER_INSTANCE

    @staticmethod
    def get() -> FastAPI:
        """
        Get the web API server instance

        Returns:
            Configured FastAPI server instance
        """
        assert _WEB_SERVER_INSTANCE is not None, "It must be created web server first."
        return _WEB_SERVER_INSTANCE

    @staticmethod
    def reset() -> None:
        """
        Reset the singleton instance (for testing purposes).
        """
        global _WEB_SERVER_INSTANCE
        _WEB_SERVER_INSTANCE = None


web_factory: Final[Type[WebServerFactory]] = WebServerFactory
