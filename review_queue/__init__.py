"""Slack review queue bot.

The :mod:`review_queue.coordinator` package holds the queue registry, command
parser and lifecycle engine. :mod:`review_queue.webhook` exposes them to Slack
through a FastAPI webhook server.
"""

__version__ = "0.1.0"
