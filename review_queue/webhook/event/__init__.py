"""Slack event handling for the review queue bot."""

from .handler import QueueCommandHandler, Reply, deliver_reply

__all__ = ["QueueCommandHandler", "Reply", "deliver_reply"]
