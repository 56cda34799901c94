"""Slack webhook server subpackage.

Contains the FastAPI webhook app, event models, the command handler and the
CLI that receive Slack Events API requests and answer queue commands.
"""
