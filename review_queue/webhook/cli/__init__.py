"""Command-line interface of the webhook server."""
