from __future__ import annotations

import argparse

import pytest
from pydantic import ValidationError

from review_queue.webhook.cli.models import WebhookServerCliOptions
from review_queue.webhook.cli.options import _parse_args


def test_deserialize_basic() -> None:
    ns = argparse.Namespace(
        host="127.0.0.1",
        port=4000,
        log_level="DEBUG",
        slack_token="xoxb-999",
        env_file="/tmp/.env",
        no_env_file=True,
        retry=5,
        ignored="SHOULD_BE_IGNORED",
    )

    cfg = WebhookServerCliOptions.deserialize(ns)

    assert cfg.host == "127.0.0.1"
    assert cfg.port == 4000
    assert cfg.log_level == "DEBUG"
    assert cfg.slack_token == "xoxb-999"
    assert cfg.env_file == "/tmp/.env"
    assert cfg.no_env_file is True
    assert cfg.retry == 5
    assert not hasattr(cfg, "ignored")


def test_options_are_frozen() -> None:
    cfg = WebhookServerCliOptions()
    with pytest.raises(ValidationError):
        cfg.port = 1


@pytest.mark.parametrize("field, value", [("port", 0), ("port", 70000), ("retry", -1)])
def test_out_of_range_values_are_rejected(field: str, value: int) -> None:
    with pytest.raises(ValidationError):
        WebhookServerCliOptions(**{field: value})


def test_parse_args_defaults() -> None:
    opts = _parse_args([])

    assert opts.host == "0.0.0.0"
    assert opts.port == 3000
    assert opts.retry == 3
    assert opts.env_file == ".env"
    assert opts.no_env_file is False
    assert opts.slack_token is None
    assert opts.log_level is None
    assert opts.log_dir is None


def test_parse_args_custom() -> None:
    opts = _parse_args(
        [
            "--host",
            "localhost",
            "--port",
            "8080",
            "--no-env-file",
            "--slack-token",
            "xoxb-cli",
            "--retry",
            "0",
            "--log-level",
            "debug",
        ]
    )

    assert (opts.host, opts.port, opts.retry) == ("localhost", 8080, 0)
    assert opts.no_env_file is True
    assert opts.slack_token == "xoxb-cli"
    assert opts.log_level == "DEBUG"
