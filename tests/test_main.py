from __future__ import annotations

import logging

import pytest

from vibe_viewer.config import DEFAULT_FEED_URL, PRICE_HISTORY_CAPACITY
from vibe_viewer.main import build_parser, cli, settings_from_args, setup_logging


def test_defaults_produce_default_settings() -> None:
    args = build_parser().parse_args([])
    settings = settings_from_args(args)

    assert settings.url == DEFAULT_FEED_URL
    assert settings.history_capacity == PRICE_HISTORY_CAPACITY
    assert args.simulate is False


def test_cli_overrides_produce_expected_settings() -> None:
    args = build_parser().parse_args(
        [
            "--url",
            "ws://example:9000/socket.io/?EIO=4&transport=websocket",
            "--simulate",
            "--seed",
            "7",
            "--interval",
            "250",
            "--history",
            "120",
            "--tx-log",
            "20",
            "--scan-log",
            "5",
        ]
    )
    settings = settings_from_args(args)

    assert settings.url == "ws://example:9000/socket.io/?EIO=4&transport=websocket"
    assert settings.tick_interval_ms == 250
    assert settings.history_capacity == 120
    assert settings.tx_log_capacity == 20
    assert settings.scan_log_capacity == 5
    assert args.simulate is True
    assert args.seed == 7


@pytest.mark.parametrize("flag", ["--history", "--tx-log", "--scan-log"])
def test_cli_rejects_non_positive_capacity(flag: str) -> None:
    with pytest.raises(SystemExit):
        cli([flag, "0"])


def test_setup_logging_writes_to_file(tmp_path) -> None:
    log_file = tmp_path / "viewer.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("info", str(log_file))
        logging.getLogger("vibe_viewer.test").info("hello")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    assert "vibe_viewer.test | hello" in log_file.read_text(encoding="utf-8")
