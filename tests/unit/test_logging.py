from __future__ import annotations

import json
import logging

from tripbench.utils.logging import JsonFormatter, _json_formatter, configure_logging, get_logger

EXPECTED_RUN = 3
EXPECTED_ORDER_ID = 42


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.run = EXPECTED_RUN
    record.strategy = "parallel"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["run"] == EXPECTED_RUN
    assert payload["strategy"] == "parallel"
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"order_id": EXPECTED_ORDER_ID}

    payload = json.loads(_json_formatter(record))

    assert payload["order_id"] == EXPECTED_ORDER_ID


def test_json_formatter_renders_non_json_values() -> None:
    record = _record()
    record.failed_branches = {"shipping"}

    payload = json.loads(_json_formatter(record))

    assert payload["failed_branches"] == "{'shipping'}"


def test_configure_logging_installs_single_json_handler_on_stderr(capsys) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="DEBUG", json_logs=True)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)

        get_logger("tripbench.test").debug("trial done", extra={"strategy": "join"})
        payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert payload["message"] == "trial done"
        assert payload["strategy"] == "join"
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_configure_logging_console_mode_uses_plain_formatter() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="WARNING")

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
