"""Unit tests for structured JSON logging"""

import json
import logging
from bookkeeping_gateway.infrastructure.observability.logging import CustomJsonFormatter, setup_logging


def test_json_formatter_adds_service_fields():
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    record = logging.LogRecord("bookkeeping", logging.WARNING, __file__, 1, "Transition completed", None, None)
    record.target = "APPROVED"

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Transition completed"
    assert payload["level"] == "WARNING"
    assert payload["service"] == "bookkeeping-gateway"
    assert payload["target"] == "APPROVED"
    assert "timestamp" in payload


def test_setup_logging_installs_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("DEBUG")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
