from __future__ import annotations

import json
import logging

from expensi.core.logging import (
    JsonFormatter,
    get_import_id,
    reset_import_context,
    set_import_context,
)


def test_json_formatter_emits_event_and_fields():
    record = logging.LogRecord("expensi.test", logging.INFO, __file__, 1, "import.start", None, None)
    record.event = "import.start"
    record.fields = {"import_id": "abc", "byte_size": 12, "skipped": None}

    payload = json.loads(JsonFormatter().format(record))

    assert payload["event"] == "import.start"
    assert payload["level"] == "INFO"
    assert payload["byte_size"] == 12
    assert "skipped" not in payload
    assert payload["ts"].endswith("Z")


def test_import_context_is_restored():
    assert get_import_id() is None
    tokens = set_import_context(import_id="outer", filename="a.csv")
    try:
        assert get_import_id() == "outer"
    finally:
        reset_import_context(tokens)
    assert get_import_id() is None
