"""Structured logging tests — JSON shape and extra keys."""

import json
import logging

from formflow.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "formflow.test", logging.INFO, __file__, 1, "Submission reject", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_flow_extras():
    line = JSONFormatter().format(
        _record(flow_id="f-1", step=2, outcome="reject", error_fields=["price"]),
    )
    log = json.loads(line)
    assert log["message"] == "Submission reject"
    assert log["level"] == "INFO"
    assert log["flow_id"] == "f-1"
    assert log["step"] == 2
    assert log["error_fields"] == ["price"]


def test_json_formatter_omits_missing_extras():
    log = json.loads(JSONFormatter().format(_record()))
    assert "flow_id" not in log
    assert "entity_id" not in log
