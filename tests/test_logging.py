import json
import logging

from dailyproxy.logging_conf import JsonFormatter


def test_json_formatter_includes_extras():
    record = logging.LogRecord("dailyproxy.downstream", logging.INFO, __file__, 1, "Downstream fetch finished", None, None)
    record.outcome = "ok"
    record.duration_ms = 12
    line = json.loads(JsonFormatter().format(record))
    assert line["level"] == "INFO"
    assert line["logger"] == "dailyproxy.downstream"
    assert line["message"] == "Downstream fetch finished"
    assert line["outcome"] == "ok"
    assert line["duration_ms"] == 12
    assert "state" not in line
