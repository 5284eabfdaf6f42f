"""
Tests for structured logging: record shape, stream, and per-run context.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path

import structlog
from structlog.testing import capture_logs

from dsci_ml.dsci_logging import bind_run, get_logger, unbind_run
from dsci_ml.dsci_logging.logger import build_processors


def _render(event: str, log_format: str = "json", **fields):
    event_dict = {"event": event, **fields}
    for processor in build_processors(log_format):
        event_dict = processor(None, "warning", event_dict)
    return event_dict


def test_json_record_shape():
    record = json.loads(_render("tuning_k_skipped", skipped=[40], max_k=36, logger="dsci_ml.test"))
    assert record["event_type"] == "tuning_k_skipped"
    assert "event" not in record
    assert record["level"] == "warning"
    assert record["logger"] == "dsci_ml.test"
    assert record["skipped"] == [40]
    # ISO 8601 with UTC offset
    assert datetime.fromisoformat(record["timestamp"]).utcoffset() is not None


def test_explicit_timestamp_is_kept():
    record = json.loads(_render("ols_fitted", timestamp="2024-01-01T00:00:00+00:00"))
    assert record["timestamp"] == "2024-01-01T00:00:00+00:00"


def test_console_format_is_not_json():
    line = _render("ols_fitted", log_format="console", n_samples=10)
    assert "ols_fitted" in line
    assert not line.lstrip().startswith("{")


def test_bind_run_sets_and_clears_context():
    structlog.contextvars.clear_contextvars()
    try:
        bind_run("classify", 7)
        assert structlog.contextvars.get_contextvars() == {"command": "classify", "random_seed": 7}
    finally:
        unbind_run()
    assert structlog.contextvars.get_contextvars() == {}


def test_bind_run_logger_carries_command_and_seed():
    with capture_logs() as logs:
        bind_run("knn-regress", 3, dataset="houses.csv").info("cli_start")
    unbind_run()
    assert logs == [
        {
            "event": "cli_start",
            "log_level": "info",
            "command": "knn-regress",
            "random_seed": 3,
            "dataset": "houses.csv",
            "logger": "dsci_ml.run",
        }
    ]


def test_get_logger_binds_module_name():
    with capture_logs() as logs:
        get_logger("dsci_ml.example").warning("dataset_loaded", rows=3)
    assert logs[0]["logger"] == "dsci_ml.example"
    assert logs[0]["rows"] == 3


def _subprocess_env():
    root = str(Path(__file__).resolve().parents[1])
    pythonpath = os.pathsep.join(p for p in (root, os.environ.get("PYTHONPATH", "")) if p)
    return {**os.environ, "LOG_FORMAT": "json", "LOG_LEVEL": "INFO", "PYTHONPATH": pythonpath}


def test_records_go_to_stderr_as_json():
    code = (
        "from dsci_ml.dsci_logging import get_logger\n"
        "get_logger('dsci_ml.check').warning('ols_ill_conditioned', condition_number=1e9)\n"
    )
    proc = subprocess.run(
        [sys.executable, "-c", code],
        capture_output=True,
        text=True,
        env=_subprocess_env(),
        check=True,
    )
    assert proc.stdout == ""
    record = json.loads(proc.stderr.strip().splitlines()[-1])
    assert record["event_type"] == "ols_ill_conditioned"
    assert record["logger"] == "dsci_ml.check"
    assert record["condition_number"] == 1e9
