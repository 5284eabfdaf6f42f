"""
Structured logging for fits, tuning runs and CLI commands.

JSON records carry level, an ISO 8601 timestamp, event_type (the first
argument to the log call) and the emitting module under "logger". CLI runs
add the command and random seed through bind_run(), so a tuning event can be
traced back to the invocation that produced it:

    {"event_type": "tuning_k_done", "task": "classification", "k_count": 15,
     "command": "classify", "random_seed": 1, "level": "info",
     "logger": "dsci_ml.model_selection.tuning", "timestamp": "..."}

Records go to stderr; stdout is reserved for the CLI report.
LOG_LEVEL picks the threshold, LOG_FORMAT=console switches to a readable renderer.

Only stdlib logging and structlog are imported here; other dsci_ml modules import this one.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

RUN_LOGGER_NAME = "dsci_ml.run"


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog calls the first argument 'event'; records expose it as event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def build_processors(log_format: str = LOG_FORMAT) -> list[Any]:
    """Processor chain ending in a JSON renderer, or a console renderer for any other format."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
    ]
    if log_format == "json":
        processors.append(_normalize_event)
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_structlog() -> None:
    structlog.configure(
        processors=build_processors(LOG_FORMAT),
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("tuning_k_scored", n_neighbors=5, mean=0.86)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_run(command: str, seed: int | None = None, **context: Any) -> structlog.BoundLogger:
    """
    Logger for one CLI run with command and random_seed bound.

    The same keys are also bound as context variables, so events logged by
    library modules during the run carry them; unbind_run() removes them.
    """
    run_context = {"command": command, "random_seed": seed, **context}
    structlog.contextvars.bind_contextvars(**run_context)
    return get_logger(RUN_LOGGER_NAME).bind(**run_context)


def unbind_run() -> None:
    structlog.contextvars.clear_contextvars()
