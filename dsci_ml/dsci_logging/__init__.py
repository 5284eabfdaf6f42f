"""
Structured logging for dsci-ml.

Use get_logger() in all modules so fitting, tuning and evaluation events
share one format; the CLI wraps each command in bind_run()/unbind_run().
"""

from dsci_ml.dsci_logging.logger import bind_run, get_logger, unbind_run

__all__ = ["bind_run", "get_logger", "unbind_run"]
