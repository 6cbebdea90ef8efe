"""Minimal observability for CLI runs: JSON logging with trace context."""
import uuid
from typing import Optional

from . import logging as logging_module


def generate_trace_id() -> str:
    """Generate a new trace ID for a CLI run."""
    return str(uuid.uuid4())


def init_observability(trace_id: Optional[str] = None, level: Optional[str] = None) -> str:
    """Initialize logging and bind a trace ID to the current thread."""
    logging_module.init_logging(level)
    trace_id = trace_id or generate_trace_id()
    logging_module.set_trace_id(trace_id)
    return trace_id


__all__ = [
    "logging_module",
    "generate_trace_id",
    "init_observability",
]
