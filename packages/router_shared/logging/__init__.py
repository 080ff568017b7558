"""Public logging API for router components.

Wraps Python's ``logging`` module with stdout defaults and ``contextvars``
based structured context propagation.
"""

from . import fields
from .config import configure_logging, get_logger
from .context import bind_context, clear_context, get_context, log_context

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "fields",
    "get_context",
    "get_logger",
    "log_context",
]
