"""
Default context management for path lookups.

A lookup without an explicit context resolves against a default root. The
root is chosen in this order:

1. The innermost context_scope() active in the current execution context
2. The process-wide default set with set_default_context()
3. The broker's own root namespace (supplied by the caller as ``fallback``)

context_scope() uses contextvars, so overrides are local to the current
thread or asyncio task. The process-wide default is shared by all threads.
"""

import contextvars
import logging
from contextlib import contextmanager
from typing import Any, Iterator

from propbroker.kinds import UNDEFINED

logger = logging.getLogger(__name__)

current_context_scope: contextvars.ContextVar = contextvars.ContextVar(
    'current_context_scope', default=UNDEFINED
)

_process_default_context: Any = UNDEFINED


def set_default_context(context: Any) -> None:
    """Set the process-wide default root for lookups without a context."""
    global _process_default_context
    _process_default_context = context
    logger.debug(f"Default context set: {type(context).__name__}")


def get_default_context() -> Any:
    """Get the process-wide default root, or UNDEFINED if none was set."""
    return _process_default_context


def clear_default_context() -> None:
    """Remove the process-wide default root."""
    global _process_default_context
    _process_default_context = UNDEFINED


@contextmanager
def context_scope(context: Any) -> Iterator[Any]:
    """Temporarily make ``context`` the default root for lookups.

    Usage:
        with context_scope(plugin_namespace):
            access('widgets.calendar').when_ready(render)
            # Resolves against plugin_namespace; the record keeps that
            # reference after the block exits
    """
    token = current_context_scope.set(context)
    try:
        yield context
    finally:
        current_context_scope.reset(token)


def get_scoped_context() -> Any:
    """Innermost context_scope() value, or UNDEFINED outside any scope."""
    return current_context_scope.get()


def resolve_default_context(fallback: Any) -> Any:
    """Pick the default root for a lookup, falling back to ``fallback``."""
    scoped = current_context_scope.get()
    if scoped is not UNDEFINED:
        return scoped
    if _process_default_context is not UNDEFINED:
        return _process_default_context
    return fallback
