"""
Dotted path resolution over arbitrary object graphs.

A context is anything that supports "get field by name": mappings are read by
key, sequences by decimal index, and every other object by attribute. When
extending, missing fields are created with the matching store operation
(item assignment or setattr). Errors raised by the host while storing (for
example extending into an ``int``) are not caught here.
"""

from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, List
import logging

from propbroker.kinds import UNDEFINED

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "."


def split_path(path: str) -> List[str]:
    """Split a dotted path into its ordered segment names."""
    return path.split(PATH_SEPARATOR)


def _is_index_segment(node: Any, name: str) -> bool:
    return (
        isinstance(node, Sequence)
        and not isinstance(node, (str, bytes))
        and name.isdecimal()
    )


def get_field(node: Any, name: str) -> Any:
    """Return ``node``'s field ``name`` or UNDEFINED if it has none."""
    if isinstance(node, Mapping):
        return node[name] if name in node else UNDEFINED
    if _is_index_segment(node, name):
        index = int(name)
        return node[index] if index < len(node) else UNDEFINED
    return getattr(node, name, UNDEFINED)


def set_field(node: Any, name: str, value: Any) -> None:
    """Store ``value`` as field ``name`` of ``node`` using the node's own semantics."""
    if isinstance(node, MutableMapping):
        node[name] = value
    elif isinstance(node, MutableSequence) and name.isdecimal():
        node[int(name)] = value
    else:
        setattr(node, name, value)


def resolve(path: str, context: Any, extend_with: Any = UNDEFINED) -> Any:
    """Walk ``path`` from ``context`` and return the value found there.

    Args:
        path: Dotted path, e.g. ``"jquery.fn.modal"``
        context: Root object the walk starts from
        extend_with: When given, missing segments are created. The last
            segment receives ``extend_with``, intermediate ones a fresh dict.

    Returns:
        The resolved (or newly created) value, or UNDEFINED when a segment is
        missing and no extension was requested. Existing values are never
        overwritten.
    """
    is_extend = extend_with is not UNDEFINED
    segments = split_path(path)
    last = len(segments) - 1
    node = context

    for position, name in enumerate(segments):
        child = get_field(node, name)
        if child is UNDEFINED:
            if not is_extend:
                return UNDEFINED
            child = extend_with if position == last else {}
            set_field(node, name, child)
            logger.debug(f"Extended '{path}': created segment '{name}' on {type(node).__name__}")
        node = child

    return node
