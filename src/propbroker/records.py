"""
Record dataclass for the PropertyRegistry.

A PropertyRecord is the registry's memory of one lookup event: which path was
resolved against which context, and what was found there. Records are lookup
events, not a per-path cache, so resolving the same path twice produces two
records with distinct ids.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from propbroker.kinds import UNDEFINED, PropertyKind, classify


@dataclass(eq=False)
class PropertyRecord:
    """One resolved (or attempted) lookup.

    ``id``, ``path`` and ``context`` are fixed at creation. ``value`` and
    ``kind`` only change through update().
    """
    id: int
    path: str
    context: Any  # Not owned, never copied
    value: Any = UNDEFINED
    kind: PropertyKind = field(init=False)

    def __post_init__(self):
        self.kind = classify(self.value)

    @property
    def is_defined(self) -> bool:
        return self.kind is not PropertyKind.UNDEFINED

    def update(self, value: Any) -> None:
        """Replace the value and recompute its kind."""
        self.value = value
        self.kind = classify(value)

    def to_dict(self) -> Dict:
        """Export for logging and introspection (no object references)."""
        return {
            'id': self.id,
            'path': self.path,
            'kind': self.kind.value,
            'context_type': type(self.context).__name__,
        }

    def __repr__(self) -> str:
        return f"PropertyRecord(id={self.id}, path={self.path!r}, kind={self.kind.value})"
