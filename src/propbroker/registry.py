"""
PropertyRegistry: id-addressable store of every lookup the broker performed.

The registry is an explicit object owned by a PropertyBroker and passed by
reference to the readiness engine. Tests create isolated instances.
"""
import logging
import threading
from typing import Any, Dict, List, Optional

from propbroker.records import PropertyRecord

logger = logging.getLogger(__name__)


class PropertyRegistry:
    """Unbounded mapping of record id to PropertyRecord.

    Ids come from a counter starting at 0 that is never reset, so an id is
    never handed out twice even after clear(). Records are never evicted.

    Thread safety: counter and mapping are guarded by one re-entrant lock,
    since the readiness engine may update records from a timer thread.
    """

    def __init__(self):
        self._records: Dict[int, PropertyRecord] = {}
        self._next_id: int = 0
        self._lock = threading.RLock()

    def register(self, value: Any, path: str, context: Any) -> PropertyRecord:
        """Create and store a record for one lookup event."""
        with self._lock:
            record = PropertyRecord(id=self._next_id, path=path, context=context, value=value)
            self._records[record.id] = record
            self._next_id += 1
        logger.debug(f"Registered property: id={record.id}, path={path!r}, kind={record.kind.value}")
        return record

    def get(self, record_id: Any) -> Optional[PropertyRecord]:
        """Look up a record by id.

        Returns:
            The record, or None for unknown, negative, or non-integer ids.
        """
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            return None
        with self._lock:
            return self._records.get(record_id)

    def update(self, record: PropertyRecord, value: Any) -> None:
        """Replace a record's value; id, path and context are untouched."""
        with self._lock:
            record.update(value)
        logger.debug(f"Updated property: id={record.id}, path={record.path!r}, kind={record.kind.value}")

    def describe(self) -> List[Dict]:
        """Introspection dump of all records, ordered by id."""
        with self._lock:
            return [self._records[i].to_dict() for i in sorted(self._records)]

    def clear(self) -> None:
        """Drop all records. The id counter keeps counting. For testing only."""
        with self._lock:
            self._records.clear()
        logger.debug("Cleared all property records (id counter preserved)")

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: Any) -> bool:
        return self.get(record_id) is not None
