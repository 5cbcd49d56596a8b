"""
Accessor: the caller-facing snapshot returned by a PropertyBroker lookup.
"""
import inspect
import logging
import types
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from propbroker.kinds import UNDEFINED, PropertyKind, classify
from propbroker.path_resolver import resolve
from propbroker.records import PropertyRecord

if TYPE_CHECKING:
    from propbroker.readiness import ReadinessEngine
    from propbroker.registry import PropertyRegistry

logger = logging.getLogger(__name__)


class Accessor:
    """Detached view of a PropertyRecord at the time it was created.

    ``id``, ``path``, ``context``, ``value`` and ``kind`` are plain copies;
    assigning to them changes neither the record nor the context graph.
    Operations always act on the underlying record.
    """

    def __init__(self, record: PropertyRecord, registry: 'PropertyRegistry', engine: 'ReadinessEngine'):
        self.id = record.id
        self.path = record.path
        self.context = record.context
        self.value = record.value
        self.kind = record.kind
        self._record = record
        self._registry = registry
        self._engine = engine

    def get_value(self, default: Any = None) -> Any:
        """Current value at the path (re-resolved now), or ``default`` if absent."""
        value = resolve(self._record.path, self._record.context)
        if value is UNDEFINED:
            return default
        return value

    def get_kind(self) -> PropertyKind:
        return classify(resolve(self._record.path, self._record.context))

    def extend(self, new_value: Any = UNDEFINED) -> Any:
        """Create the path's missing segments and return the value at the path.

        The last segment is set to ``new_value`` (a fresh dict by default),
        intermediate ones to fresh dicts. A value that already exists is
        returned unchanged, never overwritten.
        """
        if new_value is UNDEFINED:
            new_value = {}
        value = resolve(self._record.path, self._record.context, new_value)
        self._registry.update(self._record, value)
        self.value = value
        self.kind = self._record.kind
        return value

    def invoke(self, this_arg: Any = None, args: Optional[Iterable] = None) -> bool:
        """Call the value with ``args`` if it is callable.

        A plain Python function is bound to ``this_arg`` first (so it
        receives it as its first parameter) unless ``this_arg`` is None.
        Such a function must therefore accept the receiver: ``def f(a, b)``
        invoked with a receiver raises TypeError from the call itself.
        Builtins, bound methods, classes and other callables cannot be
        rebound; they are called with ``args`` only and ``this_arg`` is
        ignored.

        Returns:
            True if the call happened, False if the value is not callable.
        """
        target = self._record.value
        if not callable(target):
            return False
        if this_arg is not None and inspect.isfunction(target):
            target = types.MethodType(target, this_arg)
        target(*(args or ()))
        return True

    def invoke_with_args(self, this_arg: Any = None, *args: Any) -> bool:
        return self.invoke(this_arg, args)

    def when_ready(self, callback: Optional[Callable[['Accessor'], None]] = None) -> bool:
        """Run ``callback`` once the value exists.

        If the value was present when this accessor was taken, the callback
        runs immediately with this accessor and True is returned. Otherwise
        the callback is handed to the readiness engine and False is returned;
        it will receive a fresh accessor on the tick that finds the value.
        Without a callback this only reports readiness.
        """
        is_callable = callable(callback)
        if self.kind is not PropertyKind.UNDEFINED:
            if is_callable:
                callback(self)
            return True
        if is_callable:
            self._engine.schedule(self._record.id, callback)
        return False

    @property
    def is_ready(self) -> bool:
        return self.kind is not PropertyKind.UNDEFINED

    def __repr__(self) -> str:
        return f"Accessor(id={self.id}, path={self.path!r}, kind={self.kind})"
