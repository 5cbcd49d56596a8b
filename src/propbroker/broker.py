"""
PropertyBroker: the public entry point.

    broker = PropertyBroker()
    broker('settings.theme', app).get_value('light')
    broker('analytics.track', window).when_ready(lambda acc: acc.invoke(None, ['pageview']))
    broker(acc.id).get_value()          # re-lookup by id, no new record

A broker owns one PropertyRegistry, one ReadinessEngine and a root namespace
used when no context is given.
"""
import logging
import threading
import types
from typing import Any, Optional

from propbroker.accessor import Accessor
from propbroker.config import BrokerConfig, get_broker_config
from propbroker.context_manager import resolve_default_context
from propbroker.kinds import UNDEFINED, is_primitive
from propbroker.path_resolver import resolve
from propbroker.readiness import ReadinessEngine
from propbroker.records import PropertyRecord
from propbroker.registry import PropertyRegistry
from propbroker.scheduler import Scheduler

logger = logging.getLogger(__name__)


class PropertyBroker:
    """Resolve, lazily create, or wait for values at dotted paths."""

    def __init__(
        self,
        registry: Optional[PropertyRegistry] = None,
        engine: Optional[ReadinessEngine] = None,
        scheduler: Optional[Scheduler] = None,
        root: Any = None,
        config: Optional[BrokerConfig] = None,
    ):
        self.config = config if config is not None else get_broker_config()
        if engine is not None:
            # Records and pending entries must share one store
            if registry is not None and registry is not engine.registry:
                raise ValueError("registry must be the same PropertyRegistry the engine was built with")
            registry = engine.registry
        self.registry = registry if registry is not None else PropertyRegistry()
        if engine is None:
            engine = ReadinessEngine(self.registry, scheduler=scheduler, config=self.config)
        engine.snapshot_factory = self._snapshot
        self.engine = engine
        self.root = root if root is not None else types.SimpleNamespace()

    def __call__(self, path_or_id: Any = None, context: Any = UNDEFINED) -> Optional[Accessor]:
        return self.access(path_or_id, context)

    def access(self, path_or_id: Any = None, context: Any = UNDEFINED) -> Optional[Accessor]:
        """Look up a dotted path (creating a record) or an existing record id.

        Args:
            path_or_id: Dotted path string, or an id issued by an earlier lookup
            context: Root to resolve against. Missing or primitive contexts
                fall back to the default root (see context_manager).

        Returns:
            An Accessor, or None for a blank path, an unknown id, or an
            argument that is neither a string nor an int.
        """
        if isinstance(path_or_id, str):
            if not path_or_id.strip():
                return None
            context = self._context_or_default(context)
            value = resolve(path_or_id, context)
            record = self.registry.register(value, path_or_id, context)
            return self._snapshot(record)

        if isinstance(path_or_id, int) and not isinstance(path_or_id, bool):
            record = self.registry.get(path_or_id)
            if record is None:
                return None
            return self._snapshot(record)

        return None

    def _context_or_default(self, context: Any) -> Any:
        if context is UNDEFINED or is_primitive(context):
            return resolve_default_context(self.root)
        return context

    def _snapshot(self, record: PropertyRecord) -> Accessor:
        return Accessor(record, self.registry, self.engine)

    # Readiness loop controls, exposed for hosts embedding the broker

    def pause(self) -> None:
        self.engine.pause()

    def resume(self) -> None:
        self.engine.resume()

    def tick(self) -> int:
        return self.engine.tick()

    def shutdown(self) -> None:
        """Stop polling and release the scheduler's worker, if it has one."""
        self.engine.stop()
        stop_worker = getattr(self.engine.scheduler, 'shutdown', None)
        if stop_worker is not None:
            stop_worker()


_default_broker: Optional[PropertyBroker] = None
_default_broker_lock = threading.Lock()


def get_default_broker() -> PropertyBroker:
    """Process-wide broker, created on first use."""
    global _default_broker
    with _default_broker_lock:
        if _default_broker is None:
            _default_broker = PropertyBroker()
            logger.debug("Created default PropertyBroker")
        return _default_broker


def set_default_broker(broker: Optional[PropertyBroker]) -> None:
    """Replace the process-wide broker (None recreates it on next use)."""
    global _default_broker
    with _default_broker_lock:
        _default_broker = broker


def access(path_or_id: Any = None, context: Any = UNDEFINED) -> Optional[Accessor]:
    """Look up ``path_or_id`` on the process-wide broker."""
    return get_default_broker().access(path_or_id, context)
