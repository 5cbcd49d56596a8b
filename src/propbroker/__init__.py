"""
Dynamic property broker for values that may not exist yet.

Given a dotted path and an optional context object, the broker resolves the
value at that path, lazily creates it, or waits until something else puts it
there. Callers never need to know whether the path currently exists.

Key Features:
- Path resolution over mappings, sequences and attribute objects
- Lazy extension: create missing segments on demand
- Stable integer identity for every lookup (re-lookup by id)
- Deferred readiness: one-shot callbacks fired when a path first resolves
- Pluggable timer hosts (thread, asyncio, manual/virtual clock)

Quick Start:
    >>> from propbroker import access
    >>> import types
    >>> host = types.SimpleNamespace()
    >>>
    >>> access('sdk.client', host).get_value('not loaded')
    'not loaded'
    >>> access('sdk.client', host).when_ready(lambda acc: print(acc.get_value()))
    False
    >>> host.sdk = types.SimpleNamespace(client='ready')
    >>> # ...on the next polling tick the callback prints 'ready'

Architecture:
    Path Resolver → Property Registry → Readiness Engine → Accessor Facade

    Every string lookup registers a PropertyRecord under a new id. The
    Accessor returned to the caller is a detached copy of that record.
    when_ready() on an absent value parks the id in the readiness engine,
    which re-resolves it on every polling tick until it appears.

Modules:
    - kinds: UNDEFINED sentinel and PropertyKind classification
    - path_resolver: dotted path walk and lazy extension
    - records: PropertyRecord dataclass
    - registry: id → record store
    - scheduler: host timer primitives
    - readiness: deferred readiness engine
    - accessor: caller-facing snapshot
    - broker: PropertyBroker facade and process-wide default broker
    - context_manager: default root selection and context_scope()
    - config: BrokerConfig and process defaults
"""

# Kinds
from propbroker.kinds import (
    UNDEFINED,
    PropertyKind,
    classify,
    is_undefined,
    is_primitive,
)

# Resolver
from propbroker.path_resolver import resolve, split_path, get_field, set_field

# Registry
from propbroker.records import PropertyRecord
from propbroker.registry import PropertyRegistry

# Scheduling
from propbroker.scheduler import (
    Scheduler,
    TimerHandle,
    ThreadScheduler,
    AsyncioScheduler,
    ManualScheduler,
)
from propbroker.readiness import ReadinessEngine

# Facade
from propbroker.accessor import Accessor
from propbroker.broker import (
    PropertyBroker,
    get_default_broker,
    set_default_broker,
    access,
)

# Context
from propbroker.context_manager import (
    context_scope,
    get_scoped_context,
    set_default_context,
    get_default_context,
    clear_default_context,
)

# Configuration
from propbroker.config import (
    BrokerConfig,
    set_broker_config,
    get_broker_config,
    reset_broker_config,
)

__all__ = [
    # Kinds
    'UNDEFINED',
    'PropertyKind',
    'classify',
    'is_undefined',
    'is_primitive',
    # Resolver
    'resolve',
    'split_path',
    'get_field',
    'set_field',
    # Registry
    'PropertyRecord',
    'PropertyRegistry',
    # Scheduling
    'Scheduler',
    'TimerHandle',
    'ThreadScheduler',
    'AsyncioScheduler',
    'ManualScheduler',
    'ReadinessEngine',
    # Facade
    'Accessor',
    'PropertyBroker',
    'get_default_broker',
    'set_default_broker',
    'access',
    # Context
    'context_scope',
    'get_scoped_context',
    'set_default_context',
    'get_default_context',
    'clear_default_context',
    # Configuration
    'BrokerConfig',
    'set_broker_config',
    'get_broker_config',
    'reset_broker_config',
]

__version__ = '1.0.0'
__description__ = 'Dynamic property broker for deferred, dotted-path value access'
