"""Pytest configuration and shared fixtures."""
import types

import pytest

from propbroker import (
    BrokerConfig,
    ManualScheduler,
    PropertyBroker,
    PropertyRegistry,
    ReadinessEngine,
    set_broker_config,
)
import propbroker.broker as broker_module
import propbroker.config as config_module
import propbroker.context_manager as context_module

# Whole seconds keep the virtual clock exact
TEST_POLL_INTERVAL = 1.0


@pytest.fixture(autouse=True)
def reset_broker_globals():
    """Isolate process-wide defaults between tests."""
    original_config = config_module._broker_config
    original_broker = broker_module._default_broker
    original_context = context_module._process_default_context

    set_broker_config(BrokerConfig(poll_interval=TEST_POLL_INTERVAL))

    yield

    config_module._broker_config = original_config
    broker_module._default_broker = original_broker
    context_module._process_default_context = original_context


@pytest.fixture
def manual_scheduler():
    return ManualScheduler()


@pytest.fixture
def registry():
    return PropertyRegistry()


@pytest.fixture
def engine(registry, manual_scheduler):
    return ReadinessEngine(registry, scheduler=manual_scheduler)


@pytest.fixture
def broker(manual_scheduler):
    """Isolated broker driven by the virtual clock."""
    return PropertyBroker(scheduler=manual_scheduler)


@pytest.fixture
def host():
    """Host namespace mixing attribute and mapping children."""
    return types.SimpleNamespace(
        settings={'theme': 'dark', 'flags': {'beta': False}},
        sdk=types.SimpleNamespace(version=3, client=None),
        queue=[10, 20, 30],
    )
