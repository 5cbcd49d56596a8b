"""
Framework configuration for the property broker.

Holds the process default BrokerConfig. Brokers created without an explicit
config read the default once, at construction.
"""

from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

# Seconds between polling ticks of the readiness engine
DEFAULT_POLL_INTERVAL = 0.001


@dataclass(frozen=True)
class BrokerConfig:
    """Tunables for a PropertyBroker and its readiness engine.

    Attributes:
        poll_interval: Fixed delay between readiness ticks, in seconds
        autostart: Arm the polling loop automatically the first time a
            callback is scheduled
        stop_when_idle: Stop the polling loop once no entries are pending
            instead of waking up every poll_interval forever
    """
    poll_interval: float = DEFAULT_POLL_INTERVAL
    autostart: bool = True
    stop_when_idle: bool = False

    def __post_init__(self):
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval!r}")


_broker_config: BrokerConfig = BrokerConfig()


def set_broker_config(config: BrokerConfig) -> None:
    """Set the process default config used by brokers created afterwards."""
    global _broker_config
    if not isinstance(config, BrokerConfig):
        raise TypeError(f"Expected BrokerConfig, got {type(config).__name__}")
    _broker_config = config
    logger.debug(f"Broker config set: {config}")


def get_broker_config() -> BrokerConfig:
    """Get the process default config."""
    return _broker_config


def reset_broker_config() -> None:
    """Restore the built-in defaults."""
    set_broker_config(BrokerConfig())
