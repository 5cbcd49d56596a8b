"""
Example host: plugins that attach themselves to a shared namespace later.

Callers ask for plugin entry points before the plugins have loaded. The
broker hands back placeholders immediately and calls back once each entry
point appears.
"""

import logging
import threading
import time
import types

from propbroker import BrokerConfig, PropertyBroker, ThreadScheduler, context_scope

logger = logging.getLogger(__name__)


def load_plugins_later(host: types.SimpleNamespace, delay: float = 0.05) -> threading.Thread:
    """Simulate third-party code populating the host after a delay."""
    def _load():
        time.sleep(delay)
        host.plugins = types.SimpleNamespace(
            export=types.SimpleNamespace(render=lambda self, fmt: logger.info(f"{self.name}: rendered {fmt}")),
        )
        logger.info("Plugins loaded")

    thread = threading.Thread(target=_load, daemon=True)
    thread.start()
    return thread


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    host = types.SimpleNamespace(name="report-host")
    broker = PropertyBroker(scheduler=ThreadScheduler(), config=BrokerConfig(poll_interval=0.005))
    done = threading.Event()

    def on_render_ready(acc):
        acc.invoke(host, ['pdf'])
        done.set()

    with context_scope(host):
        render = broker('plugins.export.render')
        logger.info(f"Render available now: {render.when_ready()}")
        render.when_ready(on_render_ready)

        # Lazily created settings live on the host right away
        broker('settings.export').extend({'format': 'pdf'})

    load_plugins_later(host)
    done.wait(5)
    logger.info(f"Host settings: {host.settings}")
    broker.shutdown()


if __name__ == "__main__":
    main()
