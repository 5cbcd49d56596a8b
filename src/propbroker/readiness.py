"""
Deferred readiness engine.

Holds pending (record id, callback) entries and re-resolves them on a fixed
polling cadence until their value appears. Each entry moves from PENDING to
RESOLVED exactly once; an entry whose path never resolves stays pending
forever (no timeout, no cancellation).

There is no generic way to subscribe to mutation of arbitrary host objects,
so availability is detected by polling rather than by notification.
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from propbroker.config import BrokerConfig, get_broker_config
from propbroker.kinds import UNDEFINED
from propbroker.path_resolver import resolve
from propbroker.records import PropertyRecord
from propbroker.registry import PropertyRegistry
from propbroker.scheduler import Cancellable, Scheduler, ThreadScheduler

logger = logging.getLogger(__name__)

ReadyCallback = Callable[[Any], None]


class ReadinessEngine:
    """Polls pending lookups until they resolve, then fires their callback once.

    The polling loop is a scheduled task: start() arms a timer on the
    scheduler, every fire runs tick() (unless paused) and re-arms the timer,
    stop() cancels it. Tests can call tick() directly instead.

    By default the timer keeps firing every poll_interval even with nothing
    pending (1 ms wake-ups on a ThreadScheduler). With
    ``BrokerConfig(stop_when_idle=True)`` the loop stops after a tick that
    leaves no pending entries, and the next schedule() restarts it when
    autostart is on.

    Callbacks receive ``snapshot_factory(record)``; the owning broker sets
    the factory so callbacks get an Accessor rather than the raw record.
    """

    def __init__(
        self,
        registry: PropertyRegistry,
        scheduler: Optional[Scheduler] = None,
        config: Optional[BrokerConfig] = None,
        snapshot_factory: Optional[Callable[[PropertyRecord], Any]] = None,
    ):
        self._registry = registry
        self._scheduler = scheduler
        self._config = config if config is not None else get_broker_config()
        self.snapshot_factory: Callable[[PropertyRecord], Any] = snapshot_factory or (lambda record: record)

        self._pending: Dict[int, ReadyCallback] = {}
        self._lock = threading.RLock()
        self._paused = False
        self._ticking = False
        self._running = False
        self._timer: Optional[Cancellable] = None

    @property
    def registry(self) -> PropertyRegistry:
        return self._registry

    # ========== PENDING ENTRIES ==========

    def schedule(self, record_id: int, callback: ReadyCallback) -> bool:
        """Register a one-shot callback for when the record's path resolves.

        Evaluation happens on the next tick, never immediately. Scheduling an
        id that is already pending replaces its callback.

        Returns:
            False if the id is unknown or the callback is not callable.
        """
        if not callable(callback):
            return False
        if self._registry.get(record_id) is None:
            return False

        with self._lock:
            if record_id in self._pending:
                logger.warning(f"Replacing pending readiness callback for id={record_id}")
            self._pending[record_id] = callback
        logger.debug(f"Scheduled readiness callback: id={record_id}")

        if self._config.autostart and not self._running:
            self.start()
        return True

    def pending_ids(self) -> List[int]:
        with self._lock:
            return list(self._pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def __contains__(self, record_id: Any) -> bool:
        with self._lock:
            return record_id in self._pending

    # ========== TICK ==========

    def tick(self) -> int:
        """Sweep all pending entries once.

        Entries are visited in the order of a copy taken when the tick starts,
        so entries added by callbacks wait for the next tick. A tick started
        while another one is running (re-entry from a callback, or a second
        thread) returns immediately.

        Returns:
            Number of callbacks fired.
        """
        with self._lock:
            if self._ticking:
                logger.debug("tick() already in progress; skipped")
                return 0
            self._ticking = True
            entries = list(self._pending.items())

        fired = 0
        try:
            for record_id, callback in entries:
                record = self._registry.get(record_id)
                if record is None:
                    self._discard(record_id, callback)
                    continue

                value = resolve(record.path, record.context)
                if value is UNDEFINED:
                    continue

                with self._lock:
                    # Replaced or already fired since the tick started
                    if self._pending.get(record_id) is not callback:
                        continue
                    self._registry.update(record, value)
                    del self._pending[record_id]

                fired += 1
                self._fire(record_id, callback, record)
        finally:
            with self._lock:
                self._ticking = False
        return fired

    def _discard(self, record_id: int, callback: ReadyCallback) -> None:
        with self._lock:
            if self._pending.get(record_id) is callback:
                del self._pending[record_id]
                logger.debug(f"Dropped pending entry for cleared record id={record_id}")

    def _fire(self, record_id: int, callback: ReadyCallback, record: PropertyRecord) -> None:
        logger.debug(f"Property ready: id={record_id}, path={record.path!r}")
        try:
            callback(self.snapshot_factory(record))
        except Exception as e:
            logger.warning(f"Error in readiness callback for id={record_id}: {e}")

    # ========== POLLING LOOP ==========

    @property
    def scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = ThreadScheduler()
        return self._scheduler

    @property
    def poll_interval(self) -> float:
        return self._config.poll_interval

    def start(self) -> None:
        """Arm the polling timer. No-op if already running."""
        with self._lock:
            if self._running:
                return
            self._running = True
            self._arm()
        logger.debug(f"Readiness polling started (interval={self.poll_interval}s)")

    def stop(self) -> None:
        """Cancel the polling timer. Pending entries are kept."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        logger.debug("Readiness polling stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    def pause(self) -> None:
        """Keep the timer firing but skip the work of each tick."""
        self._paused = True
        logger.debug("Readiness polling paused")

    def resume(self) -> None:
        self._paused = False
        logger.debug("Readiness polling resumed")

    @property
    def is_paused(self) -> bool:
        return self._paused

    def _arm(self) -> None:
        # Caller holds self._lock
        if self._timer is None:
            self._timer = self.scheduler.call_later(self.poll_interval, self._on_timer)

    def _on_timer(self) -> None:
        with self._lock:
            self._timer = None
            if not self._running:
                return
        try:
            if not self._paused:
                self.tick()
        except Exception as e:
            logger.warning(f"Readiness tick failed: {e}")
        finally:
            with self._lock:
                if self._running and self._config.stop_when_idle and not self._pending:
                    self._running = False
                    logger.debug("Readiness polling stopped: no pending entries")
                elif self._running:
                    self._arm()
