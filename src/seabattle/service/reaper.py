"""Background thread that periodically evicts idle sessions."""

from __future__ import annotations

import logging
import threading
from types import TracebackType

from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class SessionReaper(threading.Thread):
    """Calls ``SessionRegistry.evict_stale`` every ``interval`` seconds until stopped."""

    def __init__(self, registry: SessionRegistry, interval: float | None = None) -> None:
        super().__init__(name="seabattle-session-reaper", daemon=True)
        self.registry = registry
        self.interval = interval if interval is not None else registry.config.reap_interval_seconds
        self._stop_event = threading.Event()
        self.sweeps = 0

    def run(self) -> None:
        logger.info("reaper_started", extra={"interval": self.interval})
        while not self._stop_event.wait(self.interval):
            self.sweep()
        logger.info("reaper_stopped", extra={"sweeps": self.sweeps})

    def sweep(self) -> list[str]:
        evicted = self.registry.evict_stale()
        self.sweeps += 1
        return evicted

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)

    def __enter__(self) -> SessionReaper:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()
