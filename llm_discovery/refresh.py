"""
Periodic re-discovery on a background thread.
"""

import logging
import threading

from .discovery import DiscoveryResult, LocalModelDiscovery

logger = logging.getLogger(__name__)


class DiscoveryRefresher:
    """
    Re-run a discovery pass every ``interval`` seconds.

    The first pass runs immediately on ``start``. ``stop`` cancels a pass in
    flight and waits for the thread to exit.

    Example:
        >>> refresher = DiscoveryRefresher(discovery, interval=60)
        >>> refresher.start()  # doctest: +SKIP
        >>> refresher.stop()  # doctest: +SKIP
    """

    def __init__(self, discovery: LocalModelDiscovery, interval: float):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.discovery = discovery
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.passes = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the refresh thread. No-op if already running."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="llm-discovery-refresh", daemon=True
        )
        self._thread.start()
        logger.info(f"Discovery refresh started (every {self.interval}s)")

    def _loop(self) -> None:
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self.interval)

    def run_once(self) -> DiscoveryResult:
        """Run one pass, logging instead of raising unexpected errors."""
        try:
            return self.discovery.discover()
        except Exception as e:
            # Keep the thread alive; the next tick retries.
            logger.error(f"Discovery refresh failed: {e}", exc_info=True)
            return DiscoveryResult(enabled=self.discovery.enabled, endpoint=self.discovery.endpoint)
        finally:
            self.passes += 1

    def stop(self, timeout: float | None = 10.0) -> None:
        """Stop the refresh thread."""
        self._stop.set()
        self.discovery.cancel()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Discovery refresh stopped")


__all__ = ["DiscoveryRefresher"]
