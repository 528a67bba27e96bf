"""Fixed-delay scheduler for background precomputation.

No external scheduler library is required — uses stdlib ``threading`` and
``signal`` only.

Typical usage via the CLI::

    reco start-scheduler

Or import directly::

    from reco_engine.scheduler import PrecomputeScheduler
    scheduler = PrecomputeScheduler(module, initial_delay_seconds=5, delay_seconds=60)
    scheduler.start()       # background thread
    ...
    scheduler.stop()

Cadence: the first ``run_cycle()`` fires ``initial_delay_seconds`` after
``start()``; each later cycle fires ``delay_seconds`` after the previous one
finished (fixed delay, not fixed rate).  A failing cycle is logged and does
not stop the scheduler.
"""

from __future__ import annotations

import logging
import platform
import signal
import threading
from typing import Optional

from reco_engine.precompute.module import PrecomputeCycleResult, PrecomputeModule

log = logging.getLogger(__name__)


class PrecomputeScheduler:
    """Runs ``PrecomputeModule.run_cycle()`` on a background thread.

    Parameters
    ----------
    module:
        Precompute module to drive.
    initial_delay_seconds:
        Wait before the first cycle.
    delay_seconds:
        Wait between the end of one cycle and the start of the next.
    """

    def __init__(
        self,
        module: PrecomputeModule,
        initial_delay_seconds: float = 5.0,
        delay_seconds: float = 60.0,
    ) -> None:
        if initial_delay_seconds < 0 or delay_seconds < 0:
            raise ValueError("Scheduler delays must be >= 0.")
        self.module = module
        self.initial_delay_seconds = initial_delay_seconds
        self.delay_seconds = delay_seconds
        self.cycles_run = 0
        self.last_result: Optional[PrecomputeCycleResult] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _tick(self) -> None:
        try:
            self.last_result = self.module.run_cycle()
        except Exception as exc:
            log.error("Precompute cycle FAILED: %s", exc, exc_info=True)
        finally:
            self.cycles_run += 1

    def _loop(self) -> None:
        if self._stop_event.wait(self.initial_delay_seconds):
            return
        while not self._stop_event.is_set():
            self._tick()
            if self._stop_event.wait(self.delay_seconds):
                return

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Start the background thread.  No-op if already running."""
        if self.is_running:
            log.warning("Scheduler already running.")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="precompute-scheduler", daemon=True
        )
        self._thread.start()
        log.info(
            "Scheduler started.  initial_delay=%.1fs  delay=%.1fs  batch_size=%d",
            self.initial_delay_seconds, self.delay_seconds, self.module.batch_size,
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the thread to stop and wait for the current cycle to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        log.info("Scheduler stopped after %d cycle(s).", self.cycles_run)

    def run_forever(self) -> None:
        """Start and block until Ctrl-C (or SIGTERM on Linux/macOS)."""

        def _shutdown(signum, frame):  # noqa: ANN001
            log.info("Signal %d received — stopping scheduler.", signum)
            self._stop_event.set()

        signal.signal(signal.SIGINT, _shutdown)
        if platform.system() != "Windows":
            signal.signal(signal.SIGTERM, _shutdown)

        self.start()
        while self.is_running and not self._stop_event.wait(1.0):
            pass
        self.stop()
