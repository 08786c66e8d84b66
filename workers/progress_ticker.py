"""Cosmetic progress ticker shown while an extraction call is outstanding.

A background thread nudges a percentage upward at a fixed interval and
stops at the cap. It does no real work. The owner must cancel it when the
real result (or an error) arrives; once ``cancel()`` returns, ``on_tick``
is never called again.
"""

import logging
import random
import threading
from typing import Callable, Optional

from config import PROGRESS_CAP, PROGRESS_TICK_SECONDS

logger = logging.getLogger(__name__)


class ProgressTicker:
    def __init__(
        self,
        on_tick: Callable[[float], None],
        interval: float = PROGRESS_TICK_SECONDS,
        cap: float = PROGRESS_CAP,
        step: float = 10.0,
        rng: Optional[random.Random] = None,
        name: str = "progress-ticker",
    ):
        self._on_tick = on_tick
        self._interval = interval
        self._cap = cap
        self._step = step
        self._rng = rng or random.Random()
        self._name = name
        self._stopped = threading.Event()
        self._tick_lock = threading.RLock()  # held while a tick is delivered
        self._thread: Optional[threading.Thread] = None
        self.progress = 0.0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stopped.is_set()

    def start(self) -> "ProgressTicker":
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, daemon=True, name=self._name)
            self._thread.start()
        return self

    def cancel(self) -> None:
        """Stop ticking. Idempotent; safe to call from ``on_tick`` itself."""
        self._stopped.set()
        with self._tick_lock:
            pass  # wait out a tick that is mid-delivery
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._interval * 2 + 1)

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            with self._tick_lock:
                if self._stopped.is_set():
                    return
                self.progress = min(self.progress + self._rng.random() * self._step, self._cap)
                try:
                    self._on_tick(self.progress)
                except Exception:
                    logger.exception(f"Progress callback failed; stopping {self._name}")
                    self._stopped.set()
                    return
                if self.progress >= self._cap:
                    return

    def __enter__(self) -> "ProgressTicker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()
