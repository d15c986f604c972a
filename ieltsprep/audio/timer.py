"""Per-second timers for recordings and the practice countdown."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def format_time(seconds: int) -> str:
    """Format a number of seconds as mm:ss."""
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins:02d}:{secs:02d}"


class ElapsedTimer:
    """Counts whole seconds on a daemon thread while running."""

    def __init__(self, on_tick: Optional[Callable[[int], None]] = None, interval: float = 1.0):
        """
        Args:
            on_tick: Called with the new elapsed count after every tick
            interval: Seconds between ticks
        """
        self.on_tick = on_tick
        self.interval = interval
        self.elapsed = 0

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._running = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def start(self) -> None:
        """Reset the count and start ticking."""
        self.stop()
        self.elapsed = 0
        self._stop_event.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run, daemon=True, name="ElapsedTimer")
        self._thread.start()

    def pause(self) -> None:
        self._running.clear()

    def resume(self) -> None:
        if self._thread and self._thread.is_alive():
            self._running.set()

    def stop(self) -> None:
        self._running.clear()
        self._stop_event.set()
        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval + 1.0)
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            if not self._running.is_set():
                continue
            self.elapsed += 1
            self._tick()

    def _tick(self) -> None:
        if self.on_tick:
            self.on_tick(self.elapsed)


class CountdownTimer(ElapsedTimer):
    """Countdown with pause/resume that fires ``on_expire`` once at zero."""

    def __init__(self, duration_seconds: int, on_expire: Optional[Callable[[], None]] = None,
                 on_tick: Optional[Callable[[int], None]] = None, interval: float = 1.0):
        super().__init__(on_tick=on_tick, interval=interval)
        self.duration_seconds = duration_seconds
        self.on_expire = on_expire
        self.expired = False

    @property
    def remaining(self) -> int:
        return max(0, self.duration_seconds - self.elapsed)

    @property
    def is_low(self) -> bool:
        """Less than one minute left."""
        return self.remaining < 60

    def start(self) -> None:
        self.expired = False
        super().start()

    def display(self) -> str:
        return format_time(self.remaining)

    def _tick(self) -> None:
        if self.on_tick:
            self.on_tick(self.remaining)
        if self.remaining == 0 and not self.expired:
            self.expired = True
            logger.info("Countdown expired")
            self._running.clear()
            self._stop_event.set()
            if self.on_expire:
                self.on_expire()
