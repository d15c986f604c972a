"""Standalone countdown timer screen with pause/resume."""

import logging
import time
from typing import Optional

from rich.align import Align
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..audio.timer import CountdownTimer
from .keyboard_input import create_input_handler

logger = logging.getLogger(__name__)


class CountdownScreen:
    """Keys: p pause, r resume, q quit."""

    def __init__(self, minutes: float = 2, console: Optional[Console] = None):
        self.console = console or Console()
        self.timer = CountdownTimer(int(minutes * 60), on_expire=self._on_expire)
        self.running = False
        self.input_handler = None

    def _on_expire(self) -> None:
        logger.info("Time is up")

    def build_view(self) -> Panel:
        low = self.timer.is_low
        clock = Text(self.timer.display(), style="bold red" if low else "bold green")
        if self.timer.expired:
            state = "Time is up"
        else:
            state = "Running" if self.timer.is_running else "Paused"
        controls = Text.assemble(("P", "bold yellow"), " Pause  ", ("R", "bold green"), " Resume  ",
                                 ("Q", "bold red"), " Quit")
        return Panel(
            Group(Align.center(clock), Align.center(Text(state, style="dim")), Align.center(controls)),
            title="⏱️  Timer",
            border_style="red" if low else "green",
        )

    def handle_key_input(self, key: str) -> bool:
        if key == 'q':
            self.running = False
            return False
        if key == 'p':
            self.timer.pause()
        elif key == 'r':
            self.timer.resume()
        return True

    def run(self) -> bool:
        """Run until quit or expiry; returns True if the countdown expired."""
        self.running = True
        self.timer.start()
        self.input_handler = create_input_handler(self.handle_key_input)
        self.input_handler.start()
        try:
            with Live(self.build_view(), console=self.console, refresh_per_second=4) as live:
                while self.running and not self.timer.expired:
                    live.update(self.build_view())
                    time.sleep(0.2)
                live.update(self.build_view())
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.running = False
            self.timer.stop()
            if self.input_handler:
                self.input_handler.stop()
        return self.timer.expired
