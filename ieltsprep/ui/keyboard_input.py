"""Single-key terminal input for the interactive screens."""

import sys
import threading
import time
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)


class KeyboardInputHandler:
    """Reads single keypresses on a background thread."""

    def __init__(self, callback: Callable[[str], bool]):
        """Initialize keyboard handler.

        Args:
            callback: Function that takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True, name="KeyboardInput")
        self.thread.start()
        logger.debug("Keyboard input handler started")

    def stop(self) -> None:
        self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)
        logger.debug("Keyboard input handler stopped")

    def _input_loop(self) -> None:
        while self.running:
            key = self._get_key()
            if key:
                logger.debug(f"Key detected: {key!r}")
                if not self.callback(key):
                    break
            time.sleep(0.05)
        self.running = False

    def _get_key(self) -> Optional[str]:
        if sys.platform == "win32":
            return self._get_key_windows()
        return self._get_key_unix()

    def _get_key_windows(self) -> Optional[str]:
        import msvcrt
        if msvcrt.kbhit():
            return msvcrt.getch().decode('utf-8', errors='ignore').lower()
        return None

    def _get_key_unix(self) -> Optional[str]:
        import select
        import tty
        import termios

        if select.select([sys.stdin], [], [], 0.1)[0]:
            old_settings = termios.tcgetattr(sys.stdin)
            try:
                tty.setraw(sys.stdin.fileno())
                key = sys.stdin.read(1)
            finally:
                termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)
            # Raw mode delivers Enter as carriage return
            return "\n" if key == "\r" else key.lower()
        return None


class LineInputHandler:
    """Line-based fallback when stdin is not a terminal (pipes, CI)."""

    def __init__(self, callback: Callable[[str], bool]):
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True, name="LineInput")
        self.thread.start()
        logger.debug("Line input handler started")

    def stop(self) -> None:
        self.running = False
        logger.debug("Line input handler stopped")

    def _input_loop(self) -> None:
        while self.running:
            line = sys.stdin.readline()
            if not line:
                # EOF behaves like quit
                self.callback("q")
                break
            key = line.strip().lower()[:1] or "\n"
            if not self.callback(key):
                break
        self.running = False


def create_input_handler(callback: Callable[[str], bool]):
    """Create the best available input handler for the current stdin.

    Args:
        callback: Function that takes a key and returns True to continue, False to quit
    """
    if sys.stdin.isatty():
        return KeyboardInputHandler(callback)
    logger.info("stdin is not a terminal, using line input")
    return LineInputHandler(callback)
