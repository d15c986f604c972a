"""Interactive screen for recording and submitting one answer."""

import asyncio
import logging
import time
from typing import Optional

from pubsub import pub
from rich.align import Align
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..audio.timer import format_time
from ..errors import InvalidTransition
from ..models.events import SessionEvent
from ..models.practice import Question
from ..services.response_session import ResponseSession, SessionStatus, SESSION_TOPIC
from .keyboard_input import create_input_handler

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    SessionStatus.IDLE: ("⏹️  READY", "bold yellow"),
    SessionStatus.RECORDING: ("🔴 RECORDING", "bold red"),
    SessionStatus.RECORDED: ("🎧 RECORDED", "bold cyan"),
    SessionStatus.SUBMITTING: ("📤 SUBMITTING", "bold blue"),
    SessionStatus.SUBMITTED: ("✅ SUBMITTED", "bold green"),
    SessionStatus.FAILED: ("❌ NOT SUBMITTED", "bold red"),
}


class ResponseScreen:
    """Terminal form around a ``ResponseSession``.

    Keys: r record / record again, s stop, d delete, w write the recording
    to disk, Enter submit, q quit.
    """

    def __init__(self, session: ResponseSession, question: Optional[Question] = None,
                 console: Optional[Console] = None, save_path: Optional[str] = None):
        self.session = session
        self.question = question
        self.console = console or Console()
        self.save_path = save_path
        self.notice: Optional[str] = None
        self.running = False
        self.input_handler = None
        pub.subscribe(self._on_session_event, SESSION_TOPIC)

    def _on_session_event(self, event: SessionEvent) -> None:
        if event.session_key != self.session.session_key:
            return
        logger.debug(f"Screen saw {event.previous_status} -> {event.status}")
        if event.status == SessionStatus.SUBMITTED.value and self.save_path and self.session.audio:
            self._write_recording()

    def build_view(self) -> Panel:
        label, style = STATUS_STYLES[self.session.status]
        parts = []

        if self.question:
            parts.append(Text.assemble(
                (f"Question #{self.question.id}", "bold"),
                f"  [{self.question.category} · {self.question.difficulty}]\n",
                (self.question.text, "white"),
            ))
            parts.append(Text(""))

        status_line = Text.assemble((label, style))
        if self.session.status is SessionStatus.RECORDING:
            stats = self.session.recorder.get_recording_stats()
            peak_bar = "█" * int(stats.peak_level * 20)
            status_line.append(f"  {format_time(self.session.elapsed_seconds)}")
            status_line.append(f"\nLevel: [{peak_bar:<20}] {stats.peak_level:.2f}")
        elif self.session.audio is not None:
            status_line.append(f"  {format_time(self.session.elapsed_seconds)}, "
                               f"{self.session.audio.size} bytes")
        parts.append(status_line)

        if self.session.text.strip():
            parts.append(Text.assemble(("\nWritten response: ", "bold"), self.session.text))
        if self.session.message:
            parts.append(Text(f"\n{self.session.message}", style="bold green"))
        if self.session.error:
            parts.append(Text.assemble(("\nError: ", "bold red"), (self.session.error, "red")))
        if self.notice:
            parts.append(Text(f"\n{self.notice}", style="dim"))

        parts.append(Text(""))
        parts.append(Align.center(self._controls()))
        return Panel(Group(*parts), title="🎙️  Record Your Response", border_style="blue")

    def _controls(self) -> Text:
        status = self.session.status
        if status is SessionStatus.SUBMITTED:
            return Text.assemble(("W", "bold green"), " Save recording  ", ("Q", "bold red"), " Quit")
        if status is SessionStatus.RECORDING:
            return Text.assemble(("S", "bold yellow"), " Stop  ", ("Q", "bold red"), " Quit")
        controls = Text()
        controls.append_text(Text.assemble(
            ("R", "bold green"), " Record again  " if self.session.audio else " Start recording  "))
        if self.session.audio:
            controls.append_text(Text.assemble(("D", "bold yellow"), " Delete  ", ("W", "bold cyan"), " Save  "))
        controls.append_text(Text.assemble(("ENTER", "bold blue"), " Submit  ", ("Q", "bold red"), " Quit"))
        return controls

    def handle_key_input(self, key: str) -> bool:
        """Handle keyboard input. Returns True to continue, False to quit."""
        self.notice = None
        try:
            if key == 'q':
                self.running = False
                return False
            if key == 'r':
                self.session.start_recording()
            elif key == 's':
                self.session.stop_recording()
            elif key == 'd':
                self.session.delete_recording()
            elif key == 'w':
                self._write_recording()
            elif key in ('\n', ' '):
                asyncio.run(self.session.submit())
            else:
                logger.debug(f"Unhandled key: {key!r}")
        except InvalidTransition as e:
            self.notice = e.message
        return True

    def _write_recording(self) -> None:
        audio = self.session.audio or self.session.submitted_audio
        if audio is None:
            self.notice = "Nothing recorded yet"
            return
        path = self.save_path or f"ielts-speaking-response{audio.extension}"
        try:
            saved = audio.save(path)
        except OSError as e:
            logger.error(f"Could not save recording to {path}: {e}")
            self.notice = f"Could not save recording to {path}: {e.strerror or e}"
            return
        self.notice = f"Recording saved to {saved}"
        logger.info(self.notice)

    def run(self) -> bool:
        """Run until the user quits; returns True if the answer was submitted."""
        self.running = True
        self.input_handler = create_input_handler(self.handle_key_input)
        self.input_handler.start()
        try:
            with Live(self.build_view(), console=self.console, refresh_per_second=4) as live:
                while self.running:
                    live.update(self.build_view())
                    time.sleep(0.2)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.cleanup()
        return self.session.is_submitted

    def cleanup(self) -> None:
        self.running = False
        if self.input_handler:
            self.input_handler.stop()
        self.session.close()
        if pub.isSubscribed(self._on_session_event, SESSION_TOPIC):
            pub.unsubscribe(self._on_session_event, SESSION_TOPIC)
