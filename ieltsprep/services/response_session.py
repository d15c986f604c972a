"""State machine for recording and submitting one answer."""

import itertools
import logging
from enum import Enum
from typing import Optional

from pubsub import pub

from ..errors import InvalidTransition, PermissionDenied, ValidationFailure
from ..models.audio import AudioBlob
from ..models.events import SessionEvent
from ..models.submission import SubmissionResult
from .submission_service import ResponsePayload, Submitter

logger = logging.getLogger(__name__)

SESSION_TOPIC = "session.state"

SUCCESS_MESSAGE = "Response submitted successfully!"
MICROPHONE_ERROR_MESSAGE = "Could not access microphone. Please check permissions and try again."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

_session_counter = itertools.count(1)


class SessionStatus(Enum):
    """Where a response session is in its lifecycle."""
    IDLE = "idle"
    RECORDING = "recording"
    RECORDED = "recorded"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


# Allowed source states for each action
_CAN_START = {SessionStatus.IDLE, SessionStatus.RECORDED, SessionStatus.FAILED}
_CAN_DELETE = {SessionStatus.RECORDED, SessionStatus.FAILED}
_CAN_SUBMIT = {SessionStatus.IDLE, SessionStatus.RECORDED, SessionStatus.FAILED}


class ResponseSession:
    """Record, review and submit a response to one speaking test.

    Errors never escape the public methods: they end up in ``self.error`` as
    a user-facing message and the method reports failure through its return
    value. Asking for an action the current state forbids raises
    ``InvalidTransition``.
    """

    def __init__(self, test_id: int, recorder, submitter: Submitter):
        self.test_id = test_id
        self.recorder = recorder
        self.submitter = submitter
        self.session_key = f"response{next(_session_counter)}"

        self.status = SessionStatus.IDLE
        self.audio: Optional[AudioBlob] = None
        self.text = ""
        self.message: Optional[str] = None
        self.error: Optional[str] = None
        self.result: Optional[SubmissionResult] = None
        self.submitted_audio: Optional[AudioBlob] = None

    @property
    def elapsed_seconds(self) -> int:
        return self.recorder.elapsed_seconds

    @property
    def is_submitted(self) -> bool:
        return self.status is SessionStatus.SUBMITTED

    def start_recording(self) -> bool:
        """Start a new recording, discarding any previous one ("record again")."""
        self._require(_CAN_START, "start recording")
        self.error = None
        try:
            self.recorder.start()
        except PermissionDenied as e:
            logger.warning(f"Microphone unavailable: {e.message}")
            self.error = MICROPHONE_ERROR_MESSAGE
            self._publish(self.status)
            return False
        self.audio = None
        self._transition(SessionStatus.RECORDING)
        return True

    def stop_recording(self) -> Optional[AudioBlob]:
        self._require({SessionStatus.RECORDING}, "stop recording")
        self.audio = self.recorder.stop()
        self._transition(SessionStatus.RECORDED)
        return self.audio

    def delete_recording(self) -> None:
        self._require(_CAN_DELETE, "delete the recording")
        self.audio = None
        self.error = None
        self._transition(SessionStatus.IDLE)

    async def submit(self, text: Optional[str] = None) -> bool:
        """Submit the recording and/or ``text``; True when delivered."""
        self._require(_CAN_SUBMIT, "submit")
        if text is not None:
            self.text = text

        payload = ResponsePayload(test_id=self.test_id, text=self.text, audio=self.audio)
        try:
            payload.validate()
        except ValidationFailure as e:
            self.error = e.message
            self._publish(self.status)
            return False

        self.error = None
        self.message = None
        self._transition(SessionStatus.SUBMITTING)
        try:
            self.result = await self.submitter.submit(payload)
        except Exception:
            logger.exception("Unexpected error during submission")
            self.error = UNEXPECTED_ERROR_MESSAGE
            self._transition(SessionStatus.FAILED)
            return False

        if self.result.success:
            self.message = SUCCESS_MESSAGE
            self.submitted_audio = self.audio
            self._transition(SessionStatus.SUBMITTED)
            return True

        self.error = self.result.error
        self._transition(SessionStatus.FAILED)
        return False

    def close(self) -> None:
        """Teardown: release the microphone if a recording is still running."""
        if self.status is SessionStatus.RECORDING:
            self.audio = None
            self._transition(SessionStatus.IDLE)
        self.recorder.close()

    def _require(self, allowed, action: str) -> None:
        if self.status not in allowed:
            raise InvalidTransition(action, self.status.value)

    def _transition(self, status: SessionStatus) -> None:
        previous = self.status
        self.status = status
        logger.info(f"Session {self.session_key}: {previous.value} -> {status.value}")
        self._publish(previous)

    def _publish(self, previous: SessionStatus) -> None:
        event = SessionEvent(
            session_key=self.session_key,
            previous_status=previous.value,
            status=self.status.value,
            message=self.message,
            error=self.error,
        )
        pub.sendMessage(SESSION_TOPIC, event=event)

    def __enter__(self) -> "ResponseSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
