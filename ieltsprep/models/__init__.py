"""Data models for the IELTS practice client."""

from .audio import AudioStats, AudioBlob
from .events import AudioEvent, SessionEvent
from .submission import FormPart, DeliveryOutcome, SubmissionResult
from .auth import UserSession, ROLE_ADMIN, ROLE_TEST_TAKER
from .practice import Question, SpeakingTest, ListeningTest

__all__ = [
    "AudioStats",
    "AudioBlob",
    "AudioEvent",
    "SessionEvent",
    "FormPart",
    "DeliveryOutcome",
    "SubmissionResult",
    "UserSession",
    "ROLE_ADMIN",
    "ROLE_TEST_TAKER",
    "Question",
    "SpeakingTest",
    "ListeningTest",
]
