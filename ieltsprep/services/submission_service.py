"""Response submission with ordered endpoint fallback."""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from ..errors import NetworkFailure, ValidationFailure
from ..models.audio import AudioBlob
from ..models.submission import DeliveryOutcome, FormPart, SubmissionResult

logger = logging.getLogger(__name__)

SPEAKING_AUDIO_RESPONSE_PATH = "/api/speaking-tests/{test_id}/audio-response"
UPLOAD_AUDIO_PATH = "/api/upload-audio"
SUBMIT_AUDIO_PATH = "/api/submit-audio"

EMPTY_RESPONSE_MESSAGE = "Please provide a response or record an audio answer."
SUBMIT_FAILED_MESSAGE = "Failed to submit text response. Please check your connection and try again."


@dataclass
class ResponsePayload:
    """What the user is handing in for one test."""
    test_id: int
    text: str = ""
    audio: Optional[AudioBlob] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    def validate(self) -> None:
        if not self.has_text and self.audio is None:
            raise ValidationFailure(EMPTY_RESPONSE_MESSAGE)


@dataclass
class DeliveryStrategy:
    """One endpoint and the form to send to it."""
    name: str
    path: str
    parts: List[FormPart]

    async def attempt(self, client) -> DeliveryOutcome:
        """Deliver once; failures come back as an outcome, never raised."""
        try:
            body = await client.post_form(self.path, self.parts)
        except NetworkFailure as e:
            logger.warning(f"Delivery via {self.name} ({self.path}) failed: {e.message}")
            return DeliveryOutcome(strategy=self.name, path=self.path, ok=False,
                                   error=e.message, status=e.status)
        logger.info(f"Delivered via {self.name} ({self.path})")
        return DeliveryOutcome(strategy=self.name, path=self.path, ok=True,
                               server_id=extract_server_id(body))


def extract_server_id(body: Any) -> Optional[str]:
    """Pull the server-assigned id out of a response body, if it has one."""
    if not isinstance(body, dict):
        return None
    candidates = [body]
    if isinstance(body.get("data"), dict):
        candidates.insert(0, body["data"])
    for candidate in candidates:
        for key in ("id", "response_id", "submission_id", "filename"):
            if candidate.get(key) is not None:
                return str(candidate[key])
    return None


def audio_parts(payload: ResponsePayload) -> List[FormPart]:
    parts = [FormPart(
        "audio",
        payload.audio.data,
        filename=payload.audio.filename(f"recording_{payload.test_id}"),
        content_type=payload.audio.mime_type,
    )]
    if payload.has_text:
        parts.append(FormPart("response", payload.text))
    return parts


def text_only_parts(payload: ResponsePayload) -> List[FormPart]:
    return [FormPart("response", payload.text), FormPart("text_only", "true")]


def placeholder_parts(payload: ResponsePayload, mime_type: str) -> List[FormPart]:
    placeholder = AudioBlob.empty(mime_type)
    return [
        FormPart("response", payload.text),
        FormPart(
            "audio",
            placeholder.data,
            filename=placeholder.filename(f"empty_audio_{payload.test_id}"),
            content_type=placeholder.mime_type,
        ),
    ]


def build_delivery_plan(payload: ResponsePayload, placeholder_mime_type: str = "audio/wav") -> List[DeliveryStrategy]:
    """Ordered strategies for a payload, most specific endpoint first.

    Audio goes to the speaking-test endpoint, then the two generic upload
    endpoints. Text is delivered text-only to the generic endpoints and,
    as a last resort, alongside an empty placeholder recording.
    """
    plan: List[DeliveryStrategy] = []

    if payload.audio is not None:
        parts = audio_parts(payload)
        plan.extend([
            DeliveryStrategy("speaking-test-audio",
                             SPEAKING_AUDIO_RESPONSE_PATH.format(test_id=payload.test_id), parts),
            DeliveryStrategy("upload-audio", UPLOAD_AUDIO_PATH, parts),
            DeliveryStrategy("submit-audio", SUBMIT_AUDIO_PATH, parts),
        ])

    if payload.has_text:
        text_parts = text_only_parts(payload)
        plan.extend([
            DeliveryStrategy("upload-text", UPLOAD_AUDIO_PATH, text_parts),
            DeliveryStrategy("submit-text", SUBMIT_AUDIO_PATH, text_parts),
            DeliveryStrategy("upload-text-placeholder-audio", UPLOAD_AUDIO_PATH,
                             placeholder_parts(payload, placeholder_mime_type)),
        ])

    return plan


class Submitter:
    """Delivers a response by trying each strategy in order until one succeeds."""

    def __init__(self, client, placeholder_mime_type: str = "audio/wav"):
        """
        Args:
            client: Object with an async ``post_form(path, parts)``, normally an ApiClient
            placeholder_mime_type: MIME type of the synthesized empty recording
        """
        self.client = client
        self.placeholder_mime_type = placeholder_mime_type

    async def submit(self, payload: ResponsePayload) -> SubmissionResult:
        """Deliver ``payload``.

        Raises:
            ValidationFailure: If there is neither text nor audio. No request is sent.
        """
        payload.validate()
        plan = build_delivery_plan(payload, self.placeholder_mime_type)
        logger.info(f"Submitting response for test {payload.test_id}: "
                    f"{len(plan)} strategies, audio={'yes' if payload.audio else 'no'}")

        attempts: List[DeliveryOutcome] = []
        for strategy in plan:
            outcome = await strategy.attempt(self.client)
            attempts.append(outcome)
            if outcome.ok:
                return SubmissionResult(success=True, server_id=outcome.server_id, attempts=attempts)

        logger.error(f"All {len(attempts)} delivery attempts failed for test {payload.test_id}")
        return SubmissionResult(success=False, error=SUBMIT_FAILED_MESSAGE, attempts=attempts)
