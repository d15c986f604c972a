"""Submission data models."""

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass
class FormPart:
    """One field of a multipart form submission."""
    name: str
    value: Union[str, bytes]
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.filename is not None


@dataclass
class DeliveryOutcome:
    """Result of a single delivery attempt against one endpoint."""
    strategy: str
    path: str
    ok: bool
    server_id: Optional[str] = None
    error: Optional[str] = None
    status: Optional[int] = None


@dataclass
class SubmissionResult:
    """Result of a full submission, after all fallbacks were considered."""
    success: bool
    server_id: Optional[str] = None
    error: Optional[str] = None
    attempts: List[DeliveryOutcome] = field(default_factory=list)

    @property
    def delivered_by(self) -> Optional[str]:
        for attempt in self.attempts:
            if attempt.ok:
                return attempt.strategy
        return None
