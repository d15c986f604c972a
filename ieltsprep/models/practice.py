"""Practice catalog data models."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Question:
    """A speaking prompt, either built in or a backend sample question."""
    id: int
    text: str
    category: str = "General"
    difficulty: str = "Medium"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        return cls(
            id=data["id"],
            text=data.get("text", ""),
            category=data.get("category", "General"),
            difficulty=data.get("difficulty", "Medium"),
        )


@dataclass
class SpeakingTest:
    """Speaking test stored on the backend."""
    id: int
    question: str
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpeakingTest":
        return cls(
            id=data["id"],
            question=data.get("question", ""),
            created_at=data.get("created_at"),
        )


@dataclass
class ListeningTest:
    """Listening test with an uploaded audio file."""
    id: int
    question: str
    audio_file: Optional[str] = None
    user_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListeningTest":
        return cls(
            id=data["id"],
            question=data.get("question", ""),
            audio_file=data.get("audio_file"),
            user_id=data.get("user_id"),
        )
