"""Audio-related data models."""

from dataclasses import dataclass
from pathlib import Path

MIME_EXTENSIONS = {
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/webm": ".webm",
    "audio/ogg": ".ogg",
    "audio/mpeg": ".mp3",
}


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    elapsed_seconds: int
    sample_rate: int
    chunk_size: int
    total_chunks: int
    peak_level: float = 0.0


@dataclass(frozen=True)
class AudioBlob:
    """Encoded audio bytes tagged with their MIME type."""
    data: bytes
    mime_type: str = "audio/wav"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """File extension matching the MIME type, including the dot."""
        base_type = self.mime_type.split(";")[0].strip().lower()
        return MIME_EXTENSIONS.get(base_type, ".bin")

    def filename(self, stem: str) -> str:
        return f"{stem}{self.extension}"

    def save(self, path: str) -> str:
        """Write the blob to ``path`` and return the absolute path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.data)
        return str(target.absolute())

    @classmethod
    def empty(cls, mime_type: str = "audio/wav") -> "AudioBlob":
        """Zero-length placeholder payload."""
        return cls(data=b"", mime_type=mime_type)

    @classmethod
    def from_file(cls, path: str) -> "AudioBlob":
        suffix = Path(path).suffix.lower()
        mime_type = next(
            (mime for mime, ext in MIME_EXTENSIONS.items() if ext == suffix),
            "application/octet-stream",
        )
        return cls(data=Path(path).read_bytes(), mime_type=mime_type)
