"""Encode raw PCM chunks into a WAV container."""

import io
import wave
import logging
from typing import Iterable

import numpy as np

from ..models.audio import AudioBlob

logger = logging.getLogger(__name__)

WAV_MIME_TYPE = "audio/wav"


def encode_wav(chunks: Iterable[bytes], sample_rate: int, channels: int = 1,
               sample_width: int = 2) -> AudioBlob:
    """Join PCM chunks into a single WAV blob."""
    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        for chunk in chunks:
            wf.writeframes(chunk)

    data = buffer.getvalue()
    logger.debug(f"Encoded WAV blob: {len(data)} bytes")
    return AudioBlob(data=data, mime_type=WAV_MIME_TYPE)


def peak_level(chunk: bytes) -> float:
    """Peak amplitude of a 16-bit PCM chunk, normalized to 0.0-1.0."""
    if len(chunk) < 2:
        return 0.0
    samples = np.frombuffer(chunk[:len(chunk) - len(chunk) % 2], dtype=np.int16)
    if samples.size == 0:
        return 0.0
    return float(np.max(np.abs(samples.astype(np.int32)))) / 32768.0
