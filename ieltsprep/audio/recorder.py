"""Recorder: microphone capture buffered into a single audio blob."""

import logging
import threading
from typing import Callable, List, Optional

from pubsub import pub

from .audio_pub import AudioPublisher, new_recorder_topic
from .capture import AudioCapture
from .encoder import encode_wav, peak_level
from .timer import ElapsedTimer
from ..models.audio import AudioBlob, AudioStats
from ..models.events import AudioEvent

logger = logging.getLogger(__name__)


class Recorder:
    """Records one answer at a time from the microphone.

    Chunks captured by ``AudioCapture`` are published on a recorder-specific
    pub/sub topic and collected here until ``stop()`` joins them into an
    ``AudioBlob``. The recorder owns the microphone between ``start()`` and
    ``stop()``/``close()``.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1600,
        channels: int = 1,
        on_tick: Optional[Callable[[int], None]] = None,
        tick_interval: float = 1.0,
    ):
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels

        self.topic = new_recorder_topic()
        self.publisher = AudioPublisher(self.topic)
        self.capture = AudioCapture(
            callback=self.publisher.publish_audio_event,
            sample_rate=sample_rate,
            chunk_size=chunk_size,
            channels=channels,
        )
        self.timer = ElapsedTimer(on_tick=on_tick, interval=tick_interval)

        self._chunks: List[bytes] = []
        self._lock = threading.Lock()
        self.peak_level = 0.0
        pub.subscribe(self._on_audio_event, self.topic)

    @classmethod
    def from_config(cls, config, **kwargs) -> "Recorder":
        return cls(
            sample_rate=config.get('audio.sample_rate', 16000),
            chunk_size=config.get('audio.chunk_size', 1600),
            channels=config.get('audio.channels', 1),
            **kwargs,
        )

    @property
    def is_recording(self) -> bool:
        return self.capture.is_recording

    @property
    def elapsed_seconds(self) -> int:
        return self.timer.elapsed

    def start(self) -> None:
        """Open the microphone and start buffering.

        Raises:
            PermissionDenied: If the microphone cannot be opened.
        """
        if self.is_recording:
            logger.warning("Recorder already running")
            return
        with self._lock:
            self._chunks = []
            self.peak_level = 0.0
        self.capture.start_recording()
        self.timer.start()
        logger.info(f"Recording started on topic {self.topic}")

    def stop(self) -> Optional[AudioBlob]:
        """Stop recording, release the microphone and return the finished blob."""
        if not self.is_recording:
            logger.warning("Recorder is not running")
            return None
        self.capture.stop_recording()
        self.timer.stop()

        with self._lock:
            chunks = list(self._chunks)
            self._chunks = []
        blob = encode_wav(
            chunks,
            sample_rate=self.sample_rate,
            channels=self.channels,
            sample_width=self.capture.sample_width,
        )
        logger.info(f"Recording stopped: {len(chunks)} chunks, {blob.size} bytes, "
                    f"{self.timer.elapsed}s")
        return blob

    def close(self) -> None:
        """Teardown: release the microphone without producing a blob."""
        if self.is_recording:
            self.capture.stop_recording()
        self.timer.stop()
        with self._lock:
            self._chunks = []
        if pub.isSubscribed(self._on_audio_event, self.topic):
            pub.unsubscribe(self._on_audio_event, self.topic)

    def get_recording_stats(self) -> AudioStats:
        with self._lock:
            total_chunks = len(self._chunks)
        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=self.capture.get_duration(),
            elapsed_seconds=self.timer.elapsed,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=total_chunks,
            peak_level=self.peak_level,
        )

    def _on_audio_event(self, event: AudioEvent) -> None:
        if not event.audio_data:
            return
        level = peak_level(event.audio_data)
        with self._lock:
            self._chunks.append(event.audio_data)
            self.peak_level = max(self.peak_level, level)

    def __enter__(self) -> "Recorder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
