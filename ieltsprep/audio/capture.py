"""Microphone capture with fixed-size chunks and event publishing."""

import pyaudio
import time
import logging
from threading import Thread, Event
from typing import Optional, Callable
from ..errors import PermissionDenied
from ..models.events import AudioEvent


logger = logging.getLogger(__name__)


class AudioCapture:
    """Microphone capture that hands every chunk to a callback."""

    def __init__(
        self,
        callback: Callable[[AudioEvent], None],
        sample_rate: int = 16000,
        chunk_size: int = 1600,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Receives one AudioEvent per captured chunk
            sample_rate: Audio sample rate in Hz
            chunk_size: Size of each audio chunk in frames
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.audio_event_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        self.start_time: Optional[float] = None
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    @property
    def sample_width(self) -> int:
        if self.pyaudio_instance:
            return self.pyaudio_instance.get_sample_size(self.format)
        return 2

    def start_recording(self) -> None:
        """Acquire the microphone and start reading chunks in a background thread.

        Raises:
            PermissionDenied: If the input device cannot be opened.
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio capture")
        self.stream = self.__open_audio_stream()
        self.stop_event.clear()
        self.start_time = time.time()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop reading and release the microphone."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        logger.info("Stopping audio capture")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        # The reader thread releases the device on exit; this covers a thread that never ran
        self._release_device()
        self.is_recording = False
        logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self):
        try:
            self.pyaudio_instance = pyaudio.PyAudio()
            stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except OSError as e:
            logger.error(f"Could not open microphone: {e}")
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
            raise PermissionDenied() from e
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} frames/chunk")
        return stream

    def __read_audio_chunk(self) -> bytes:
        audio_chunk = self.stream.read(
            self.chunk_size,
            exception_on_overflow=False
        )
        self.total_chunks += 1
        return audio_chunk

    def __publish_audio_event(self, audio_chunk: bytes, final: bool = False) -> None:
        audio_event = AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            audio_data=audio_chunk,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            sample_rate=self.sample_rate,
            channels=self.channels,
            final=final
        )
        self.audio_event_callback(audio_event)

    def _record_continuously(self) -> None:
        """Internal method: read loop running in the background thread."""
        try:
            while not self.stop_event.is_set():
                audio_chunk = self.__read_audio_chunk()
                self.__publish_audio_event(audio_chunk)
            # Final chunk, so consumers know the recording is complete
            audio_chunk = self.__read_audio_chunk()
            self.__publish_audio_event(audio_chunk, final=True)
        except OSError as e:
            logger.error(f"Audio stream read failed: {e}")
        finally:
            self._release_device()

    def _release_device(self) -> None:
        stream, self.stream = self.stream, None
        if stream:
            stream.stop_stream()
            stream.close()
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def get_duration(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.time() - self.start_time

    def __del__(self):
        """Ensure the device is released on deletion."""
        if self.is_recording:
            self.stop_recording()
