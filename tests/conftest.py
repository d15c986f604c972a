"""Pytest configuration and fixtures for ieltsprep tests."""

import pytest
import tempfile
import logging
from pathlib import Path
from unittest.mock import Mock, patch
import numpy as np
from pubsub import pub

from ieltsprep.errors import NetworkFailure
from ieltsprep.models.audio import AudioBlob


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """One 100 ms chunk of 16-bit audio (sine wave at half scale)."""
    sample_rate = 16000
    samples = 1600
    t = np.linspace(0, samples / sample_rate, samples, False)
    wave_data = 0.5 * np.sin(2 * np.pi * 440 * t)
    return (wave_data * 32767).astype(np.int16).tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Silent 1600-frame chunks
        mock_stream.read.return_value = b'\x00' * 3200
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def denied_pyaudio(mock_pyaudio):
    """PyAudio whose input device cannot be opened."""
    mock_pyaudio['instance'].open.side_effect = OSError(-9996, "Invalid input device")
    return mock_pyaudio


@pytest.fixture
def no_audio_host(mock_pyaudio):
    """PortAudio that fails to initialize at all."""
    mock_pyaudio['class'].side_effect = OSError(-9999, "Unanticipated host error")
    return mock_pyaudio


@pytest.fixture
def audio_blob(sample_audio_chunk):
    from ieltsprep.audio.encoder import encode_wav
    return encode_wav([sample_audio_chunk] * 5, sample_rate=16000)


class ScriptedClient:
    """Stands in for ApiClient.post_form; fails or succeeds per path."""

    def __init__(self, succeed_on=(), body=None):
        self.succeed_on = set(succeed_on)
        self.body = body if body is not None else {"id": 42}
        self.calls = []

    async def post_form(self, path, parts):
        self.calls.append((path, parts))
        if path in self.succeed_on:
            return self.body
        raise NetworkFailure(f"POST {path} failed with 500: boom", status=500, url=path)

    @property
    def paths(self):
        return [path for path, _ in self.calls]


@pytest.fixture
def scripted_client():
    return ScriptedClient


class FakeRecorder:
    """Recorder double for session tests; no microphone involved."""

    def __init__(self, blob: AudioBlob = None, deny: bool = False):
        from ieltsprep.errors import PermissionDenied
        self._denied = PermissionDenied if deny else None
        self.blob = blob or AudioBlob(b"RIFF-fake-wav")
        self.is_recording = False
        self.elapsed_seconds = 0
        self.starts = 0
        self.closed = False

    def start(self):
        if self._denied:
            raise self._denied()
        self.starts += 1
        self.is_recording = True

    def stop(self):
        self.is_recording = False
        self.elapsed_seconds = 3
        return self.blob

    def close(self):
        self.is_recording = False
        self.closed = True

    def get_recording_stats(self):
        from ieltsprep.models.audio import AudioStats
        return AudioStats(is_recording=self.is_recording, duration_seconds=0.0,
                          elapsed_seconds=self.elapsed_seconds, sample_rate=16000,
                          chunk_size=1600, total_chunks=0, peak_level=0.25)


@pytest.fixture
def fake_recorder():
    return FakeRecorder


@pytest.fixture
def session_events():
    """Collect every SessionEvent published while the test runs."""
    from ieltsprep.services.response_session import SESSION_TOPIC

    events = []

    def listener(event):
        events.append(event)

    pub.subscribe(listener, SESSION_TOPIC)
    yield events
    pub.unsubscribe(listener, SESSION_TOPIC)


@pytest.fixture
def config_file(temp_data_dir):
    """Write a small YAML config into the temp dir and return its path."""
    path = Path(temp_data_dir) / "ieltsprep.yaml"
    path.write_text(
        "api:\n"
        "  base_url: http://backend.test:8080/\n"
        "  timeout_seconds: 5\n"
        "storage:\n"
        "  data_directory: userdata\n"
        "logging:\n"
        "  file_path: logs/test.log\n"
    )
    return str(path)
