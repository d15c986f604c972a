"""Unit tests for AudioCapture class."""

import pytest
import time
import threading
from unittest.mock import Mock, patch

from ieltsprep.audio.capture import AudioCapture
from ieltsprep.errors import PermissionDenied


@pytest.mark.unit
class TestAudioCapture:
    """Test cases for AudioCapture class."""

    def test_initialization(self):
        """Test AudioCapture initialization with default parameters."""
        capture = AudioCapture(callback=Mock())

        assert capture.sample_rate == 16000
        assert capture.chunk_size == 1600
        assert capture.channels == 1
        assert capture.is_recording is False
        assert capture.total_chunks == 0
        assert capture.stream is None

    def test_initialization_custom_parameters(self):
        """Test AudioCapture initialization with custom parameters."""
        capture = AudioCapture(callback=Mock(), sample_rate=44100, chunk_size=4410, channels=2)

        assert capture.sample_rate == 44100
        assert capture.chunk_size == 4410
        assert capture.channels == 2

    def test_start_recording_opens_device_synchronously(self, mock_pyaudio):
        capture = AudioCapture(callback=Mock())

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()

            assert capture.is_recording is True
            assert capture.start_time is not None
            assert capture.recording_thread.daemon is True
            mock_pyaudio['instance'].open.assert_called_once()
            _, kwargs = mock_pyaudio['instance'].open.call_args
            assert kwargs['frames_per_buffer'] == 1600
            assert kwargs['input'] is True
            mock_record.assert_called_once()

    def test_start_recording_already_recording(self, mock_pyaudio):
        capture = AudioCapture(callback=Mock())
        capture.is_recording = True

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()
            mock_record.assert_not_called()
            mock_pyaudio['instance'].open.assert_not_called()

    def test_start_recording_permission_denied(self, denied_pyaudio):
        capture = AudioCapture(callback=Mock())

        with pytest.raises(PermissionDenied) as exc_info:
            capture.start_recording()

        assert "Microphone access denied" in exc_info.value.message
        assert capture.is_recording is False
        assert capture.recording_thread is None
        denied_pyaudio['instance'].terminate.assert_called_once()

    def test_start_recording_without_audio_host(self, no_audio_host):
        capture = AudioCapture(callback=Mock())

        with pytest.raises(PermissionDenied):
            capture.start_recording()

        assert capture.is_recording is False
        assert capture.pyaudio_instance is None
        no_audio_host['instance'].open.assert_not_called()

    def test_stop_recording_releases_device(self, mock_pyaudio):
        capture = AudioCapture(callback=Mock())

        with patch.object(capture, '_record_continuously'):
            capture.start_recording()
            capture.stop_recording()

        assert capture.is_recording is False
        assert capture.stop_event.is_set()
        assert capture.stream is None
        mock_pyaudio['stream'].stop_stream.assert_called_once()
        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_stop_recording_not_recording(self, mock_pyaudio):
        capture = AudioCapture(callback=Mock())

        capture.stop_recording()
        assert capture.is_recording is False

    def test_chunks_reach_callback_with_final_marker(self, mock_pyaudio):
        events = []
        seen_first = threading.Event()

        def callback(event):
            events.append(event)
            seen_first.set()

        capture = AudioCapture(callback=callback)
        capture.start_recording()
        assert seen_first.wait(timeout=2.0)
        capture.stop_recording()

        assert len(events) >= 2
        assert events[-1].final is True
        assert all(not e.final for e in events[:-1])
        assert [e.sequence_number for e in events] == list(range(1, len(events) + 1))
        assert events[0].audio_data == b'\x00' * 3200
        assert events[0].sample_rate == 16000

    def test_read_error_releases_device(self, mock_pyaudio):
        mock_pyaudio['stream'].read.side_effect = OSError("Input overflowed")
        capture = AudioCapture(callback=Mock())

        capture.start_recording()
        capture.recording_thread.join(timeout=2.0)

        assert capture.stream is None
        mock_pyaudio['stream'].close.assert_called_once()
        capture.stop_recording()
        assert capture.is_recording is False

    def test_sample_width_without_device(self):
        assert AudioCapture(callback=Mock()).sample_width == 2

    def test_get_duration(self, mock_pyaudio):
        capture = AudioCapture(callback=Mock())
        assert capture.get_duration() == 0.0

        with patch.object(capture, '_record_continuously'):
            capture.start_recording()
            time.sleep(0.05)
            assert capture.get_duration() > 0.0
            capture.stop_recording()
