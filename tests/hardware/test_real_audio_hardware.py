"""Real hardware tests for audio recording functionality.

These tests require actual audio hardware (microphone) and verify that
a recording made through the Recorder is a playable WAV file.

Run with: pytest tests/hardware/ -v -s -m hardware
"""

import io
import time
import wave

import pytest

from ieltsprep.audio.recorder import Recorder
from ieltsprep.errors import PermissionDenied


@pytest.mark.hardware
class TestRealAudioHardware:
    """Tests that require real audio hardware to run."""

    def test_real_microphone_recording_3s(self, temp_data_dir):
        print("\n" + "=" * 60)
        print("HARDWARE TEST: 3-second microphone recording")
        print("=" * 60)

        ticks = []
        with Recorder(on_tick=ticks.append) as recorder:
            try:
                recorder.start()
            except PermissionDenied as e:
                pytest.skip(e.message)

            time.sleep(3.2)
            stats = recorder.get_recording_stats()
            blob = recorder.stop()

        print(f"  Chunks: {stats.total_chunks}, peak level: {stats.peak_level:.3f}")
        print(f"  Encoded size: {blob.size} bytes")

        # 100 ms chunks
        assert stats.total_chunks >= 25
        assert ticks[:3] == [1, 2, 3]

        with wave.open(io.BytesIO(blob.data), 'rb') as wf:
            assert wf.getframerate() == 16000
            assert wf.getnchannels() == 1
            duration = wf.getnframes() / wf.getframerate()
        assert 2.5 < duration < 4.5

        saved = blob.save(f"{temp_data_dir}/hardware_answer.wav")
        print(f"  Saved to {saved}")

    def test_record_twice_releases_device(self):
        """The microphone can be reopened after a stop ("record again")."""
        with Recorder() as recorder:
            for _ in range(2):
                try:
                    recorder.start()
                except PermissionDenied as e:
                    pytest.skip(e.message)
                time.sleep(0.5)
                blob = recorder.stop()
                assert blob.size > 44
