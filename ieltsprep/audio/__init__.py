"""Audio capture and recording module."""

from .capture import AudioCapture
from .recorder import Recorder
from .timer import ElapsedTimer, CountdownTimer, format_time

__all__ = [
    'AudioCapture',
    'Recorder',
    'ElapsedTimer',
    'CountdownTimer',
    'format_time',
]
