"""Terminal user interface."""

from .response_screen import ResponseScreen
from .countdown_screen import CountdownScreen

__all__ = [
    "ResponseScreen",
    "CountdownScreen",
]
