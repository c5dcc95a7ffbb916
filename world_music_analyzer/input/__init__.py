"""Input layer - audio decoding and analysis-window preparation."""

from .loader import AudioLoader
from .preprocess import SignalPreprocessor, trim_to_window

__all__ = [
    "AudioLoader",
    "SignalPreprocessor",
    "trim_to_window",
]
