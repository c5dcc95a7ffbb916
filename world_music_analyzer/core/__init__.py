"""Core types and constants for World Music Analyzer."""

from .signal import AudioSignal
from .constants import (
    PITCH_NAMES,
    DEFAULT_MAX_DURATION_SEC,
    DEFAULT_MAX_PITCH_FRAMES,
    DEFAULT_MAX_SPECTRAL_WINDOWS,
    DEFAULT_TOP_N_CULTURES,
)
from .exceptions import (
    AnalyzerError,
    EmptySignal,
    ConfigurationError,
    AudioDecodeError,
    StageFault,
    AnalysisCancelled,
)

__all__ = [
    "AudioSignal",
    "PITCH_NAMES",
    "DEFAULT_MAX_DURATION_SEC",
    "DEFAULT_MAX_PITCH_FRAMES",
    "DEFAULT_MAX_SPECTRAL_WINDOWS",
    "DEFAULT_TOP_N_CULTURES",
    "AnalyzerError",
    "EmptySignal",
    "ConfigurationError",
    "AudioDecodeError",
    "StageFault",
    "AnalysisCancelled",
]
