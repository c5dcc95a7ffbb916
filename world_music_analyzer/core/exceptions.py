"""Exception types raised by the analysis pipeline."""

from typing import Optional


class AnalyzerError(Exception):
    """Base class for analyzer errors."""


class EmptySignal(AnalyzerError):
    """Raised when an audio signal has no samples."""


class ConfigurationError(AnalyzerError, ValueError):
    """Raised for invalid options or malformed configuration data."""


class AudioDecodeError(AnalyzerError, ValueError):
    """Raised when a supported audio file cannot be decoded."""


class StageFault(AnalyzerError):
    """An internal invariant was violated inside a pipeline stage."""

    def __init__(self, stage: str, cause: str, original: Optional[BaseException] = None):
        self.stage = stage
        self.cause = cause
        self.original = original
        super().__init__(f"[{stage}] {cause}")


class AnalysisCancelled(Exception):
    """Raised at a checkpoint when the caller asked to stop.

    Not an ``AnalyzerError``: cancellation is a normal terminal outcome.
    """
