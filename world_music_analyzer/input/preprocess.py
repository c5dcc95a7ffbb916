"""Signal preprocessing - bound the analysis window."""

import logging

from ..core import AudioSignal, EmptySignal, ConfigurationError
from ..core.constants import DEFAULT_MAX_DURATION_SEC

logger = logging.getLogger(__name__)


def trim_to_window(
    signal: AudioSignal,
    max_duration_sec: float = DEFAULT_MAX_DURATION_SEC,
) -> AudioSignal:
    """
    Truncate a signal to its first ``max_duration_sec`` seconds.

    No resampling is done; the window always starts at sample 0.

    Raises:
        EmptySignal: If the signal has no samples
        ConfigurationError: If max_duration_sec is not positive
    """
    if max_duration_sec is None or max_duration_sec <= 0:
        raise ConfigurationError(
            f"max_duration_sec must be positive, got {max_duration_sec}"
        )
    if signal.num_samples == 0:
        raise EmptySignal("Audio signal has no samples")

    limit = max(1, int(signal.sample_rate * max_duration_sec))
    if signal.num_samples <= limit:
        return signal

    logger.debug(
        "Trimming signal from %.2fs to %.2fs", signal.duration, max_duration_sec
    )
    return signal.head(limit)


class SignalPreprocessor:
    """Caps the amount of audio the later stages have to look at."""

    def __init__(self, max_duration_sec: float = DEFAULT_MAX_DURATION_SEC):
        if max_duration_sec is None or max_duration_sec <= 0:
            raise ConfigurationError(
                f"max_duration_sec must be positive, got {max_duration_sec}"
            )
        self.max_duration_sec = max_duration_sec

    def process(self, signal: AudioSignal) -> AudioSignal:
        return trim_to_window(signal, self.max_duration_sec)
