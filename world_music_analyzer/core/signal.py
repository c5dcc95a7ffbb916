"""AudioSignal - the immutable mono waveform every stage consumes."""

from dataclasses import dataclass

import numpy as np

from .exceptions import StageFault


@dataclass(frozen=True, eq=False)
class AudioSignal:
    """Mono audio samples plus their sample rate.

    The sample array is copied to float32 and marked read-only on
    construction, so a signal can be shared between stages safely.
    """

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.array(self.samples, dtype=np.float32)
        if samples.ndim != 1:
            raise StageFault(
                "preprocess", f"expected mono samples, got shape {samples.shape}"
            )
        if self.sample_rate is None or int(self.sample_rate) <= 0:
            raise StageFault("preprocess", f"invalid sample rate: {self.sample_rate}")
        if samples.size and not np.all(np.isfinite(samples)):
            raise StageFault("preprocess", "signal contains non-finite samples")
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def num_samples(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.num_samples / self.sample_rate

    def head(self, num_samples: int) -> "AudioSignal":
        """Return a new signal holding the first ``num_samples`` samples."""
        return AudioSignal(self.samples[:num_samples], self.sample_rate)
