"""Spectral analysis - averaged magnitude spectrum and timbre descriptors."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import librosa
import numpy as np

from ..core import AudioSignal
from ..core.constants import (
    SPECTRAL_FRAME_SIZE,
    ROLLOFF_PERCENT,
    DEFAULT_MAX_SPECTRAL_WINDOWS,
    YIELD_EVERY,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SpectralProfile:
    """Container for spectral analysis results."""

    spectrum: np.ndarray  # Bin-averaged magnitudes [frame_size // 2]
    centroid_hz: float
    rolloff_hz: float
    brightness: float  # centroid / Nyquist, 0-1
    frames_analyzed: int = 0

    @classmethod
    def silent(cls, n_bins: int) -> "SpectralProfile":
        return cls(np.zeros(n_bins), 0.0, 0.0, 0.0, 0)


class SpectralAnalyzer:
    """Average short-time magnitude spectra and derive timbre features."""

    def __init__(
        self,
        frame_size: int = SPECTRAL_FRAME_SIZE,
        hop_length: Optional[int] = None,
        max_windows: int = DEFAULT_MAX_SPECTRAL_WINDOWS,
        rolloff_percent: float = ROLLOFF_PERCENT,
        yield_every: int = YIELD_EVERY,
    ):
        """
        Initialize SpectralAnalyzer.

        Args:
            frame_size: FFT size
            hop_length: Samples between frames (default: 32 frames)
            max_windows: Maximum number of frames averaged
            rolloff_percent: Energy fraction that defines the rolloff
            yield_every: Frames between cooperative checkpoints
        """
        self.frame_size = frame_size
        self.hop_length = hop_length or frame_size * 32
        self.max_windows = max_windows
        self.rolloff_percent = rolloff_percent
        self.yield_every = yield_every

    @property
    def n_bins(self) -> int:
        return self.frame_size // 2

    def bin_frequencies(self, sample_rate: int) -> np.ndarray:
        """Center frequency (Hz) of each kept bin."""
        return np.arange(self.n_bins) * sample_rate / self.frame_size

    def stft(self, audio: np.ndarray) -> np.ndarray:
        """
        Magnitude STFT without centering.

        Returns:
            Magnitudes [n_bins, time_frames]
        """
        spectrum = librosa.stft(
            np.array(audio, dtype=np.float32),
            n_fft=self.frame_size,
            hop_length=self.hop_length,
            window="hann",
            center=False,
        )
        return np.abs(spectrum[: self.n_bins])

    def magnitude_spectrum(self, frame: np.ndarray) -> np.ndarray:
        """Hann-windowed FFT magnitudes of one frame, zero-padded if short."""
        frame = np.asarray(frame, dtype=np.float32)
        if len(frame) < self.frame_size:
            frame = np.pad(frame, (0, self.frame_size - len(frame)))
        return self.stft(frame[: self.frame_size])[:, 0]

    def count_frames(self, n_samples: int) -> int:
        """Number of whole frames analyzed, capped at max_windows."""
        if n_samples < self.frame_size:
            return 0
        return min(self.max_windows, 1 + (n_samples - self.frame_size) // self.hop_length)

    def analyze(
        self,
        window: AudioSignal,
        checkpoint: Optional[Callable[[], None]] = None,
    ) -> SpectralProfile:
        """
        Compute the frame-averaged spectrum and its descriptors.

        Args:
            window: Trimmed analysis window
            checkpoint: Called every ``yield_every`` frames; may raise to abort

        Returns:
            SpectralProfile; all-zero descriptors for silence
        """
        samples = window.samples
        sr = window.sample_rate
        if len(samples) == 0:
            return SpectralProfile.silent(self.n_bins)

        total = np.zeros(self.n_bins)
        n_frames = self.count_frames(len(samples))
        frames = 0
        # STFT in blocks of yield_every frames so cancellation stays responsive
        while frames < n_frames:
            block = min(self.yield_every, n_frames - frames)
            start = frames * self.hop_length
            end = start + (block - 1) * self.hop_length + self.frame_size
            total += self.stft(samples[start:end]).sum(axis=1)
            frames += block
            if checkpoint is not None and frames % self.yield_every == 0:
                checkpoint()

        if frames == 0:
            # Shorter than one frame: zero-pad what there is
            total += self.magnitude_spectrum(samples)
            frames = 1

        spectrum = total / frames
        freqs = self.bin_frequencies(sr)
        centroid = spectral_centroid(spectrum, freqs)
        rolloff = spectral_rolloff(spectrum, freqs, self.rolloff_percent)
        brightness = float(np.clip(centroid / (sr / 2.0), 0.0, 1.0))

        logger.debug(
            "Spectrum: %d frames, centroid %.1f Hz, rolloff %.1f Hz",
            frames,
            centroid,
            rolloff,
        )
        return SpectralProfile(
            spectrum=spectrum,
            centroid_hz=centroid,
            rolloff_hz=rolloff,
            brightness=brightness,
            frames_analyzed=frames,
        )


def spectral_centroid(spectrum: np.ndarray, freqs: np.ndarray) -> float:
    """Magnitude-weighted mean frequency; 0 for an all-zero spectrum."""
    total = float(np.sum(spectrum))
    if total <= 0:
        return 0.0
    return float(np.sum(freqs * spectrum) / total)


def spectral_rolloff(
    spectrum: np.ndarray,
    freqs: np.ndarray,
    percent: float = ROLLOFF_PERCENT,
) -> float:
    """Lowest bin frequency at which cumulative magnitude reaches ``percent``."""
    total = float(np.sum(spectrum))
    if total <= 0:
        return 0.0
    cumulative = np.cumsum(spectrum)
    index = int(np.searchsorted(cumulative, percent * total, side="left"))
    return float(freqs[min(index, len(freqs) - 1)])


def analyze_spectrum(
    window: AudioSignal,
    sample_rate: Optional[int] = None,
    checkpoint: Optional[Callable[[], None]] = None,
    **kwargs,
) -> SpectralProfile:
    """
    Analyze the spectrum of a window with a default-configured SpectralAnalyzer.

    ``sample_rate`` overrides the window's own rate when given.
    """
    if sample_rate is not None and sample_rate != window.sample_rate:
        window = AudioSignal(window.samples, sample_rate)
    return SpectralAnalyzer(**kwargs).analyze(window, checkpoint=checkpoint)
