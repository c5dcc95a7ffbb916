"""Onset detection and rhythm analysis."""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import librosa
import numpy as np
from scipy.ndimage import uniform_filter1d
from scipy.stats import entropy as shannon_entropy

from ..core import AudioSignal
from ..core.constants import (
    ONSET_FRAME_LENGTH,
    ONSET_HOP_LENGTH,
    MIN_TEMPO_BPM,
    MAX_TEMPO_BPM,
    IOI_BUCKET_MS,
    POLYRHYTHM_TOLERANCE,
    POLYRHYTHM_RATIOS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RhythmProfile:
    """Container for rhythm analysis results.

    The defaults describe a clip with no usable onsets (silence, drones).
    """

    tempo: float = 0.0  # BPM, 0 when fewer than two onsets
    peak_count: int = 0
    regularity: float = 0.0  # 0-1
    entropy: float = 0.0  # bits
    temporal_complexity: float = 0.0  # 0-1
    polyrhythmic: bool = False
    polyrhythm_ratio: Optional[str] = None  # e.g. "3:2"
    percussiveness: float = 0.0  # zero-crossing rate, 0-1
    onsets: Tuple[int, ...] = ()  # sample indices
    intervals_ms: Tuple[float, ...] = ()


def _clamp01(value: float) -> float:
    return float(min(1.0, max(0.0, value)))


class RhythmAnalyzer:
    """Detect onsets and summarize the rhythm of an analysis window.

    Onsets are frame-energy peaks that rise above a local moving
    average, so quiet and loud passages are judged against their own
    surroundings rather than a single global level.
    """

    def __init__(
        self,
        frame_length: int = ONSET_FRAME_LENGTH,
        hop_length: int = ONSET_HOP_LENGTH,
        threshold_ratio: float = 1.5,
        average_window_sec: float = 0.5,
        min_energy: float = 1e-4,
        min_onset_gap_ms: float = 100.0,
        bucket_ms: float = IOI_BUCKET_MS,
        polyrhythm_tolerance: float = POLYRHYTHM_TOLERANCE,
        min_bucket_count: int = 2,
        min_tempo: float = MIN_TEMPO_BPM,
        max_tempo: float = MAX_TEMPO_BPM,
    ):
        """
        Initialize RhythmAnalyzer.

        Args:
            frame_length: Samples per energy frame
            hop_length: Samples between energy frames
            threshold_ratio: Onset must exceed local average energy by this factor
            average_window_sec: Width of the local average window
            min_energy: Absolute RMS floor below which nothing is an onset
            min_onset_gap_ms: Minimum spacing between two onsets
            bucket_ms: IOI histogram bucket width
            polyrhythm_tolerance: Allowed distance from a simple ratio
            min_bucket_count: IOIs a bucket needs to count for polyrhythm
            min_tempo: Lower bound of the plausible tempo range (BPM)
            max_tempo: Upper bound of the plausible tempo range (BPM)
        """
        self.frame_length = frame_length
        self.hop_length = hop_length
        self.threshold_ratio = threshold_ratio
        self.average_window_sec = average_window_sec
        self.min_energy = min_energy
        self.min_onset_gap_ms = min_onset_gap_ms
        self.bucket_ms = bucket_ms
        self.polyrhythm_tolerance = polyrhythm_tolerance
        self.min_bucket_count = min_bucket_count
        self.min_tempo = min_tempo
        self.max_tempo = max_tempo

    def analyze(self, window: AudioSignal) -> RhythmProfile:
        """
        Perform full rhythm analysis.

        Args:
            window: Trimmed analysis window

        Returns:
            RhythmProfile; a defaulted profile if no rhythm is found
        """
        onsets = self.detect_onsets(window)
        percussiveness = self.zero_crossing_rate(window.samples)
        profile = self.summarize_onsets(
            onsets, window.sample_rate, percussiveness=percussiveness
        )
        logger.debug(
            "Rhythm: %d onsets, %.1f BPM, regularity %.2f",
            profile.peak_count,
            profile.tempo,
            profile.regularity,
        )
        return profile

    def detect_onsets(self, window: AudioSignal) -> Tuple[int, ...]:
        """
        Find onset positions (sample indices) from frame energy.

        Returns:
            Ordered tuple of onset sample indices
        """
        y = np.array(window.samples, dtype=np.float32)
        if len(y) < self.frame_length:
            return ()

        energy = librosa.feature.rms(
            y=y,
            frame_length=self.frame_length,
            hop_length=self.hop_length,
            center=False,
        )[0]

        avg_frames = max(3, int(round(self.average_window_sec * window.sample_rate / self.hop_length)))
        local_avg = uniform_filter1d(energy, size=avg_frames, mode="nearest")
        threshold = np.maximum(local_avg * self.threshold_ratio, self.min_energy)

        min_gap = max(1, int(np.ceil(
            self.min_onset_gap_ms / 1000.0 * window.sample_rate / self.hop_length
        )))

        onsets = []
        last_frame = -min_gap
        n_frames = len(energy)
        for i in range(n_frames):
            if energy[i] <= threshold[i]:
                continue
            prev_energy = energy[i - 1] if i > 0 else 0.0
            next_energy = energy[i + 1] if i + 1 < n_frames else 0.0
            if energy[i] < prev_energy or energy[i] < next_energy:
                continue
            if i - last_frame < min_gap:
                continue
            onsets.append(i * self.hop_length)
            last_frame = i

        return tuple(onsets)

    def summarize_onsets(
        self,
        onsets: Sequence[int],
        sample_rate: int,
        percussiveness: float = 0.0,
    ) -> RhythmProfile:
        """
        Derive tempo, regularity, entropy and polyrhythm from an onset set.

        Args:
            onsets: Ordered onset sample indices
            sample_rate: Sample rate the indices refer to
            percussiveness: Zero-crossing rate of the source window

        Returns:
            RhythmProfile
        """
        onsets = tuple(int(o) for o in onsets)
        percussiveness = _clamp01(percussiveness)

        if len(onsets) < 2:
            return RhythmProfile(
                peak_count=len(onsets),
                percussiveness=percussiveness,
                onsets=onsets,
            )

        intervals = np.diff(np.asarray(onsets, dtype=float)) / sample_rate * 1000.0
        intervals = intervals[intervals > 0]
        if len(intervals) == 0:
            return RhythmProfile(
                peak_count=len(onsets),
                percussiveness=percussiveness,
                onsets=onsets,
            )

        tempo = self._clamp_tempo(60000.0 / float(np.median(intervals)))

        mean_ioi = float(np.mean(intervals))
        regularity = _clamp01(1.0 - float(np.std(intervals)) / mean_ioi)

        buckets = self._bucket(intervals)
        entropy, complexity = self._interval_entropy(buckets)
        polyrhythmic, ratio = self._detect_polyrhythm(intervals, buckets)

        return RhythmProfile(
            tempo=tempo,
            peak_count=len(onsets),
            regularity=regularity,
            entropy=entropy,
            temporal_complexity=complexity,
            polyrhythmic=polyrhythmic,
            polyrhythm_ratio=ratio,
            percussiveness=percussiveness,
            onsets=onsets,
            intervals_ms=tuple(float(i) for i in intervals),
        )

    def zero_crossing_rate(self, samples: np.ndarray) -> float:
        """Fraction of samples at which the waveform changes sign."""
        if len(samples) < 2:
            return 0.0
        crossings = librosa.zero_crossings(np.array(samples, dtype=np.float32), pad=False)
        return _clamp01(np.count_nonzero(crossings) / len(samples))

    def _clamp_tempo(self, tempo: float) -> float:
        """Clamp a tempo to the plausible range."""
        if not np.isfinite(tempo) or tempo <= 0:
            return 0.0
        return float(np.clip(tempo, self.min_tempo, self.max_tempo))

    def _bucket(self, intervals: np.ndarray) -> np.ndarray:
        return np.round(intervals / self.bucket_ms).astype(int)

    def _interval_entropy(self, buckets: np.ndarray) -> Tuple[float, float]:
        """
        Shannon entropy of the IOI bucket histogram.

        Returns:
            Tuple of (entropy in bits, entropy normalized to 0-1)
        """
        counts = np.array(list(Counter(buckets.tolist()).values()), dtype=float)
        if len(counts) < 2:
            return 0.0, 0.0
        bits = float(shannon_entropy(counts / counts.sum(), base=2))
        return bits, _clamp01(bits / np.log2(len(counts)))

    def _detect_polyrhythm(
        self,
        intervals: np.ndarray,
        buckets: np.ndarray,
    ) -> Tuple[bool, Optional[str]]:
        """
        Check whether the two dominant IOIs form a simple non-unity ratio.
        """
        common = [
            bucket
            for bucket, count in Counter(buckets.tolist()).most_common(2)
            if count >= self.min_bucket_count
        ]
        if len(common) < 2:
            return False, None

        means = [float(np.mean(intervals[buckets == b])) for b in common]
        ratio = max(means) / min(means)

        best_label = None
        best_error = self.polyrhythm_tolerance
        for num, den in POLYRHYTHM_RATIOS:
            error = abs(ratio - num / den)
            if error <= best_error:
                best_label = f"{num}:{den}"
                best_error = error

        return best_label is not None, best_label


def analyze_rhythm(window: AudioSignal, **kwargs) -> RhythmProfile:
    """Analyze rhythm with a default-configured RhythmAnalyzer."""
    return RhythmAnalyzer(**kwargs).analyze(window)
