"""Scale identification - match a pitch-class histogram against scale templates.

Implements template fitting with:
- Western diatonic, pentatonic, blues and modal scales
- Selected regional scales (Japanese, Indian, Arabic)
- Penalty for scale tones that never occur
- Tonic-weight tie breaking between rotations of the same pitch set
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence, Tuple

import numpy as np

from ..core import PITCH_NAMES
from ..analysis.pitch import PitchSeries, frequency_to_midi_note

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaleTemplate:
    """An allowed pitch-class set relative to a tonic."""

    name: str
    intervals: FrozenSet[int]
    families: FrozenSet[str] = frozenset()
    description: str = ""


def _template(name, intervals, families=(), description=""):
    return ScaleTemplate(name, frozenset(intervals), frozenset(families), description)


SCALE_TEMPLATES: Tuple[ScaleTemplate, ...] = (
    _template(
        "Major (Western)", [0, 2, 4, 5, 7, 9, 11], ["major", "diatonic"],
        "A 7-note diatonic scale with a characteristic bright, happy sound. "
        "Used extensively across many musical traditions worldwide.",
    ),
    _template(
        "Minor (Western)", [0, 2, 3, 5, 7, 8, 10], ["minor", "diatonic"],
        "A 7-note diatonic scale with a darker, more melancholic quality. "
        "Common in European classical, jazz, and popular music.",
    ),
    _template(
        "Harmonic Minor", [0, 2, 3, 5, 7, 8, 11], ["minor", "diatonic"],
        "A minor scale with a raised 7th degree, creating an augmented 2nd. "
        "Heard in classical, Middle Eastern, and flamenco music.",
    ),
    _template(
        "Pentatonic Major", [0, 2, 4, 7, 9], ["pentatonic", "major"],
        "A 5-note scale found in East Asian, Celtic, blues, and many other "
        "traditions worldwide.",
    ),
    _template(
        "Pentatonic Minor", [0, 3, 5, 7, 10], ["pentatonic", "minor"],
        "A 5-note scale common in blues, rock, and folk music from many cultures.",
    ),
    _template(
        "Blues", [0, 3, 5, 6, 7, 10], ["blues"],
        "A 6-note scale with \"blue notes\" (flattened 3rd, 5th, and 7th). "
        "Fundamental to blues, jazz, and rock.",
    ),
    _template(
        "Dorian", [0, 2, 3, 5, 7, 9, 10], ["modal"],
        "A mode with a minor 3rd and major 6th. Used in Celtic music, jazz, and rock.",
    ),
    _template(
        "Phrygian", [0, 1, 3, 5, 7, 8, 10], ["modal"],
        "A mode with a flattened 2nd degree. Found in flamenco and "
        "Mediterranean and Middle Eastern traditions.",
    ),
    _template(
        "Lydian", [0, 2, 4, 6, 7, 9, 11], ["modal"],
        "A mode with a raised 4th degree and a dreamy, floating quality.",
    ),
    _template(
        "Mixolydian", [0, 2, 4, 5, 7, 9, 10], ["modal"],
        "A mode with a major quality and flattened 7th. Common in rock and folk.",
    ),
    _template(
        "Hirajoshi (Japanese)", [0, 2, 3, 7, 8], ["regional"],
        "A pentatonic scale associated with koto and shakuhachi music.",
    ),
    _template(
        "In Sen (Japanese)", [0, 1, 5, 7, 10], ["regional"],
        "A pentatonic scale from traditional Japanese music with a haunting quality.",
    ),
    _template(
        "Raga Bhairav (Indian)", [0, 1, 4, 5, 7, 8, 11], ["regional"],
        "A morning raga of Hindustani classical music.",
    ),
    _template(
        "Raga Kafi (Indian)", [0, 2, 3, 5, 7, 9, 10], ["regional"],
        "A Hindustani raga often associated with devotional and folk music.",
    ),
    _template(
        "Maqam Hijaz (Arabic)", [0, 1, 4, 5, 7, 8, 10], ["regional"],
        "An Arabic mode with an augmented 2nd, giving a distinctive Middle "
        "Eastern sound.",
    ),
    _template(
        "Whole Tone", [0, 2, 4, 6, 8, 10], ["symmetric"],
        "A 6-note scale of whole steps with an ambiguous, floating tonality.",
    ),
)

FALLBACK_SCALE = "Unknown"
FALLBACK_CONFIDENCE = 0.0


@dataclass(frozen=True)
class ScaleMatch:
    """Best (template, tonic) pair for a pitch series."""

    scale_name: str
    confidence: float  # 0.0 - 1.0
    tonic: Optional[str] = None
    families: FrozenSet[str] = frozenset()

    @property
    def name(self) -> str:
        if self.tonic is None:
            return self.scale_name
        return f"{self.tonic} {self.scale_name}"

    @property
    def is_fallback(self) -> bool:
        return self.tonic is None


class ScaleIdentifier:
    """Identify the most likely scale from detected pitches.

    Every template is tried at every tonic. The fit is the share of the
    observed weight that falls inside the scale, minus a penalty for
    scale tones that never occur. Rotations of the same pitch set (C
    major vs. A minor) fit equally well, so the ranking adds a small
    bonus for weight on the candidate tonic.
    """

    # Fit penalty per unit fraction of scale tones never observed
    MISSING_TONE_PENALTY = 0.5

    # Ranking bonus per unit of histogram weight on the tonic
    TONIC_BONUS = 0.1

    def __init__(
        self,
        templates: Sequence[ScaleTemplate] = SCALE_TEMPLATES,
        min_pitches: int = 3,
        missing_tone_penalty: float = MISSING_TONE_PENALTY,
        tonic_bonus: float = TONIC_BONUS,
    ):
        """
        Initialize ScaleIdentifier.

        Args:
            templates: Scale library, in tie-break order
            min_pitches: Fewer pitches than this yields the fallback match
            missing_tone_penalty: Weight of unobserved scale tones
            tonic_bonus: Weight of the tonic's share when ranking candidates
        """
        self.templates = tuple(templates)
        self.min_pitches = min_pitches
        self.missing_tone_penalty = missing_tone_penalty
        self.tonic_bonus = tonic_bonus

    def pitch_class_histogram(
        self,
        series: PitchSeries,
        weights: Optional[Sequence[float]] = None,
    ) -> np.ndarray:
        """
        Build a normalized 12-bin pitch-class histogram.

        Args:
            series: Pitch samples
            weights: Optional weight per sample (default 1.0 each)

        Returns:
            12-element array summing to 1 (all zeros if empty)
        """
        histogram = np.zeros(12)
        if weights is None:
            weights = [1.0] * len(series)

        for sample, weight in zip(series, weights):
            pc = frequency_to_midi_note(sample.frequency_hz) % 12
            histogram[pc] += weight

        if histogram.sum() > 0:
            histogram /= histogram.sum()
        return histogram

    def identify(self, series: PitchSeries) -> ScaleMatch:
        """
        Find the best matching scale for a pitch series.

        Returns:
            ScaleMatch; the fallback ("Unknown", 0.0) for sparse input
        """
        if len(series) < self.min_pitches:
            return ScaleMatch(FALLBACK_SCALE, FALLBACK_CONFIDENCE)

        return self.identify_histogram(self.pitch_class_histogram(series))

    def identify_histogram(self, histogram: np.ndarray) -> ScaleMatch:
        """Find the best matching scale for a 12-bin pitch-class histogram."""
        histogram = np.asarray(histogram, dtype=float)
        if histogram.shape != (12,) or histogram.sum() <= 0:
            return ScaleMatch(FALLBACK_SCALE, FALLBACK_CONFIDENCE)
        histogram = histogram / histogram.sum()

        best = None
        best_rank = -np.inf
        for template in self.templates:
            for tonic in range(12):
                fit = self.fit(histogram, template, tonic)
                rank = fit + self.tonic_bonus * histogram[tonic]
                if rank > best_rank:
                    best_rank = rank
                    best = (template, tonic, fit)

        template, tonic, fit = best
        logger.debug("Scale: %s %s (fit %.3f)", PITCH_NAMES[tonic], template.name, fit)
        return ScaleMatch(
            scale_name=template.name,
            confidence=float(np.clip(fit, 0.0, 1.0)),
            tonic=PITCH_NAMES[tonic],
            families=template.families,
        )

    def fit(self, histogram: np.ndarray, template: ScaleTemplate, tonic: int) -> float:
        """Score how well a normalized histogram fits a template at a tonic."""
        allowed = [(tonic + i) % 12 for i in template.intervals]
        inside = float(histogram[allowed].sum())
        missing = sum(1 for pc in allowed if histogram[pc] <= 0) / len(allowed)
        return inside - self.missing_tone_penalty * missing


def identify_scale(series: PitchSeries, **kwargs) -> ScaleMatch:
    """Identify the scale of a pitch series with a default ScaleIdentifier."""
    return ScaleIdentifier(**kwargs).identify(series)


def describe_scale(scale_name: str) -> str:
    """Short description of a library scale."""
    for template in SCALE_TEMPLATES:
        if template.name == scale_name:
            return template.description
    return "An interesting scale structure with unique intervallic relationships."
