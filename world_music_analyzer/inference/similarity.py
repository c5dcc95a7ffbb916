"""Cultural similarity scoring.

An explainable point-based heuristic: each tradition collects points for
tempo proximity, rhythm descriptors, scale family and (optionally) timbre.
Scores are similarity hints, never an identification of where a
recording comes from.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..core import ConfigurationError, StageFault
from ..core.constants import DEFAULT_TOP_N_CULTURES
from ..analysis.rhythm import RhythmProfile
from ..analysis.spectral import SpectralProfile
from .cultures import CultureRecord, CultureCharacteristics, DEFAULT_CULTURES
from .scale import ScaleMatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    """Point values and thresholds for the similarity heuristic."""

    # (max |tempo - midpoint| in BPM, points), checked in order
    tempo_tiers: Tuple[Tuple[float, int], ...] = ((15.0, 3), (30.0, 2), (50.0, 1))
    regularity_threshold: float = 0.7
    steady_points: int = 2
    regular_points: int = 2
    complex_points: int = 3
    polyrhythmic_points: int = 3
    pentatonic_points: int = 3
    minor_points: int = 2
    major_points: int = 2
    timbre_points: int = 1
    bright_threshold: float = 0.6
    warm_threshold: float = 0.4


@dataclass(frozen=True)
class CultureMatch:
    """One scored tradition, with the reasons it scored."""

    culture_id: str
    name: str
    score: int
    reasons: Tuple[str, ...] = ()


SimilarityResult = Tuple[CultureMatch, ...]


class CultureMatcher:
    """Rank a culture table against rhythm, scale and spectral descriptors."""

    def __init__(
        self,
        cultures: Iterable[CultureRecord] = DEFAULT_CULTURES,
        top_n: int = DEFAULT_TOP_N_CULTURES,
        weights: Optional[ScoringWeights] = None,
    ):
        """
        Initialize CultureMatcher.

        Args:
            cultures: Table of traditions, in tie-break order
            top_n: Maximum number of matches returned
            weights: Point values; defaults to ScoringWeights()

        Raises:
            ConfigurationError: If top_n is less than 1
        """
        if top_n is None or top_n < 1:
            raise ConfigurationError(f"top_n must be at least 1, got {top_n}")
        self.cultures = tuple(cultures)
        self.top_n = top_n
        self.weights = weights or ScoringWeights()

    def match(
        self,
        rhythm: RhythmProfile,
        scale: ScaleMatch,
        spectral: Optional[SpectralProfile] = None,
    ) -> SimilarityResult:
        """
        Score every tradition and return the best ``top_n``.

        Returns:
            Matches with score > 0, highest first; equal scores keep
            table order

        Raises:
            StageFault: If a table entry is malformed
        """
        scored: List[CultureMatch] = []
        for index, culture in enumerate(self.cultures):
            self._validate(culture, index)
            score, reasons = self.score(culture, rhythm, scale, spectral)
            if score > 0:
                scored.append(CultureMatch(culture.id, culture.name, score, tuple(reasons)))

        # sorted() is stable, so ties stay in table order
        ranked = sorted(scored, key=lambda m: m.score, reverse=True)[: self.top_n]
        logger.debug(
            "Culture matches: %s",
            ", ".join(f"{m.culture_id}={m.score}" for m in ranked) or "none",
        )
        return tuple(ranked)

    def score(
        self,
        culture: CultureRecord,
        rhythm: RhythmProfile,
        scale: ScaleMatch,
        spectral: Optional[SpectralProfile] = None,
    ) -> Tuple[int, List[str]]:
        """
        Points for a single tradition.

        Returns:
            Tuple of (score, human-readable reasons)
        """
        w = self.weights
        chars = culture.characteristics
        score = 0
        reasons = []

        # A tempo of 0 means no rhythm was found; don't reward slow traditions for it
        if rhythm.tempo > 0:
            diff = abs(rhythm.tempo - chars.tempo_midpoint)
            for limit, points in w.tempo_tiers:
                if diff < limit:
                    score += points
                    reasons.append(f"tempo within {limit:g} BPM (+{points})")
                    break

        if rhythm.regularity > w.regularity_threshold:
            if "steady" in chars.rhythm_tags:
                score += w.steady_points
                reasons.append(f"steady rhythm (+{w.steady_points})")
            if "regular" in chars.rhythm_tags:
                score += w.regular_points
                reasons.append(f"regular rhythm (+{w.regular_points})")

        if rhythm.polyrhythmic:
            if "complex" in chars.rhythm_tags:
                score += w.complex_points
                reasons.append(f"complex rhythm (+{w.complex_points})")
            if "polyrhythmic" in chars.rhythm_tags:
                score += w.polyrhythmic_points
                reasons.append(f"polyrhythm (+{w.polyrhythmic_points})")

        if "pentatonic" in scale.families and "pentatonic" in chars.scale_tags:
            score += w.pentatonic_points
            reasons.append(f"pentatonic scale (+{w.pentatonic_points})")
        if "minor" in scale.families and "minor" in chars.scale_tags:
            score += w.minor_points
            reasons.append(f"minor tonality (+{w.minor_points})")
        if "major" in scale.families and "major" in chars.scale_tags:
            score += w.major_points
            reasons.append(f"major tonality (+{w.major_points})")

        if spectral is not None:
            if spectral.brightness > w.bright_threshold and "bright" in chars.instrument_tags:
                score += w.timbre_points
                reasons.append(f"bright timbre (+{w.timbre_points})")
            elif spectral.brightness < w.warm_threshold and "warm" in chars.instrument_tags:
                score += w.timbre_points
                reasons.append(f"warm timbre (+{w.timbre_points})")

        return score, reasons

    def _validate(self, culture, index: int) -> None:
        if not isinstance(culture, CultureRecord):
            raise StageFault(
                "cultural_match",
                f"table entry #{index} is {type(culture).__name__}, not CultureRecord",
            )
        chars = culture.characteristics
        if not isinstance(chars, CultureCharacteristics):
            raise StageFault("cultural_match", f"culture '{culture.id}' has no characteristics")
        try:
            low, high = chars.tempo_range_bpm
        except (TypeError, ValueError) as e:
            raise StageFault(
                "cultural_match", f"culture '{culture.id}' tempo range is malformed", e
            ) from e
        if low <= 0 or high < low:
            raise StageFault(
                "cultural_match",
                f"culture '{culture.id}' has invalid tempo range ({low}, {high})",
            )


def match_cultures(
    rhythm: RhythmProfile,
    scale: ScaleMatch,
    spectral: Optional[SpectralProfile] = None,
    cultures: Iterable[CultureRecord] = DEFAULT_CULTURES,
    top_n: int = DEFAULT_TOP_N_CULTURES,
) -> SimilarityResult:
    """Rank ``cultures`` by similarity to the given descriptors."""
    return CultureMatcher(cultures, top_n=top_n).match(rhythm, scale, spectral)
