"""Inference layer - Musical understanding built on the analysis layer.

- Scale identification (pitch-class templates)
- Cultural similarity scoring against a static table
- Plain-language insights

Pipeline: Pitch → Scale; Rhythm + Scale (+ Spectrum) → Culture matches
"""

from .scale import (
    ScaleIdentifier,
    ScaleMatch,
    ScaleTemplate,
    SCALE_TEMPLATES,
    identify_scale,
    describe_scale,
)
from .cultures import (
    CultureRecord,
    CultureCharacteristics,
    DEFAULT_CULTURES,
    get_culture,
    cultures_by_region,
    load_culture_table,
)
from .similarity import (
    CultureMatcher,
    CultureMatch,
    ScoringWeights,
    SimilarityResult,
    match_cultures,
)
from .insights import MusicalInsights, describe_music

__all__ = [
    # Scale identification
    "ScaleIdentifier",
    "ScaleMatch",
    "ScaleTemplate",
    "SCALE_TEMPLATES",
    "identify_scale",
    "describe_scale",
    # Culture table
    "CultureRecord",
    "CultureCharacteristics",
    "DEFAULT_CULTURES",
    "get_culture",
    "cultures_by_region",
    "load_culture_table",
    # Similarity
    "CultureMatcher",
    "CultureMatch",
    "ScoringWeights",
    "SimilarityResult",
    "match_cultures",
    # Insights
    "MusicalInsights",
    "describe_music",
]
