"""Musical insights - plain-language labels for the numeric descriptors."""

from dataclasses import dataclass, field
from typing import List

from ..analysis.rhythm import RhythmProfile
from ..analysis.spectral import SpectralProfile
from .scale import ScaleMatch


@dataclass(frozen=True)
class MusicalInsights:
    """Descriptive summary of an analysis."""

    tempo_category: str
    time_signature_hint: str
    rhythmic_character: str
    complexity: str
    percussiveness: str
    timbre: str
    energy: str
    texture: str
    scale_family: str
    scale_confidence: str
    suggested_uses: List[str] = field(default_factory=list)


def tempo_category(tempo: float) -> str:
    if tempo <= 0:
        return "No steady pulse"
    if tempo < 60:
        return "Very Slow (Grave/Largo)"
    if tempo < 80:
        return "Slow (Adagio/Andante)"
    if tempo < 108:
        return "Moderate (Moderato)"
    if tempo < 140:
        return "Fast (Allegro)"
    return "Very Fast (Presto)"


def time_signature_hint(tempo: float) -> str:
    if tempo <= 0:
        return "Unknown"
    if tempo > 150:
        return "2/4 or 6/8"
    if tempo > 100:
        return "4/4"
    return "3/4 or 6/8"


def rhythmic_character(rhythm: RhythmProfile) -> str:
    if rhythm.polyrhythmic:
        return "Polyrhythmic (Multiple simultaneous patterns)"
    if rhythm.regularity > 0.8:
        return "Steady/Metronomic"
    if rhythm.regularity > 0.5:
        return "Moderately Regular"
    return "Fluid/Rubato"


def complexity_label(complexity: float) -> str:
    if complexity > 0.7:
        return "Very Complex"
    if complexity > 0.5:
        return "Complex"
    if complexity > 0.3:
        return "Moderate"
    return "Simple"


def percussiveness_label(zcr: float) -> str:
    if zcr > 0.15:
        return "Highly Percussive"
    if zcr > 0.08:
        return "Moderately Percussive"
    return "Melodic"


def timbre_category(brightness: float) -> str:
    if brightness > 0.6:
        return "Bright/Shimmering"
    if brightness > 0.4:
        return "Balanced"
    return "Dark/Warm"


def energy_level(rolloff_hz: float) -> str:
    if rolloff_hz > 3000:
        return "High Energy"
    if rolloff_hz > 1500:
        return "Moderate Energy"
    return "Low Energy"


def textural_density(spectral: SpectralProfile, rhythm: RhythmProfile) -> str:
    if spectral.brightness > 0.5 and rhythm.percussiveness > 0.1:
        return "Dense/Complex"
    if spectral.brightness < 0.3 and rhythm.percussiveness < 0.08:
        return "Sparse/Minimal"
    return "Moderate"


def scale_family(scale: ScaleMatch) -> str:
    name = scale.scale_name
    if scale.is_fallback:
        return "Undetermined"
    if "Pentatonic" in name:
        return "Pentatonic (5-note scales)"
    if "Major" in name or "Minor" in name:
        return "Diatonic (7-note scales)"
    if "Blues" in name:
        return "Blues-influenced"
    if "Whole Tone" in name:
        return "Whole Tone (6-note symmetrical)"
    return "Modal"


def confidence_label(confidence: float) -> str:
    if confidence > 0.7:
        return "High Confidence"
    if confidence > 0.4:
        return "Moderate Confidence"
    return "Low Confidence - Ambiguous Tonality"


def suggested_uses(
    rhythm: RhythmProfile,
    scale: ScaleMatch,
    spectral: SpectralProfile,
) -> List[str]:
    """Contexts the material would suit, one suggestion per aspect."""
    suggestions = []

    if rhythm.tempo < 70:
        suggestions.append("Ballads, meditative music, ambient soundscapes")
    elif rhythm.tempo < 100:
        suggestions.append("Folk songs, blues, soul, downtempo")
    elif rhythm.tempo < 130:
        suggestions.append("Pop, rock, funk, moderate dance music")
    else:
        suggestions.append("Uptempo dance, electronic music, fast folk traditions")

    name = scale.scale_name
    if "Pentatonic" in name:
        suggestions.append(
            "Improvisation-friendly, common in blues, rock, and traditional music worldwide"
        )
    elif "Blues" in name:
        suggestions.append("Blues, jazz, rock, gospel music")
    elif "Dorian" in name or "Mixolydian" in name:
        suggestions.append("Jazz, fusion, modal jazz, contemporary folk")
    elif "Phrygian" in name:
        suggestions.append("Flamenco, metal, Mediterranean-influenced music")
    elif "Minor" in name:
        suggestions.append("Classical compositions, emotional/dramatic music, film scores")

    if rhythm.polyrhythmic:
        suggestions.append("Percussion ensembles, layered grooves, cross-rhythm studies")
    elif rhythm.regularity > 0.8:
        suggestions.append("Dance music, marching music, metronomic compositions")
    elif rhythm.regularity < 0.5:
        suggestions.append("Free-form jazz, rubato classical pieces, expressive performances")

    if spectral.brightness > 0.6:
        suggestions.append("Bright instrumentation (cymbals, strings, synths)")
    else:
        suggestions.append("Warm instrumentation (bass, woodwinds, mellow tones)")

    return suggestions


def describe_music(
    rhythm: RhythmProfile,
    scale: ScaleMatch,
    spectral: SpectralProfile,
) -> MusicalInsights:
    """Turn rhythm, scale and spectral descriptors into labels."""
    return MusicalInsights(
        tempo_category=tempo_category(rhythm.tempo),
        time_signature_hint=time_signature_hint(rhythm.tempo),
        rhythmic_character=rhythmic_character(rhythm),
        complexity=complexity_label(rhythm.temporal_complexity),
        percussiveness=percussiveness_label(rhythm.percussiveness),
        timbre=timbre_category(spectral.brightness),
        energy=energy_level(spectral.rolloff_hz),
        texture=textural_density(spectral, rhythm),
        scale_family=scale_family(scale),
        scale_confidence=confidence_label(scale.confidence),
        suggested_uses=suggested_uses(rhythm, scale, spectral),
    )
