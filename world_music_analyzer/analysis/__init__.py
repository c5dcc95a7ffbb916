"""Analysis layer - Low-level signal analysis.

This layer extracts descriptors from the analysis window:
- Onsets and rhythm (tempo, regularity, entropy, polyrhythm)
- Pitch tracking (autocorrelation F0, note mapping)
- Spectrum (centroid, rolloff, brightness)
"""

from .rhythm import RhythmAnalyzer, RhythmProfile, analyze_rhythm
from .pitch import (
    PitchTracker,
    PitchSample,
    PitchSeries,
    PitchSummary,
    detect_pitch,
    track_pitch,
    frequency_to_midi_note,
    midi_to_note_name,
    note_histogram,
    summarize_pitch,
)
from .spectral import SpectralAnalyzer, SpectralProfile, analyze_spectrum

__all__ = [
    # Rhythm
    "RhythmAnalyzer",
    "RhythmProfile",
    "analyze_rhythm",
    # Pitch
    "PitchTracker",
    "PitchSample",
    "PitchSeries",
    "PitchSummary",
    "detect_pitch",
    "track_pitch",
    "frequency_to_midi_note",
    "midi_to_note_name",
    "note_histogram",
    "summarize_pitch",
    # Spectrum
    "SpectralAnalyzer",
    "SpectralProfile",
    "analyze_spectrum",
]
