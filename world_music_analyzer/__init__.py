"""World Music Analyzer - audio descriptors and cultural similarity.

Architecture Layers:
    1. core/      - AudioSignal, constants, exceptions
    2. input/     - Audio decoding and analysis-window preparation
    3. analysis/  - Low-level signal analysis (rhythm, pitch, spectrum)
    4. inference/ - Musical understanding (scale, culture similarity, insights)
    5. orchestrator - Stage sequencing, cancellation and progress
"""

__version__ = "0.1.0"

# Core types
from .core import (
    AudioSignal,
    AnalyzerError,
    EmptySignal,
    ConfigurationError,
    AudioDecodeError,
    StageFault,
    AnalysisCancelled,
)

# Input layer
from .input import AudioLoader, SignalPreprocessor, trim_to_window

# Analysis layer
from .analysis import (
    RhythmAnalyzer,
    RhythmProfile,
    PitchTracker,
    PitchSample,
    SpectralAnalyzer,
    SpectralProfile,
    analyze_rhythm,
    detect_pitch,
    track_pitch,
    summarize_pitch,
    frequency_to_midi_note,
    midi_to_note_name,
    analyze_spectrum,
)

# Inference layer
from .inference import (
    ScaleIdentifier,
    ScaleMatch,
    CultureMatcher,
    CultureMatch,
    CultureRecord,
    DEFAULT_CULTURES,
    identify_scale,
    match_cultures,
    load_culture_table,
)

# Orchestration
from .orchestrator import (
    AnalysisOrchestrator,
    AnalysisOptions,
    AnalysisOutcome,
    AnalysisResult,
    AnalysisRun,
    CancellationToken,
    Stage,
    StageEvent,
    run_analysis,
)

__all__ = [
    # Core
    "AudioSignal",
    "AnalyzerError",
    "EmptySignal",
    "ConfigurationError",
    "AudioDecodeError",
    "StageFault",
    "AnalysisCancelled",
    # Input
    "AudioLoader",
    "SignalPreprocessor",
    "trim_to_window",
    # Analysis
    "RhythmAnalyzer",
    "RhythmProfile",
    "PitchTracker",
    "PitchSample",
    "SpectralAnalyzer",
    "SpectralProfile",
    "analyze_rhythm",
    "detect_pitch",
    "track_pitch",
    "summarize_pitch",
    "frequency_to_midi_note",
    "midi_to_note_name",
    "analyze_spectrum",
    # Inference
    "ScaleIdentifier",
    "ScaleMatch",
    "CultureMatcher",
    "CultureMatch",
    "CultureRecord",
    "DEFAULT_CULTURES",
    "identify_scale",
    "match_cultures",
    "load_culture_table",
    # Orchestration
    "AnalysisOrchestrator",
    "AnalysisOptions",
    "AnalysisOutcome",
    "AnalysisResult",
    "AnalysisRun",
    "CancellationToken",
    "Stage",
    "StageEvent",
    "run_analysis",
]
