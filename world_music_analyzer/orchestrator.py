"""Analysis orchestration - run the stages in order with cancellation and progress.

Stages run strictly one after another on the caller's thread:

    preprocess -> rhythm -> pitch -> spectral -> scale_id -> cultural_match

Between stages (and every few frames inside the pitch and spectral
stages) the run checks its CancellationToken. A cancelled run discards
everything it computed; a stage that raises ends the run as FAILED,
tagged with the stage it was in.
"""

import logging
import numbers
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple

from .core import (
    AudioSignal,
    AnalysisCancelled,
    AnalyzerError,
    ConfigurationError,
    StageFault,
    DEFAULT_MAX_DURATION_SEC,
    DEFAULT_MAX_PITCH_FRAMES,
    DEFAULT_MAX_SPECTRAL_WINDOWS,
    DEFAULT_TOP_N_CULTURES,
)
from .input import SignalPreprocessor
from .analysis import (
    RhythmAnalyzer,
    RhythmProfile,
    PitchTracker,
    PitchSeries,
    PitchSummary,
    SpectralAnalyzer,
    SpectralProfile,
    summarize_pitch,
)
from .inference import (
    ScaleIdentifier,
    ScaleMatch,
    CultureMatcher,
    CultureRecord,
    DEFAULT_CULTURES,
    SimilarityResult,
    MusicalInsights,
    describe_music,
)

logger = logging.getLogger(__name__)


class Stage(Enum):
    """States of an analysis run."""

    PREPROCESS = "preprocess"
    RHYTHM = "rhythm"
    PITCH = "pitch"
    SPECTRAL = "spectral"
    SCALE_ID = "scale_id"
    CULTURAL_MATCH = "cultural_match"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Stage.DONE, Stage.CANCELLED, Stage.FAILED)


PIPELINE: Tuple[Stage, ...] = (
    Stage.PREPROCESS,
    Stage.RHYTHM,
    Stage.PITCH,
    Stage.SPECTRAL,
    Stage.SCALE_ID,
    Stage.CULTURAL_MATCH,
)


class CancellationToken:
    """Advisory stop flag; safe to set from another thread or a signal handler."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled()


@dataclass(frozen=True)
class AnalysisOptions:
    """Bounds on how much work one run may do."""

    max_duration_sec: float = DEFAULT_MAX_DURATION_SEC
    max_pitch_frames: int = DEFAULT_MAX_PITCH_FRAMES
    max_spectral_windows: int = DEFAULT_MAX_SPECTRAL_WINDOWS
    top_n_cultures: int = DEFAULT_TOP_N_CULTURES

    def __post_init__(self):
        duration = self.max_duration_sec
        if isinstance(duration, bool) or not isinstance(duration, numbers.Real):
            raise ConfigurationError(f"max_duration_sec must be a number, got {duration!r}")
        if not duration > 0:
            raise ConfigurationError(f"max_duration_sec must be positive, got {duration}")
        for name in ("max_pitch_frames", "max_spectral_windows", "top_n_cultures"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


@dataclass
class StageTimings:
    """Track timing of processing stages."""

    stages: Dict[str, float] = field(default_factory=dict)
    _current_stage: Optional[str] = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)

    def start(self, stage: str) -> None:
        """Start timing a stage."""
        self._current_stage = stage
        self._start_time = time.perf_counter()

    def stop(self) -> float:
        """Stop timing the current stage, return duration."""
        if self._current_stage is None:
            return 0.0
        duration = time.perf_counter() - self._start_time
        self.stages[self._current_stage] = duration
        self._current_stage = None
        return duration

    @property
    def total_time(self) -> float:
        """Get total time across all stages."""
        return sum(self.stages.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "stages": dict(self.stages),
            "total_time": self.total_time,
        }


@dataclass(frozen=True)
class StageEvent:
    """Progress notification emitted at a stage boundary."""

    stage: Stage
    status: str  # "started", "completed", "cancelled", "failed"
    elapsed: float = 0.0


@dataclass(frozen=True)
class AnalysisResult:
    """Everything a completed run produced."""

    rhythm: RhythmProfile
    pitch: PitchSeries
    pitch_summary: PitchSummary
    spectral: SpectralProfile
    scale: ScaleMatch
    similarity: SimilarityResult
    timing: Dict[str, Any]
    duration_sec: float = 0.0
    sample_rate: int = 0

    @property
    def insights(self) -> MusicalInsights:
        return describe_music(self.rhythm, self.scale, self.spectral)


@dataclass(frozen=True)
class AnalysisOutcome:
    """Terminal state of a run: DONE with a result, CANCELLED, or FAILED."""

    status: Stage
    result: Optional[AnalysisResult] = None
    failed_stage: Optional[Stage] = None
    error: Optional[BaseException] = None
    events: Tuple[StageEvent, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status is Stage.DONE

    @property
    def cancelled(self) -> bool:
        return self.status is Stage.CANCELLED

    @property
    def failed(self) -> bool:
        return self.status is Stage.FAILED


class AnalysisRun:
    """One invocation of the pipeline over one signal.

    Owns the in-progress record; nothing is shared between runs.
    Drive it by iterating ``steps()``; afterwards ``outcome`` is set.
    """

    def __init__(
        self,
        signal: AudioSignal,
        options: Optional[AnalysisOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
        cultures: Iterable[CultureRecord] = DEFAULT_CULTURES,
    ):
        self.options = options or AnalysisOptions()
        self.cancel_token = cancel_token or CancellationToken()
        self.cultures = tuple(cultures)
        self.state: Optional[Stage] = None
        self.outcome: Optional[AnalysisOutcome] = None
        self._signal: Optional[AudioSignal] = signal
        self._record: Dict[str, Any] = {}
        self._events = []
        self._timings = StageTimings()

    @property
    def record(self) -> Dict[str, Any]:
        """Snapshot of the stage outputs produced so far."""
        return dict(self._record)

    def steps(self) -> Iterator[StageEvent]:
        """
        Run the pipeline, yielding an event at every stage boundary.

        Yields:
            StageEvent for each start/completion and the terminal state
        """
        if self.state is not None:
            raise RuntimeError("An AnalysisRun can only be executed once")

        for stage in PIPELINE:
            if self.cancel_token.cancelled:
                yield self._cancel()
                return

            self.state = stage
            yield self._emit(StageEvent(stage, "started"))
            self._timings.start(stage.value)
            try:
                self._run_stage(stage)
            except AnalysisCancelled:
                self._timings.stop()
                yield self._cancel()
                return
            except Exception as e:
                self._timings.stop()
                yield self._fail(stage, e)
                return
            elapsed = self._timings.stop()
            logger.debug("Stage %s finished in %.3fs", stage.value, elapsed)
            yield self._emit(StageEvent(stage, "completed", elapsed))

        if self.cancel_token.cancelled:
            yield self._cancel()
            return

        yield self._finish()

    def _checkpoint(self) -> None:
        self.cancel_token.raise_if_cancelled()

    def _run_stage(self, stage: Stage) -> None:
        opts = self.options
        rec = self._record

        if stage is Stage.PREPROCESS:
            rec["window"] = SignalPreprocessor(opts.max_duration_sec).process(self._signal)
        elif stage is Stage.RHYTHM:
            rec["rhythm"] = RhythmAnalyzer().analyze(rec["window"])
        elif stage is Stage.PITCH:
            tracker = PitchTracker(max_frames=opts.max_pitch_frames)
            rec["pitch"] = tracker.track(rec["window"], checkpoint=self._checkpoint)
            rec["pitch_summary"] = summarize_pitch(rec["pitch"])
        elif stage is Stage.SPECTRAL:
            analyzer = SpectralAnalyzer(max_windows=opts.max_spectral_windows)
            rec["spectral"] = analyzer.analyze(rec["window"], checkpoint=self._checkpoint)
        elif stage is Stage.SCALE_ID:
            rec["scale"] = ScaleIdentifier().identify(rec["pitch"])
        elif stage is Stage.CULTURAL_MATCH:
            matcher = CultureMatcher(self.cultures, top_n=opts.top_n_cultures)
            rec["similarity"] = matcher.match(rec["rhythm"], rec["scale"], rec["spectral"])

    def _emit(self, event: StageEvent) -> StageEvent:
        self._events.append(event)
        return event

    def _release(self) -> None:
        self._record.clear()
        self._signal = None

    def _cancel(self) -> StageEvent:
        logger.info("Analysis cancelled during %s", self.state.value if self.state else "startup")
        self._release()
        self.state = Stage.CANCELLED
        event = self._emit(StageEvent(Stage.CANCELLED, "cancelled"))
        self.outcome = AnalysisOutcome(Stage.CANCELLED, events=tuple(self._events))
        return event

    def _fail(self, stage: Stage, error: Exception) -> StageEvent:
        # Analyzer errors keep their own type; anything else is an internal fault
        if not isinstance(error, AnalyzerError):
            error = StageFault(stage.value, f"{type(error).__name__}: {error}", error)
        logger.error("Analysis failed in %s: %s", stage.value, error)
        self._release()
        self.state = Stage.FAILED
        event = self._emit(StageEvent(Stage.FAILED, "failed"))
        self.outcome = AnalysisOutcome(
            Stage.FAILED,
            failed_stage=stage,
            error=error,
            events=tuple(self._events),
        )
        return event

    def _finish(self) -> StageEvent:
        rec = self._record
        window = rec["window"]
        timing = self._timings.to_dict()
        result = AnalysisResult(
            rhythm=rec["rhythm"],
            pitch=rec["pitch"],
            pitch_summary=rec["pitch_summary"],
            spectral=rec["spectral"],
            scale=rec["scale"],
            similarity=rec["similarity"],
            timing=timing,
            duration_sec=window.duration,
            sample_rate=window.sample_rate,
        )
        logger.info("Analysis complete in %.3fs", timing["total_time"])
        self._signal = None
        self.state = Stage.DONE
        event = self._emit(StageEvent(Stage.DONE, "completed", timing["total_time"]))
        self.outcome = AnalysisOutcome(Stage.DONE, result=result, events=tuple(self._events))
        return event


class AnalysisOrchestrator:
    """Runs AnalysisRuns with a fixed set of options and culture table."""

    def __init__(
        self,
        options: Optional[AnalysisOptions] = None,
        cultures: Iterable[CultureRecord] = DEFAULT_CULTURES,
    ):
        self.options = options or AnalysisOptions()
        self.cultures = tuple(cultures)

    def start(
        self,
        signal: AudioSignal,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AnalysisRun:
        """Create a run without executing it."""
        return AnalysisRun(signal, self.options, cancel_token, self.cultures)

    def run(
        self,
        signal: AudioSignal,
        cancel_token: Optional[CancellationToken] = None,
        on_progress: Optional[Callable[[StageEvent], None]] = None,
    ) -> AnalysisOutcome:
        """
        Execute the full pipeline.

        Args:
            signal: Decoded mono audio
            cancel_token: Checked at stage boundaries and yield points
            on_progress: Called with every StageEvent

        Returns:
            AnalysisOutcome (DONE, CANCELLED or FAILED)
        """
        run = self.start(signal, cancel_token)
        for event in run.steps():
            if on_progress is not None:
                on_progress(event)
        return run.outcome


def run_analysis(
    signal: AudioSignal,
    options: Optional[AnalysisOptions] = None,
    cancel_token: Optional[CancellationToken] = None,
    on_progress: Optional[Callable[[StageEvent], None]] = None,
    cultures: Iterable[CultureRecord] = DEFAULT_CULTURES,
) -> AnalysisOutcome:
    """Analyze a signal with a one-off orchestrator."""
    orchestrator = AnalysisOrchestrator(options, cultures)
    return orchestrator.run(signal, cancel_token=cancel_token, on_progress=on_progress)
