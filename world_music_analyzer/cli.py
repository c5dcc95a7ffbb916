"""Command-line interface for World Music Analyzer.

Provides commands for:
- analyze: Rhythm, pitch, spectrum, scale and cultural similarity of a clip
- cultures: List the traditions used for similarity scoring
- info: Show audio file information
"""

import logging
import signal
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

app = typer.Typer(
    name="world-music-analyzer",
    help="Audio descriptors and cultural similarity",
    rich_markup_mode="markdown",
)
console = Console()
err_console = Console(stderr=True)

STAGE_LABELS = {
    "preprocess": "Preparing analysis window",
    "rhythm": "Analyzing rhythm",
    "pitch": "Analyzing pitch",
    "spectral": "Analyzing spectrum",
    "scale_id": "Identifying scale",
    "cultural_match": "Comparing with musical traditions",
}

EXIT_CANCELLED = 130


def _setup_logging(verbose: bool = False) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[
            RichHandler(
                level=level,
                console=err_console,
                rich_tracebacks=verbose,
                show_path=verbose,
                show_time=False,
            )
        ],
        force=True,
    )


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file (WAV, FLAC, OGG, MP3)"),
    max_duration: float = typer.Option(
        15.0, "--max-duration", "-d", help="Seconds of audio to analyze"
    ),
    pitch_frames: int = typer.Option(
        20, "--pitch-frames", help="Maximum frames examined by the pitch tracker"
    ),
    spectral_windows: int = typer.Option(
        50, "--spectral-windows", help="Maximum frames averaged by the spectral analyzer"
    ),
    top: int = typer.Option(5, "--top", "-n", help="Number of culture matches to show"),
    cultures_file: Optional[Path] = typer.Option(
        None, "--cultures", "-c", help="JSON culture table replacing the built-in one"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log stage progress"),
):
    """Analyze a clip and compare it with musical traditions.

    Similarity scores are heuristic hints, not a statement of origin.

    **Examples:**

        world-music-analyzer analyze song.wav

        world-music-analyzer analyze song.flac --top 3 --json
    """
    _setup_logging(verbose)

    from .core import AnalyzerError, ConfigurationError
    from .input import AudioLoader
    from .inference import DEFAULT_CULTURES, load_culture_table
    from .orchestrator import AnalysisOptions, AnalysisOrchestrator, CancellationToken

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        options = AnalysisOptions(
            max_duration_sec=max_duration,
            max_pitch_frames=pitch_frames,
            max_spectral_windows=spectral_windows,
            top_n_cultures=top,
        )
        cultures = load_culture_table(cultures_file) if cultures_file else DEFAULT_CULTURES
    except (ConfigurationError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        audio = AudioLoader().load(str(input_file))
    except (ValueError, AnalyzerError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not json_output:
        console.print(f"\n[bold blue]Analysis: {input_file.name}[/bold blue]")
        console.print(f"   Duration: {audio.duration:.2f}s, Sample rate: {audio.sample_rate}Hz\n")

    token = CancellationToken()
    previous_handler = signal.signal(signal.SIGINT, lambda *_: token.cancel())
    orchestrator = AnalysisOrchestrator(options, cultures)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
            disable=json_output,
        ) as progress:
            task = progress.add_task("Starting...", total=None)

            def on_progress(event):
                if event.status == "started":
                    label = STAGE_LABELS.get(event.stage.value, event.stage.value)
                    progress.update(task, description=label)

            outcome = orchestrator.run(audio, cancel_token=token, on_progress=on_progress)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if outcome.cancelled:
        console.print("[yellow]Analysis cancelled[/yellow]")
        raise typer.Exit(EXIT_CANCELLED)

    if outcome.failed:
        stage = outcome.failed_stage.value
        console.print(f"[red]Analysis failed during {stage}: {escape(str(outcome.error))}[/red]")
        raise typer.Exit(1)

    result = outcome.result
    if json_output:
        console.print_json(data=_result_to_dict(input_file, result))
        return

    _show_rhythm_table(result.rhythm)
    _show_pitch_table(result.pitch_summary)
    _show_spectral_table(result.spectral)
    _show_scale(result.scale)
    _show_matches_table(result.similarity)
    _show_insights(result.insights)

    console.print(f"\n[green][OK] Analysis complete in {result.timing['total_time']:.2f}s[/green]")


@app.command()
def cultures(
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Only show this region"),
    cultures_file: Optional[Path] = typer.Option(
        None, "--cultures", "-c", help="JSON culture table replacing the built-in one"
    ),
):
    """List the musical traditions used for similarity scoring."""
    from .core import ConfigurationError
    from .inference import DEFAULT_CULTURES, cultures_by_region, load_culture_table

    try:
        table_data = load_culture_table(cultures_file) if cultures_file else DEFAULT_CULTURES
    except (ConfigurationError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if region:
        table_data = cultures_by_region(region, table_data)
        if not table_data:
            console.print(f"[yellow]No traditions listed for region '{region}'[/yellow]")
            return

    table = Table(title="Musical Traditions")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Region", style="yellow")
    table.add_column("Tempo (BPM)", style="magenta")
    table.add_column("Rhythm")
    table.add_column("Scales")

    for culture in table_data:
        chars = culture.characteristics
        low, high = chars.tempo_range_bpm
        table.add_row(
            culture.id,
            culture.name,
            culture.region,
            f"{low:g}-{high:g}",
            ", ".join(sorted(chars.rhythm_tags)),
            ", ".join(sorted(chars.scale_tags)),
        )

    console.print(table)


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
):
    """Show information about an audio file."""
    from .core import AnalyzerError
    from .input import AudioLoader

    _setup_logging()

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        audio = AudioLoader().load(str(input_file))
    except (ValueError, AnalyzerError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    console.print(f"  Duration: {audio.duration:.2f} seconds")
    console.print(f"  Sample rate: {audio.sample_rate} Hz")
    console.print(f"  Samples: {audio.num_samples:,}")


def _show_rhythm_table(rhythm):
    """Display rhythm descriptors in a table."""
    from .inference.insights import complexity_label, percussiveness_label

    table = Table(title="Rhythm")
    table.add_column("Feature", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Tempo", f"{rhythm.tempo:.1f} BPM" if rhythm.tempo > 0 else "N/A")
    table.add_row("Onsets", str(rhythm.peak_count))
    table.add_row("Regularity", f"{rhythm.regularity * 100:.1f}%")
    table.add_row(
        "Temporal complexity",
        f"{rhythm.temporal_complexity:.2f} ({complexity_label(rhythm.temporal_complexity)})",
    )
    table.add_row("IOI entropy", f"{rhythm.entropy:.2f} bits")
    table.add_row(
        "Percussiveness",
        f"{rhythm.percussiveness:.3f} ({percussiveness_label(rhythm.percussiveness)})",
    )
    if rhythm.polyrhythmic:
        table.add_row("Polyrhythm", rhythm.polyrhythm_ratio)

    console.print(table)


def _show_pitch_table(summary):
    """Display pitch statistics in a table."""
    table = Table(title="Pitch")
    table.add_column("Feature", style="cyan")
    table.add_column("Value", style="green")

    average = summary.format_hz(summary.mean_hz)
    if summary.mean_note:
        average += f" ({summary.mean_note})"
    table.add_row("Average pitch", average)
    if summary.count:
        table.add_row("Pitch range", f"{summary.min_hz:.2f} - {summary.max_hz:.2f} Hz")
    else:
        table.add_row("Pitch range", "N/A")
    table.add_row("Most common note", summary.most_common_note or "N/A")
    table.add_row(
        "Pitch variation",
        f"{summary.format_hz(summary.std_hz)} ({summary.variability} variability)",
    )
    table.add_row("Pitches detected", str(summary.count))

    console.print(table)


def _show_spectral_table(spectral):
    """Display spectral descriptors in a table."""
    table = Table(title="Spectrum")
    table.add_column("Feature", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Spectral centroid", f"{spectral.centroid_hz:.1f} Hz")
    table.add_row("Spectral rolloff", f"{spectral.rolloff_hz:.1f} Hz")
    table.add_row("Brightness", f"{spectral.brightness * 100:.1f}%")
    table.add_row("Frames averaged", str(spectral.frames_analyzed))

    console.print(table)


def _show_scale(scale):
    """Print the identified scale."""
    from .inference import describe_scale

    console.print(f"\n[cyan]Scale:[/cyan] [green]{scale.name}[/green]")
    console.print(f"   Confidence: {scale.confidence:.2f}")
    if not scale.is_fallback:
        console.print(f"   [dim]{describe_scale(scale.scale_name)}[/dim]")


def _show_matches_table(similarity):
    """Display culture matches in a table."""
    if not similarity:
        console.print(
            "\n[yellow]No strong matches found with the available traditions.[/yellow]"
        )
        return

    table = Table(title="Shared characteristics with musical traditions")
    table.add_column("#", style="dim")
    table.add_column("Tradition", style="cyan")
    table.add_column("Score", style="magenta")
    table.add_column("Because of", style="green")

    for rank, match in enumerate(similarity, start=1):
        table.add_row(str(rank), match.name, str(match.score), "; ".join(match.reasons))

    console.print(table)
    console.print("[dim]Scores are similarity hints, not an identification of origin.[/dim]")


def _show_insights(insights):
    """Print descriptive labels."""
    console.print("\n[bold]Musical Insights:[/bold]")
    console.print(f"  Tempo: {insights.tempo_category} (suggests {insights.time_signature_hint})")
    console.print(f"  Rhythmic character: {insights.rhythmic_character}")
    console.print(f"  Timbre: {insights.timbre}, {insights.energy}")
    console.print(f"  Texture: {insights.texture}")
    console.print(f"  Scale family: {insights.scale_family} ({insights.scale_confidence})")
    for use in insights.suggested_uses:
        console.print(f"  - {use}")


def _result_to_dict(input_file: Path, result) -> Dict[str, Any]:
    """Convert an AnalysisResult to JSON-serializable data."""
    rhythm = result.rhythm
    summary = result.pitch_summary
    return {
        "input": str(input_file),
        "duration": result.duration_sec,
        "sample_rate": result.sample_rate,
        "rhythm": {
            "tempo": rhythm.tempo,
            "peak_count": rhythm.peak_count,
            "regularity": rhythm.regularity,
            "entropy": rhythm.entropy,
            "temporal_complexity": rhythm.temporal_complexity,
            "polyrhythmic": rhythm.polyrhythmic,
            "polyrhythm_ratio": rhythm.polyrhythm_ratio,
            "percussiveness": rhythm.percussiveness,
            "intervals_ms": list(rhythm.intervals_ms),
        },
        "pitch": {
            "count": summary.count,
            "mean_hz": summary.mean_hz,
            "min_hz": summary.min_hz,
            "max_hz": summary.max_hz,
            "std_hz": summary.std_hz,
            "most_common_note": summary.most_common_note,
            "samples": [
                {"frequency_hz": s.frequency_hz, "timestamp_sec": s.timestamp_sec}
                for s in result.pitch
            ],
        },
        "spectral": {
            "centroid_hz": result.spectral.centroid_hz,
            "rolloff_hz": result.spectral.rolloff_hz,
            "brightness": result.spectral.brightness,
        },
        "scale": {
            "name": result.scale.scale_name,
            "tonic": result.scale.tonic,
            "confidence": result.scale.confidence,
        },
        "similarity": [
            {"culture_id": m.culture_id, "name": m.name, "score": m.score}
            for m in result.similarity
        ],
        "timing": result.timing,
    }


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
