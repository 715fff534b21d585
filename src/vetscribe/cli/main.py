"""CLI for vetscribe: score / normalize / process / transcribe / serve."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from vetscribe.context import PipelineContext
from vetscribe.core.config import AppSettings, LLMConfig, PersistenceConfig
from vetscribe.core.startup_checks import validate_settings
from vetscribe.exceptions import VetScribeError
from vetscribe.formatters import get_formatter
from vetscribe.models import ExamRecord
from vetscribe.normalization import normalize_transcript
from vetscribe.quality import alert_level, compute_transcript_quality, quality_band
from vetscribe.services.pipeline import ExamPipeline
from vetscribe.transcription.postprocess import postprocess_transcript

app = typer.Typer(name="vetscribe", help="Ultrasound transcript to structured report pipeline")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)


def _build_settings(
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    store: Optional[str] = None,
    store_path: Optional[Path] = None,
) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    overrides: dict = {}
    llm: dict = {}
    if model:
        llm["model"] = model
    if base_url:
        llm["base_url"] = base_url
    if llm:
        overrides["llm"] = LLMConfig(**llm)
    persistence: dict = {}
    if store:
        persistence["backend"] = store
    if store_path:
        persistence["store_path"] = store_path
    if persistence:
        overrides["persistence"] = PersistenceConfig(**persistence)
    settings = AppSettings(**overrides)
    validate_settings(settings)
    return settings


def _read_text(path: Path) -> str:
    if not path.is_file():
        raise typer.BadParameter(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


def _print_errors(record: ExamRecord) -> None:
    for stage, err in record.errors.items():
        console.print(f"[yellow]{stage}: {err.type}: {err.message}[/yellow]")


@app.command()
def score(
    transcript_file: Path = typer.Argument(..., help="Transcript text file"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Score transcript quality."""
    raw = _read_text(transcript_file)
    clean = postprocess_transcript(raw)
    quality = compute_transcript_quality(clean, raw)

    if as_json:
        console.print_json(json.dumps(quality.model_dump(by_alias=True)))
        return

    table = Table(title=f"Transcript quality: {quality.score}/100")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for name, value in quality.metrics.model_dump().items():
        table.add_row(name, f"{value:.3f}" if isinstance(value, float) else str(value))
    table.add_row("band", quality_band(quality.score))
    table.add_row("alert", alert_level(quality.score))
    console.print(table)
    console.print(f"Flags: {', '.join(quality.flags) or '-'}")


@app.command()
def normalize(
    transcript_file: Path = typer.Argument(..., help="Transcript text file"),
    output: Optional[Path] = typer.Option(None, help="Write normalized text here"),
    threshold: int = typer.Option(2, help="Repeat count above which a segment is collapsed"),
    keep: int = typer.Option(1, help="Copies kept of a collapsed segment"),
    no_dictionary: bool = typer.Option(False, "--no-dictionary", help="Skip the correction table"),
) -> None:
    """Apply dictionary corrections and anti-loop collapsing."""
    text = postprocess_transcript(_read_text(transcript_file))
    result = normalize_transcript(
        text, threshold=threshold, keep=keep, use_dictionary=not no_dictionary
    )
    if output:
        output.write_text(result.text, encoding="utf-8")
        console.print(f"[green]Normalized transcript saved to {output}[/green]")
    else:
        console.print(result.text)
    console.print_json(json.dumps(result.telemetry(), ensure_ascii=False))


@app.command()
def process(
    transcript_file: Path = typer.Argument(..., help="Transcript text file"),
    exam_id: Optional[str] = typer.Option(None, "--exam-id", help="Defaults to the file stem"),
    output: Optional[Path] = typer.Option(None, help="Write the report here"),
    output_format: str = typer.Option("text", "--format", help="text or json"),
    model: Optional[str] = typer.Option(None, "--model", help="LLM model name"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="LLM base URL"),
    store: Optional[str] = typer.Option(None, "--store", help="file or memory"),
    store_path: Optional[Path] = typer.Option(None, "--store-path"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Run the full pipeline on a transcript file and print the report."""
    _setup_logging(verbose)
    settings = _build_settings(model, base_url, store, store_path)
    pipeline = ExamPipeline(PipelineContext.from_settings(settings))
    exam = exam_id or transcript_file.stem
    transcript = _read_text(transcript_file)

    try:
        record = asyncio.run(pipeline.run_all(exam, transcript=transcript))
    except VetScribeError as exc:
        console.print(f"[red]Pipeline failed: {type(exc).__name__}: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    _print_errors(record)
    body = get_formatter(output_format).format(record)
    if output:
        output.write_bytes(body)
        console.print(f"[green]Report saved to {output}[/green]")
    else:
        console.print(body.decode("utf-8"), markup=False, highlight=False)


@app.command()
def transcribe(
    audio_file: Path = typer.Argument(..., help="Audio file for the STT binary"),
    exam_id: Optional[str] = typer.Option(None, "--exam-id", help="Defaults to the file stem"),
    store: Optional[str] = typer.Option(None, "--store", help="file or memory"),
    store_path: Optional[Path] = typer.Option(None, "--store-path"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Transcribe audio (low beam, then one high-beam retry if needed)."""
    _setup_logging(verbose)
    settings = _build_settings(store=store, store_path=store_path)
    pipeline = ExamPipeline(PipelineContext.from_settings(settings))
    exam = exam_id or audio_file.stem

    try:
        record = asyncio.run(pipeline.transcribe(exam, audio_file))
    except VetScribeError as exc:
        console.print(f"[red]Transcription failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    history = record.transcription
    if history is not None:
        table = Table(title=f"Transcription runs ({history.decision})")
        table.add_column("Run", style="cyan")
        table.add_column("Beam")
        table.add_column("Score", style="green")
        table.add_column("Active")
        for run in history.runs:
            table.add_row(
                run.run_id,
                str(run.stt.beam_size),
                str(run.quality.score),
                "*" if run.run_id == history.active_run_id else "",
            )
        console.print(table)
    console.print(record.transcript or "", markup=False, highlight=False)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host (default from config)"),
    port: Optional[int] = typer.Option(None, help="Bind port (default from config)"),
) -> None:
    """Start the HTTP API."""
    import uvicorn

    api = AppSettings().api
    uvicorn.run("vetscribe.api.app:app", host=host or api.host, port=port or api.port)


if __name__ == "__main__":
    app()
