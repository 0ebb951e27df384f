"""
CLI Interface
=============
Command-line interface for the question extraction engine.

Usage:
    python -m question_extractor extract <path> [options]
    python -m question_extractor batch <directory> [options]
    python -m question_extractor serve [options]
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from . import __version__
from .engine import ExtractionEngine, ExtractorConfig
from .exceptions import (
    ExtractionError,
    InvalidShapeError,
    MissingCourseError,
    UnsupportedTypeError,
)
from .models import Difficulty, DocumentType, RecordDefaults

console = Console()

SUPPORTED_SUFFIXES = {f".{t.value}" for t in DocumentType}


def _defaults(course, difficulty, auto_approve) -> RecordDefaults:
    return RecordDefaults(
        course=course or None,
        difficulty=Difficulty(difficulty) if difficulty else None,
        auto_approve=auto_approve,
    )


@click.group()
@click.version_option(version=__version__, prog_name="question-extractor")
def cli():
    """Question Extractor: turn quiz documents into question candidates."""
    pass


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--type", "-t", "declared_type",
    default=None,
    type=click.Choice([t.value for t in DocumentType]),
    help="Document type (defaults to the file extension)",
)
@click.option("--course", "-c", default=None, help="Default course")
@click.option(
    "--difficulty", "-d",
    default=None,
    type=click.Choice([d.value for d in Difficulty]),
    help="Default difficulty",
)
@click.option(
    "--auto-approve",
    is_flag=True,
    default=False,
    help="Mark extracted questions active without review",
)
@click.option(
    "--output", "-o",
    default="output",
    help="Output directory for saved JSON",
)
@click.option(
    "--save",
    is_flag=True,
    default=False,
    help="Save the result JSON into the output directory",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option(
    "--log-file",
    default=None,
    help="Path to log file",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only JSON result to stdout (for programmatic use)",
)
def extract(
    path: str,
    declared_type: str,
    course: str,
    difficulty: str,
    auto_approve: bool,
    output: str,
    save: bool,
    log_level: str,
    log_file: str,
    json_output: bool,
):
    """Extract question candidates from a single document."""

    if json_output:
        # Suppress console output for JSON mode
        log_level = "ERROR"

    config = ExtractorConfig(
        output_dir=output,
        save_output=save,
        log_level=log_level,
        log_file=log_file,
    )

    if not json_output:
        console.print()
        console.print(
            Panel.fit(
                f"[bold cyan]Question Extractor v{__version__}[/]\n"
                f"[dim]Extracting: {os.path.basename(path)}[/]",
                border_style="cyan",
            )
        )
        console.print()

    try:
        engine = ExtractionEngine(config)
        result = engine.extract_file(
            path,
            defaults=_defaults(course, difficulty, auto_approve),
            declared_type=declared_type,
        )
    except (UnsupportedTypeError, ExtractionError) as e:
        console.print(f"[red]Upload failed:[/] {e}")
        sys.exit(1)
    except (InvalidShapeError, MissingCourseError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return

    if result.total_extracted == 0:
        console.print("[yellow]No questions found in this document.[/]")
        console.print()
    _display_results(result)


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--course", "-c", default=None, help="Default course")
@click.option(
    "--difficulty", "-d",
    default=None,
    type=click.Choice([d.value for d in Difficulty]),
    help="Default difficulty",
)
@click.option("--auto-approve", is_flag=True, default=False, help="Auto-approve")
@click.option("--output", "-o", default="output", help="Output directory")
@click.option("--save", is_flag=True, default=False, help="Save result JSON")
@click.option("--log-level", default="WARNING", help="Logging level")
def batch(
    directory: str,
    course: str,
    difficulty: str,
    auto_approve: bool,
    output: str,
    save: bool,
    log_level: str,
):
    """Extract questions from every supported document in a directory."""

    files = sorted(
        p for p in Path(directory).iterdir()
        if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES
    )

    if not files:
        console.print(f"[yellow]No supported documents found in: {directory}[/]")
        return

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Batch Question Extractor[/]\n"
            f"[dim]Found {len(files)} documents in: {directory}[/]",
            border_style="cyan",
        )
    )
    console.print()

    engine = ExtractionEngine(ExtractorConfig(
        output_dir=output,
        save_output=save,
        log_level=log_level,
    ))
    defaults = _defaults(course, difficulty, auto_approve)

    results = []
    errors = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Processing documents...", total=len(files))

        for doc_file in files:
            progress.update(task, description=f"Extracting: {doc_file.name}")

            try:
                result = engine.extract_file(str(doc_file), defaults=defaults)
                results.append((doc_file.name, result))
            except (ExtractionError, InvalidShapeError, MissingCourseError) as e:
                errors.append((doc_file.name, str(e)))

            progress.advance(task)

    _display_batch_summary(results, errors)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Server host")
@click.option("--port", default=5000, type=int, help="Server port")
@click.option("--debug", is_flag=True, default=False, help="Debug mode")
def serve(host: str, port: int, debug: bool):
    """Start the HTTP upload service."""
    from .server import run_server

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Question Extractor Service[/]\n"
            f"[dim]Starting on {host}:{port}[/]",
            border_style="cyan",
        )
    )
    console.print()

    run_server(host=host, port=port, debug=debug)


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _display_results(result):
    """Display extraction results as rich tables."""
    _display_report_table(result.report.model_dump())

    if result.questions:
        table = Table(title="Extracted Questions", border_style="cyan")
        table.add_column("#", justify="right")
        table.add_column("Question", style="bold")
        table.add_column("Options", justify="right")
        table.add_column("Answer", justify="center")
        table.add_column("Course")
        table.add_column("Active", justify="center")

        for idx, record in enumerate(result.questions, start=1):
            fields = record.model_dump()
            stem = fields.get("stem") or fields.get("question") or ""
            options = fields.get("options") or []
            answer = fields.get("correct_answer_index", fields.get("correctAnswer"))
            table.add_row(
                str(idx),
                stem[:60],
                str(len(options)),
                _answer_letter(answer),
                record.course,
                "[green]✓[/]" if record.is_active else "[dim]-[/]",
            )

        console.print(table)
        console.print()

    console.print(
        f"[dim]Extractor v{result.extractor_version} | "
        f"Type: {result.document_type.value} | "
        f"Questions: {result.total_extracted} | "
        f"Timestamp: {result.extracted_at.isoformat()}[/]"
    )
    console.print()


def _answer_letter(index) -> str:
    if isinstance(index, int) and 0 <= index < 26:
        return chr(ord("A") + index)
    return "?"


def _display_report_table(report: dict):
    """Display the extraction report as a rich table."""
    table = Table(title="Extraction Report", border_style="green")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="center")

    def status_icon(count, threshold=0):
        if count <= threshold:
            return "[green]✓[/]"
        return "[yellow]⚠[/]"

    extracted = report.get("questions_extracted", 0)
    rate = report.get("success_rate", 0)

    table.add_row(
        "Blocks Detected",
        str(report.get("blocks_detected", 0)),
        "",
    )
    table.add_row(
        "Questions Extracted",
        f"{extracted} ({rate}%)",
        "[green]✓[/]" if extracted > 0 else "[red]✗[/]",
    )
    table.add_row(
        "Blocks Dropped",
        str(report.get("blocks_dropped", 0)),
        status_icon(report.get("blocks_dropped", 0)),
    )
    table.add_row(
        "Questions with LaTeX",
        str(report.get("questions_with_latex", 0)),
        "",
    )
    table.add_row(
        "Questions Missing Explanation",
        str(report.get("questions_missing_explanation", 0)),
        status_icon(report.get("questions_missing_explanation", 0)),
    )

    console.print(table)
    console.print()

    breakdown = report.get("rejection_breakdown", {})
    if breakdown:
        reason_table = Table(title="Rejection Breakdown", border_style="yellow")
        reason_table.add_column("Reason", style="bold")
        reason_table.add_column("Count", justify="right")

        for reason, count in sorted(breakdown.items()):
            reason_table.add_row(reason, str(count))

        console.print(reason_table)
        console.print()


def _display_batch_summary(results, errors):
    """Display batch processing summary."""
    console.print()

    table = Table(title="Batch Processing Summary", border_style="cyan")
    table.add_column("Document", style="bold")
    table.add_column("Questions", justify="right")
    table.add_column("Dropped Blocks", justify="right")
    table.add_column("Status", justify="center")

    total_questions = 0

    for name, result in results:
        total_questions += result.total_extracted
        status = "[green]✓[/]" if result.total_extracted else "[yellow]⚠ EMPTY[/]"
        table.add_row(
            name,
            str(result.total_extracted),
            str(result.report.blocks_dropped),
            status,
        )

    for name, error in errors:
        table.add_row(name, "-", "-", "[red]✗ FAILED[/]")

    console.print(table)
    console.print()
    console.print(
        f"[bold]Total:[/] {total_questions} questions from "
        f"{len(results)} documents, {len(errors)} failures"
    )
    console.print()


if __name__ == "__main__":
    cli()
