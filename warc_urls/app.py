"""Typer CLI entrypoint for warc-urls."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .config import DedupStrategy, ExtractConfig, load_extract_config
from .engine import ThreadPoolManager
from .engine.exporter import BaseExporter, FileExporter, StreamExporter
from .errors import WarcUrlsError
from .logging_conf import configure_logging
from .orchestrator import Orchestrator, RunSummary
from .profiling import cpu_profile

app = typer.Typer(
    help="Extract deduplicated WARC-Target-URI values from WARC files.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

# stdout is reserved for extracted URIs
console = Console(stderr=True)


def _fail(message: str) -> NoReturn:
    console.print(f"error: {message}", style="red", markup=False, highlight=False)
    raise typer.Exit(code=1)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "config"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "invalid configuration: " + "; ".join(parts)


def _format_elapsed(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.3f}ms"
    return f"{seconds:.3f}s"


def _open_exporter(config: ExtractConfig) -> BaseExporter:
    if config.output_path is not None:
        return FileExporter(config.output_path)
    return StreamExporter(sys.stdout)


def _render_summary(config: ExtractConfig, summary: RunSummary) -> Table:
    table = Table(title=f"{config.input_path.name} run summary", box=box.SIMPLE_HEAD)
    table.add_column("metric", style="cyan")
    table.add_column("count", style="green", justify="right")
    table.add_row("records", str(summary.records))
    table.add_row("malformed frames", str(summary.malformed))
    table.add_row("field errors", str(summary.field_errors))
    table.add_row("empty targets", str(summary.empty))
    table.add_row("uris forwarded", str(summary.forwarded))
    table.add_row("uris written", str(summary.written))
    table.add_row("duplicates", str(summary.duplicates))
    table.add_row("workers", str(config.concurrency))
    return table


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write JSON logs to this file.", show_default=False
    ),
) -> None:
    configure_logging(verbose=verbose, log_file=log_file)


@app.command("extract", help="Write every distinct WARC-Target-URI of a WARC file, one per line.")
def extract(
    warc: Optional[str] = typer.Option(
        None, "--warc", "-w", help="Path to the WARC file (.warc or .warc.gz).", show_default=False
    ),
    n_concurrent: Optional[int] = typer.Option(
        None, "--n-concurrent", "-n", help="Number of concurrent record workers [default: 4].", show_default=False
    ),
    cpuprofile: Optional[Path] = typer.Option(
        None, "--cpuprofile", help="Write a CPU profile of the run to this file.", show_default=False
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write URIs to this file instead of stdout.", show_default=False
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="YAML or JSON file with run settings.", show_default=False
    ),
    dedup: Optional[DedupStrategy] = typer.Option(
        None, "--dedup", help="Membership set backing the deduplication [default: exact].", show_default=False
    ),
    dedup_store: Optional[Path] = typer.Option(
        None, "--dedup-store", help="SQLite file for --dedup sqlite.", show_default=False
    ),
    queue_size: Optional[int] = typer.Option(
        None, "--queue-size", help="Capacity of each hand-off queue [default: 16].", show_default=False
    ),
    target_field: Optional[str] = typer.Option(
        None, "--target-field", help="Header field to extract [default: WARC-Target-URI].", show_default=False
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Only print the one-line report.", is_flag=True),
) -> None:
    overrides = {
        "input_path": warc,
        "concurrency": n_concurrent,
        "profile_output_path": cpuprofile,
        "output_path": output,
        "queue_size": queue_size,
        "target_field": target_field,
        "deduplication": {"strategy": dedup, "store_path": dedup_store},
    }
    try:
        config = load_extract_config(config_file, overrides)
    except ValidationError as exc:
        _fail(_format_validation_error(exc))
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))

    exporter: BaseExporter | None = None
    try:
        with cpu_profile(config.profile_output_path) as profiles:
            pools = ThreadPoolManager(task_wrapper=profiles.wrap if profiles is not None else None)
            exporter = _open_exporter(config)
            summary = Orchestrator(config, thread_pool=pools).run(exporter)
    except WarcUrlsError as exc:
        _fail(str(exc))
    except OSError as exc:
        _fail(f"cannot write output: {exc}")
    finally:
        if exporter is not None:
            exporter.close()

    console.print(
        f"processed {summary.records} records in {_format_elapsed(summary.elapsed)}",
        markup=False,
        highlight=False,
    )
    if not quiet:
        console.print(_render_summary(config, summary))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
