"""
Command‑line interface (CLI) for the load driver.

Example – five concurrent workers against a local service
----------------------------------------------------------
    loadctl test/payload.txt http://localhost:18020 5
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from loaddriver import orchestrator
from loaddriver.config import (
    DEFAULT_CONCURRENCY,
    REQUEST_TIMEOUT_S,
    RESULT_LOG,
    RunConfig,
    configure_logging,
)
from loaddriver.errors import LoadDriverError
from loaddriver.model import RunReport
from loaddriver.recorder import format_duration

# Typer application instance
app = typer.Typer(
    add_completion=False,
    help="POST every JSON payload of a file to <base-url>/api/find-service concurrently.",
)


def _print_summary(report: RunReport) -> None:
    metrics = report.metrics
    typer.echo("Done.")
    typer.echo(f"Total time: {format_duration(report.elapsed)}")
    typer.echo(f"Average response time: {format_duration(metrics.average_latency)}")
    typer.echo(
        f"Recorded: {metrics.count}/{report.dispatched} "
        f"(failed: {metrics.failed}, unsaved: {metrics.write_failures})"
    )
    typer.echo(f"Responses saved to {report.output_path}")


@app.command()
def run(
    payload_file: Path = typer.Argument(..., help="File of JSON payloads (blank-line or line separated)"),
    base_url: str = typer.Argument(..., help="Target base URL, e.g. http://localhost:18020"),
    concurrency: int = typer.Argument(DEFAULT_CONCURRENCY, help="Number of concurrent workers"),
    output: Path = typer.Option(RESULT_LOG, "--output", "-o", help="Result log path (cleared each run)"),
    timeout: float = typer.Option(REQUEST_TIMEOUT_S, "--timeout", "-t", help="Per-request timeout in seconds"),
    queue_size: Optional[int] = typer.Option(
        None, "--queue-size", help="Bound the job queue (default: number of payloads)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate payloads, send nothing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Dispatch the payloads and print latency statistics; exit *1* on a fatal error."""

    configure_logging(logging.DEBUG if verbose else logging.INFO)

    try:
        config = RunConfig.build(
            payload_path=payload_file,
            base_url=base_url,
            concurrency=concurrency,
            timeout=timeout,
            output_path=output,
            queue_size=queue_size,
        )
        if dry_run:
            payloads = orchestrator.prepare(config)
            typer.echo(f"{len(payloads)} valid payloads for {config.target_url}")
            return
        report = orchestrator.run(config)
    except LoadDriverError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    _print_summary(report)


# ``python -m loaddriver.cli`` entry‑point

def main() -> None:  # pragma: no cover
    """Entry‑point for the ``loadctl`` console script."""
    app()


if __name__ == "__main__":  # called via ``python -m loaddriver.cli``
    app()
