# deal_checker/cli/runner.py

"""Headless CLI runner around the async pipeline orchestrator."""

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from deal_checker.config.settings import Settings
from deal_checker.errors import ConfigurationError, PipelineError
from deal_checker.models.deal import DealRecord
from deal_checker.services.pipeline_orchestrator import (
    PipelineOrchestrator,
    RunResult,
)
from deal_checker.storage.file_manager import FileManager

logger = logging.getLogger("deal_checker.cli")

# Stderr console for status messages
_err = Console(stderr=True)

_TOP_DEALS = 15


def _money(value: object) -> str:
    return f"${value:,.2f}" if value is not None else "—"


def _print_table(records: list[DealRecord]) -> None:
    """Render a Rich table of the top-ranked deals to stdout."""
    table = Table(
        title="Top Deals",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("ASIN", style="magenta")
    table.add_column("Title", max_width=50)
    table.add_column("Was", justify="right")
    table.add_column("Now", justify="right", style="green")
    table.add_column("Off", justify="right", style="bold")
    table.add_column("Check", justify="center")

    for idx, r in enumerate(records[:_TOP_DEALS], 1):
        pct = r.discount.percentage
        table.add_row(
            str(idx),
            r.asin or "—",
            (r.title or "")[:50],
            _money(r.original),
            _money(r.current),
            f"{pct}%" if pct is not None else "—",
            "⚠" if r.need_check_manually else "",
        )

    Console().print(table)


def _print_summary(result: RunResult) -> None:
    """Per-source counts to stderr."""
    for report in result.sources:
        parts: list[str] = [
            f"{report.unique_asins} unique",
            f"{report.batches} batch(es)",
        ]
        if report.duplicates:
            parts.append(f"{report.duplicates} duplicate(s)")
        if report.unresolved:
            parts.append(f"{report.unresolved} without ASIN")
        if report.missing:
            parts.append(f"{report.missing} not returned")
        _err.print(
            f"[green]✓ {report.source.name}:[/green] "
            f"{report.records} record(s) ({', '.join(parts)})"
        )


async def run_check(
    provider_id: str,
    input_dir: str | None,
    output_dir: str | None,
    files_csv: str | None,
    save_images: bool,
) -> int:
    """Run the deal check and return an exit code (0=ok, 1=fail)."""
    file_manager = FileManager(
        input_dir=Path(input_dir) if input_dir else None,
        output_root=Path(output_dir) if output_dir else None,
    )
    selected = (
        [f.strip() for f in files_csv.split(",") if f.strip()]
        if files_csv
        else Settings.SELECTED_TXT_FILES
    )

    try:
        orchestrator = PipelineOrchestrator.from_settings(
            provider_id,
            file_manager,
            save_images=save_images or Settings.SAVE_IMAGES,
        )
        input_files = file_manager.list_input_files(selected)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        _err.print(f"[red]ERROR: {exc}[/red]")
        return 1

    if not input_files:
        _err.print(
            f"[yellow]No .txt files to process in "
            f'"{file_manager.input_dir}".[/yellow]'
        )
        return 0

    _err.print(
        f"[bold]Checking {len(input_files)} file(s)[/bold] "
        f"[dim]provider={provider_id}[/dim]"
    )
    for path in input_files:
        _err.print(f"[dim] - {path.name}[/dim]")

    try:
        result = await orchestrator.run(input_files)
    except PipelineError as exc:
        _err.print(
            f"[red]ERROR: Program aborted during {exc.stage.upper()} "
            f"of {exc.source}: {exc.cause}[/red]"
        )
        return 1

    _print_summary(result)
    if result.records:
        _print_table(result.records)
    _err.print(
        f"[green]SUCCESS: all files processed. Output root: "
        f"{file_manager.output_root}[/green]"
    )
    return 0
