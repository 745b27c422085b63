"""CLI for ddiff."""

import sys
from pathlib import Path

import click
from loguru import logger
from rich.console import Console
from rich.filesize import pick_unit_and_suffix
from rich.markup import escape
from rich.table import Table

from . import __version__
from .compare import ComparisonOutcome, run_compare
from .config import DDiffConfig, load_config, save_config
from .exceptions import ConfigError, DDiffError
from .fingerprint import display_path
from .reconcile import ModifiedFile, OneSidedFile
from .report import render_report

console = Console()
error_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, debug level only when verbose."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<level>{level: <8}</level> {message}",
    )


@click.command()
@click.version_option(version=__version__, prog_name="ddiff")
@click.argument("path_a", type=click.Path(path_type=Path))
@click.argument("path_b", type=click.Path(path_type=Path))
@click.option("--workers", "-w", type=click.IntRange(min=1), help="Hashing threads per directory")
@click.option("--chunk-size", type=click.IntRange(min=1), help="Read size in bytes")
@click.option(
    "--exclude",
    "-e",
    "exclude",
    multiple=True,
    help="Skip files and directories matching this pattern (repeatable)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to a JSON config file",
)
@click.option(
    "--save-config",
    "save_config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the effective configuration to this JSON file",
)
@click.option("--json", "as_json", is_flag=True, help="Print a JSON report instead of tables")
@click.option("--no-progress", is_flag=True, help="Hide progress bars")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def main(
    path_a: Path,
    path_b: Path,
    workers: int | None,
    chunk_size: int | None,
    exclude: tuple[str, ...],
    config_path: Path | None,
    save_config_path: Path | None,
    as_json: bool,
    no_progress: bool,
    verbose: bool,
) -> None:
    """Compare the files of PATH_A and PATH_B by BLAKE3 hash.

    Reports files with the same relative path but different content, and
    files present in only one of the two directories. Exits with status 0
    whether or not the directories differ.
    """
    configure_logging(verbose)

    try:
        config = _build_config(config_path, workers, chunk_size, exclude)
        if save_config_path is not None:
            _save_config(config, save_config_path)
        outcome = run_compare(
            path_a,
            path_b,
            config=config,
            console=error_console,
            show_progress=not (no_progress or as_json),
        )
    except DDiffError as e:
        error_console.print(f"[red]Error:[/red] {escape(display_path(str(e)))}", soft_wrap=True)
        sys.exit(1)

    if as_json:
        click.echo(render_report(outcome))
        return

    print_outcome(outcome, path_a, path_b, verbose=verbose)


def print_outcome(
    outcome: ComparisonOutcome,
    path_a: Path,
    path_b: Path,
    verbose: bool = False,
) -> None:
    """Print result tables and the summary line."""
    result = outcome.result

    if result.modified:
        console.print(_modified_table(result.modified))

    if result.left_only:
        console.print(_one_sided_table(result.left_only, path_a, path_b))

    if result.right_only:
        console.print(_one_sided_table(result.right_only, path_b, path_a))

    if verbose and outcome.files_skipped:
        for side, fingerprint in (("A", outcome.left), ("B", outcome.right)):
            for path in fingerprint.skipped:
                console.print(
                    f"[yellow]Skipped unreadable file in {side}:[/yellow] "
                    f"{escape(display_path(path))}"
                )

    console.print(
        f"\nddiff checked {outcome.files_checked} files, "
        f"about {format_size(outcome.total_bytes)}, in {outcome.elapsed:.2f}s\n",
        highlight=False,
    )

    if not result.has_differences:
        console.print(
            f"[green]Great! {escape(display_path(path_a))} and "
            f"{escape(display_path(path_b))} are equal![/green]",
            soft_wrap=True,
        )


def format_size(size: int) -> str:
    """Format a byte count in binary units, e.g. `28 B` or `1.5 KiB`."""
    unit, suffix = pick_unit_and_suffix(size, ["B", "KiB", "MiB", "GiB", "TiB", "PiB"], 1024)
    if unit == 1:
        return f"{size} {suffix}"
    return f"{size / unit:.1f} {suffix}"


def _save_config(config: DDiffConfig, config_path: Path) -> None:
    try:
        save_config(config, config_path)
    except OSError as e:
        raise ConfigError(f"Cannot write config file {config_path}: {e.strerror or e}") from e
    error_console.print(
        f"[dim]Saved config to {escape(display_path(config_path))}[/dim]", soft_wrap=True
    )


def _build_config(
    config_path: Path | None,
    workers: int | None,
    chunk_size: int | None,
    exclude: tuple[str, ...],
) -> DDiffConfig:
    """Load config and apply command-line overrides."""
    config = load_config(config_path)
    data = config.model_dump()

    if workers is not None:
        data["workers"] = workers
    if chunk_size is not None:
        data["chunk_size"] = chunk_size
    if exclude:
        data["exclude_patterns"] = [*config.exclude_patterns, *exclude]

    return DDiffConfig.model_validate(data)


def _modified_table(files: list[ModifiedFile]) -> Table:
    table = Table(title="Files with same path but different hash", title_justify="left")
    table.add_column("path", style="cyan")
    table.add_column("hash A", overflow="fold")
    table.add_column("hash B", overflow="fold")

    for path, left_digest, right_digest in files:
        table.add_row(escape(display_path(path)), left_digest, right_digest)
    return table


def _one_sided_table(files: list[OneSidedFile], present: Path, missing: Path) -> Table:
    table = Table(
        title=(
            f"Files in {escape(display_path(present))} "
            f"but not in {escape(display_path(missing))}"
        ),
        title_justify="left",
    )
    table.add_column("path", style="cyan")
    table.add_column("hash", overflow="fold")

    for path, digest in files:
        table.add_row(escape(display_path(path)), digest)
    return table


if __name__ == "__main__":
    main()
