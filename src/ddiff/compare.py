"""Comparison pipeline orchestration for ddiff."""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from .config import DDiffConfig
from .fingerprint import (
    FingerprintResult,
    ProgressCallback,
    display_path,
    fingerprint,
    resolve_root,
)
from .reconcile import ReconciliationResult, reconcile


@dataclass
class ComparisonOutcome:
    """Everything the presentation layer needs from one comparison."""

    left: FingerprintResult
    right: FingerprintResult
    result: ReconciliationResult
    elapsed: float  # Wall-clock seconds

    @property
    def files_checked(self) -> int:
        return self.left.total_files + self.right.total_files

    @property
    def total_bytes(self) -> int:
        return self.left.total_bytes + self.right.total_bytes

    @property
    def files_skipped(self) -> int:
        return len(self.left.skipped) + len(self.right.skipped)


class Comparator:
    """Fingerprints two roots concurrently and reconciles them."""

    def __init__(
        self,
        config: DDiffConfig | None = None,
        console: Console | None = None,
        show_progress: bool = True,
    ):
        self.config = config or DDiffConfig()
        self.console = console or Console()
        self.show_progress = show_progress

    def compare(self, left_root: Path, right_root: Path) -> ComparisonOutcome:
        """
        Run the comparison.

        Both roots are resolved before any hashing starts, so an invalid
        root fails fast.

        Raises:
            PathResolutionError: If either root cannot be resolved
        """
        resolve_root(left_root)
        resolve_root(right_root)

        start = time.perf_counter()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("ETA"),
            TimeRemainingColumn(),
            console=self.console,
            disable=not self.show_progress,
        ) as progress:
            left_task = progress.add_task(_describe(left_root), total=None)
            right_task = progress.add_task(_describe(right_root), total=None)

            # The two trees share nothing, so hash them side by side
            with ThreadPoolExecutor(max_workers=2) as executor:
                left_future = executor.submit(
                    fingerprint, left_root, self.config, _track(progress, left_task)
                )
                right_future = executor.submit(
                    fingerprint, right_root, self.config, _track(progress, right_task)
                )
                left = left_future.result()
                right = right_future.result()

        result = reconcile(left, right)
        elapsed = time.perf_counter() - start

        logger.debug(
            f"Compared {left.root} and {right.root} in {elapsed:.3f}s: "
            f"{len(result.modified)} modified, {len(result.left_only)} left only, "
            f"{len(result.right_only)} right only"
        )

        return ComparisonOutcome(left=left, right=right, result=result, elapsed=elapsed)


def run_compare(
    left_root: Path,
    right_root: Path,
    config: DDiffConfig | None = None,
    console: Console | None = None,
    show_progress: bool = False,
) -> ComparisonOutcome:
    """
    Compare two directory trees.

    This is the main entry point called by the CLI.

    Args:
        left_root: First directory (A)
        right_root: Second directory (B)
        config: Chunk size, worker count and exclude patterns
        console: Rich console for progress output
        show_progress: If True, render a progress bar per root
    """
    comparator = Comparator(config=config, console=console, show_progress=show_progress)
    return comparator.compare(left_root, right_root)


def _track(progress: Progress, task: TaskID) -> ProgressCallback:
    """Build a fingerprint progress callback bound to a progress task."""

    def update(completed: int, total: int) -> None:
        progress.update(task, completed=completed, total=total)

    return update


def _describe(root: Path) -> str:
    """Progress task description; rendered as markup by TextColumn."""
    return f"Hashing {escape(display_path(root))}"
