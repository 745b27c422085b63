"""Serializable comparison reports for ddiff."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .compare import ComparisonOutcome
from .fingerprint import display_path
from .reconcile import OneSidedFile


class ModifiedEntry(BaseModel):
    """A file with the same path but different content."""

    path: str
    left_hash: str
    right_hash: str


class OneSidedEntry(BaseModel):
    """A file present in only one tree."""

    path: str
    hash: str


class ReportStats(BaseModel):
    """Aggregate numbers for a comparison."""

    files_checked: int = 0
    files_skipped: int = 0
    total_bytes: int = 0
    elapsed_seconds: float = 0.0


class ComparisonReport(BaseModel):
    """Machine-readable result of comparing two directories."""

    version: int = 1
    generated_at: datetime
    left_root: str
    right_root: str
    equal: bool
    modified: list[ModifiedEntry] = Field(default_factory=list)
    left_only: list[OneSidedEntry] = Field(default_factory=list)
    right_only: list[OneSidedEntry] = Field(default_factory=list)
    skipped: dict[str, list[str]] = Field(default_factory=dict)
    stats: ReportStats = Field(default_factory=ReportStats)


def build_report(outcome: ComparisonOutcome) -> ComparisonReport:
    """Create a report from a finished comparison.

    Paths are converted for display, so names that are not valid UTF-8 are
    lossy in the report.
    """
    result = outcome.result
    return ComparisonReport(
        generated_at=datetime.now(UTC),
        left_root=display_path(outcome.left.root),
        right_root=display_path(outcome.right.root),
        equal=not result.has_differences,
        modified=[
            ModifiedEntry(
                path=display_path(m.path), left_hash=m.left_digest, right_hash=m.right_digest
            )
            for m in result.modified
        ],
        left_only=_one_sided_entries(result.left_only),
        right_only=_one_sided_entries(result.right_only),
        skipped={
            "left": [display_path(p) for p in outcome.left.skipped],
            "right": [display_path(p) for p in outcome.right.skipped],
        },
        stats=ReportStats(
            files_checked=outcome.files_checked,
            files_skipped=outcome.files_skipped,
            total_bytes=outcome.total_bytes,
            elapsed_seconds=outcome.elapsed,
        ),
    )


def render_report(outcome: ComparisonOutcome) -> str:
    """Render a comparison as indented JSON."""
    return build_report(outcome).model_dump_json(indent=2)


def _one_sided_entries(files: list[OneSidedFile]) -> list[OneSidedEntry]:
    return [OneSidedEntry(path=display_path(f.path), hash=f.digest) for f in files]
