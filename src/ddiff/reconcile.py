"""Classification of two fingerprinted trees into modified and one-sided files."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import NamedTuple

from .fingerprint import FingerprintResult


class ModifiedFile(NamedTuple):
    """A path present on both sides with different content."""

    path: str
    left_digest: str
    right_digest: str


class OneSidedFile(NamedTuple):
    """A path present on only one side."""

    path: str
    digest: str


@dataclass
class ReconciliationResult:
    """Result of comparing two fingerprints. Each list is sorted by path."""

    modified: list[ModifiedFile] = field(default_factory=list)
    left_only: list[OneSidedFile] = field(default_factory=list)
    right_only: list[OneSidedFile] = field(default_factory=list)

    @property
    def has_differences(self) -> bool:
        """Check if the two trees differ at all."""
        return bool(self.modified or self.left_only or self.right_only)

    @property
    def total_differences(self) -> int:
        """Total number of reported paths."""
        return len(self.modified) + len(self.left_only) + len(self.right_only)


def reconcile(
    left: FingerprintResult | Mapping[str, str],
    right: FingerprintResult | Mapping[str, str],
) -> ReconciliationResult:
    """
    Compare two path -> digest mappings.

    Paths present on both sides with equal digests are unchanged and are not
    reported.

    Args:
        left: Fingerprint (or plain mapping) of the left tree
        right: Fingerprint (or plain mapping) of the right tree

    Returns:
        ReconciliationResult with modified, left-only and right-only paths
    """
    left_hashes = _as_mapping(left)
    right_hashes = _as_mapping(right)

    left_paths = set(left_hashes)
    right_paths = set(right_hashes)

    result = ReconciliationResult()

    for path in sorted(left_paths & right_paths):
        if left_hashes[path] != right_hashes[path]:
            result.modified.append(ModifiedFile(path, left_hashes[path], right_hashes[path]))

    result.left_only = [
        OneSidedFile(path, left_hashes[path]) for path in sorted(left_paths - right_paths)
    ]
    result.right_only = [
        OneSidedFile(path, right_hashes[path]) for path in sorted(right_paths - left_paths)
    ]

    return result


def _as_mapping(side: FingerprintResult | Mapping[str, str]) -> Mapping[str, str]:
    if isinstance(side, FingerprintResult):
        return side.hashes
    return side
