"""Content fingerprinting of directory trees."""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

import blake3
from loguru import logger

from . import DEFAULT_CHUNK_SIZE
from .config import DDiffConfig
from .exceptions import PathResolutionError

# Progress callback signature: (completed_files, total_files)
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class FileRecord:
    """A hashed regular file."""

    path: str  # Relative path from root, POSIX separators
    digest: str  # Lowercase hex BLAKE3 digest
    size: int  # Bytes read while hashing


@dataclass
class FingerprintResult:
    """Digests of every readable file under a root."""

    root: Path  # Canonical absolute root
    hashes: dict[str, str] = field(default_factory=dict)  # relative path -> digest
    total_bytes: int = 0
    skipped: list[str] = field(default_factory=list)  # Files that could not be read

    @property
    def total_files(self) -> int:
        return len(self.hashes)

    def add(self, record: FileRecord) -> None:
        """Collect a hashed file into the result."""
        self.hashes[record.path] = record.digest
        self.total_bytes += record.size


def compute_file_hash(filepath: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> tuple[str, int]:
    """Compute the BLAKE3 hash of file contents.

    The digest is identical to what ``b3sum`` prints for the same file.

    Returns:
        Tuple of (hex digest, bytes read)
    """
    h = blake3.blake3()
    size = 0
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
            size += len(chunk)
    return h.hexdigest(), size


def resolve_root(root: Path | str) -> Path:
    """Resolve a comparison root to a canonical, readable directory."""
    try:
        resolved = Path(root).resolve(strict=True)
    except FileNotFoundError:
        raise PathResolutionError(root, "no such file or directory") from None
    except (OSError, RuntimeError) as e:
        # RuntimeError: symlink loop on older interpreters
        raise PathResolutionError(root, str(e)) from e

    if not resolved.is_dir():
        raise PathResolutionError(root, "not a directory")

    try:
        with os.scandir(resolved):
            pass
    except OSError as e:
        raise PathResolutionError(root, e.strerror or str(e)) from e

    return resolved


def should_exclude(name: str, exclude_patterns: list[str]) -> bool:
    """Check if an entry name matches any exclusion pattern."""
    for pattern in exclude_patterns:
        if fnmatch.fnmatch(name, pattern):
            return True
    return False


def walk_files(root: Path, exclude_patterns: list[str] | None = None) -> list[Path]:
    """
    List every non-directory entry under root.

    Entries that cannot be enumerated are skipped. Excluded directories are
    not descended into. Symlinks to directories are neither followed nor
    returned.
    """
    exclude_patterns = exclude_patterns or []
    files: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        if exclude_patterns:
            dirnames[:] = [d for d in dirnames if not should_exclude(d, exclude_patterns)]
        for name in filenames:
            if should_exclude(name, exclude_patterns):
                continue
            files.append(Path(dirpath) / name)

    return files


def fingerprint(
    root: Path | str,
    config: DDiffConfig | None = None,
    progress_callback: ProgressCallback | None = None,
) -> FingerprintResult:
    """
    Hash every regular file under root in parallel.

    The tree is enumerated first, then files are hashed on a thread pool of
    ``config.workers`` threads. Files that cannot be read are recorded in
    ``FingerprintResult.skipped`` instead of failing the run.

    Args:
        root: Directory to fingerprint
        config: Chunk size, worker count and exclude patterns
        progress_callback: Optional callback called with (completed, total)
            once before hashing and after every file

    Returns:
        FingerprintResult keyed by path relative to the canonical root

    Raises:
        PathResolutionError: If root is missing, unreadable or not a directory
    """
    config = config or DDiffConfig()
    canonical_root = resolve_root(root)

    files = walk_files(canonical_root, config.exclude_patterns)
    total_files = len(files)
    logger.debug(f"Found {total_files} entries under {canonical_root}")

    result = FingerprintResult(root=canonical_root)
    if progress_callback:
        progress_callback(0, total_files)

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        futures = {
            executor.submit(_hash_entry, path, canonical_root, config.chunk_size): path
            for path in files
        }
        for completed, future in enumerate(as_completed(futures), 1):
            try:
                record = future.result()
            except OSError as e:
                relative_path = _relative_path(futures[future], canonical_root)
                logger.debug(f"Skipping unreadable file {relative_path}: {e}")
                result.skipped.append(relative_path)
                record = None

            if record is not None:
                result.add(record)

            if progress_callback:
                progress_callback(completed, total_files)

    result.skipped.sort()
    logger.debug(
        f"Hashed {result.total_files} files ({result.total_bytes} bytes) "
        f"under {canonical_root}, {len(result.skipped)} skipped"
    )
    return result


def _hash_entry(path: Path, root: Path, chunk_size: int) -> FileRecord | None:
    """Hash a single entry, or return None if it is not a regular file."""
    # Broken symlinks, FIFOs, sockets and devices
    if not path.is_file():
        logger.debug(f"Skipping non-regular file {path}")
        return None

    digest, size = compute_file_hash(path, chunk_size)
    return FileRecord(path=_relative_path(path, root), digest=digest, size=size)


def _relative_path(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


def display_path(path: Path | str) -> str:
    """
    Make a path safe to print or serialize.

    Names that are not valid UTF-8 come back from the filesystem with
    surrogate escapes; those bytes are shown as U+FFFD. Only use the result
    for output, never as a comparison key.
    """
    return str(path).encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _log_walk_error(error: OSError) -> None:
    logger.debug(f"Skipping unreadable entry {error.filename}: {error.strerror}")
