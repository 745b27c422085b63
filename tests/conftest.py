"""Shared test fixtures for ddiff."""

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner
from loguru import logger

TreeBuilder = Callable[[str, dict[str, str | bytes]], Path]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch):
    """Keep the user's config file and DDIFF_* variables out of tests."""
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))
    for var in ("DDIFF_WORKERS", "DDIFF_CHUNK_SIZE", "DDIFF_EXCLUDE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop log sinks a CLI invocation bound to its captured stderr."""
    yield
    logger.remove()


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    return CliRunner()


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create root and write each relative path with its content.

    Args:
        root: Directory to create
        files: Mapping of POSIX relative path -> text or bytes content

    Returns:
        The root path
    """
    root.mkdir(parents=True, exist_ok=True)
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> TreeBuilder:
    """Factory building a directory tree under tmp_path."""

    def build(name: str, files: dict[str, str | bytes]) -> Path:
        return write_tree(tmp_path / name, files)

    return build


@pytest.fixture
def sample_dirs(make_tree: TreeBuilder) -> tuple[Path, Path]:
    """
    Two small directories with one modified and one unique file each.

    Structure:
        a/                  b/
        ├── uniqueA         ├── uniqueB
        └── diff (diffA)    └── diff (diffB)
    """
    dir_a = make_tree("a", {"uniqueA": "uniqueA\n", "diff": "diffA\n"})
    dir_b = make_tree("b", {"uniqueB": "uniqueB\n", "diff": "diffB\n"})
    return dir_a, dir_b


@pytest.fixture
def non_utf8_name() -> str:
    """A file name that is not valid UTF-8, as os.listdir returns it."""
    if sys.platform != "linux":
        pytest.skip("filesystem must accept arbitrary bytes in names")
    return os.fsdecode(b"bad\xff")
