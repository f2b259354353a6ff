"""
Filesystem access for the generator.

The generator only ever reads through a FileSystem; persistence happens
afterwards, in one pass, once a run has fully succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from routegen.core.errors import ErrorContext, FileReadError
from routegen.core.ir import GeneratedFile

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    """Read-only view of the project the generator merges into."""

    def exists(self, path: Path) -> bool: ...

    def read_all(self, path: Path) -> str: ...


class LocalFileSystem:
    """FileSystem rooted at a project directory on disk."""

    def __init__(self, root: Path):
        self.root = root

    def exists(self, path: Path) -> bool:
        return (self.root / path).is_file()

    def read_all(self, path: Path) -> str:
        try:
            return (self.root / path).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise FileReadError(f"not valid UTF-8 ({e.reason})", ErrorContext(file=path)) from e
        except OSError as e:
            raise FileReadError(f"cannot read file: {e.strerror}", ErrorContext(file=path)) from e


def ensure_dir(path: Path) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    path.mkdir(parents=True, exist_ok=True)


def write_file(path: Path, content: str, create_dirs: bool = True) -> None:
    """
    Write content to a file.

    Args:
        path: File path to write to
        content: Content to write
        create_dirs: Whether to create parent directories if they don't exist
    """
    if create_dirs:
        ensure_dir(path.parent)
    path.write_text(content, encoding="utf-8")


def persist_files(files: Sequence[GeneratedFile], root: Path) -> list[Path]:
    """
    Write every generated file below ``root``.

    Args:
        files: Files from a successful generation run
        root: Project root the file paths are relative to

    Returns:
        Absolute paths written, in order
    """
    written = []
    for file in files:
        target = root / file.path
        write_file(target, file.content)
        logger.info("Wrote %s%s", file.path, " (new)" if file.is_new_file else "")
        written.append(target)
    return written
