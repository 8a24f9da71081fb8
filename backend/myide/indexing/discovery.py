"""Workspace file discovery."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import INDEXABLE_EXTENSIONS, SKIP_NAMES
from ..utils import file_extension, is_binary_file

logger = logging.getLogger(__name__)


def _should_skip(name: str, skip_names: Iterable[str]) -> bool:
    return name.startswith(".") or name in skip_names


def collect_files(
    root: Path | str,
    max_depth: int = 32,
    max_file_size_kb: int = 500,
    extensions: Optional[Iterable[str]] = None,
    skip_names: Optional[Iterable[str]] = None,
) -> List[Path]:
    """Collect indexable files under ``root``.

    Directories are visited before files and entries are sorted by name, so
    an unchanged tree always yields the same list.

    Args:
        root: Workspace root
        max_depth: Directories nested deeper than this are not entered
        max_file_size_kb: Files larger than this are excluded entirely
        extensions: Allowed extensions (without dot)
        skip_names: Directory/file names never visited

    Returns:
        List of file paths
    """
    allowed = set(extensions if extensions is not None else INDEXABLE_EXTENSIONS)
    skipped = set(skip_names if skip_names is not None else SKIP_NAMES)
    max_bytes = max_file_size_kb * 1024
    files: List[Path] = []

    def walk(dir_path: Path, depth: int) -> None:
        try:
            entries = [p for p in dir_path.iterdir() if not _should_skip(p.name, skipped)]
        except OSError as e:
            logger.warning(f"Cannot list {dir_path}: {e}")
            return

        dirs = sorted((p for p in entries if p.is_dir()), key=lambda p: p.name)
        regular = sorted((p for p in entries if p.is_file()), key=lambda p: p.name)

        if depth < max_depth:
            for d in dirs:
                walk(d, depth + 1)

        for f in regular:
            if file_extension(f.name) not in allowed:
                continue
            try:
                if f.stat().st_size > max_bytes:
                    logger.debug(f"Skipping {f}: larger than {max_file_size_kb} KB")
                    continue
            except OSError:
                continue
            if is_binary_file(f):
                continue
            files.append(f)

    walk(Path(root), 0)
    return files
