"""Filesystem search and directory size computation."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from devsweep.errors import ScanError
from devsweep.models.item import SizeComputationWarning

log = logging.getLogger(__name__)

# Heavy directories that are never searched below.
DEFAULT_PRUNE = frozenset({".git", "node_modules", "target", ".cache"})

AcceptFn = Callable[[Path], bool]


@dataclass(slots=True)
class DirInfo:
    """Size, file count and unmeasurable entries of one directory tree."""

    size: int = 0
    file_count: int = 0
    warnings: list[SizeComputationWarning] = field(default_factory=list)


def _reason(exc: OSError) -> str:
    return exc.strerror or type(exc).__name__


def check_root(root: Path) -> None:
    """Ensure *root* is an existing, readable directory.

    Raises:
        ScanError: If it is not.
    """
    if not root.exists():
        raise ScanError(f"Search root does not exist: {root}")
    if not root.is_dir():
        raise ScanError(f"Search root is not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ScanError(f"Search root is not readable: {root}")


def dir_info(path: Path | str) -> DirInfo:
    """Calculate total size and file count of a directory tree.

    Symbolic links are never followed and contribute nothing. Entries
    that cannot be read are recorded as warnings and excluded from the
    total.
    """
    path = Path(path)
    info = DirInfo()

    if path.is_file() and not path.is_symlink():
        try:
            info.size = path.stat().st_size
            info.file_count = 1
        except OSError as e:
            info.warnings.append(SizeComputationWarning(path, _reason(e)))
        return info

    stack: list[Path] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            info.size += entry.stat(follow_symlinks=False).st_size
                            info.file_count += 1
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(Path(entry.path))
                    except OSError as e:
                        info.warnings.append(SizeComputationWarning(Path(entry.path), _reason(e)))
        except OSError as e:
            log.debug("Cannot read %s: %s", current, e)
            info.warnings.append(SizeComputationWarning(current, _reason(e)))
    return info


def measure_dirs(paths: Iterable[Path]) -> list[DirInfo]:
    """Measure several independent directory trees.

    Uses a small thread pool when there is more than one tree. Results
    come back in input order, so totals and ordering are the same as a
    sequential run.
    """
    paths = list(paths)
    if (os.cpu_count() or 1) > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=min(4, len(paths))) as executor:
            return list(executor.map(dir_info, paths))
    return [dir_info(p) for p in paths]


def find_named_dirs(
    root: Path | str,
    names: Iterable[str],
    *,
    accept: AcceptFn | None = None,
    prune: Iterable[str] = DEFAULT_PRUNE,
) -> tuple[list[Path], list[SizeComputationWarning]]:
    """Find directories named one of *names* below *root*.

    The walk is depth-first over lexicographically sorted entries, so the
    result order is stable for an unchanged tree. An accepted match is not
    descended into. Directories named in *prune* are skipped entirely.
    Symbolic links are never followed.

    Args:
        root: Directory to search.
        names: Directory names that count as a match.
        accept: Optional extra check on a name match, e.g. a marker file
            next to it. A rejected match is walked like any directory.
        prune: Directory names never descended into.

    Returns:
        (matches, warnings) tuple.

    Raises:
        ScanError: If *root* is missing or unreadable.
    """
    root = Path(root)
    check_root(root)
    names = frozenset(names)
    prune = frozenset(prune)

    found: list[Path] = []
    warnings: list[SizeComputationWarning] = []
    stack: list[Path] = [root]

    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            if current == root:
                raise ScanError(f"Cannot read search root {root}: {_reason(e)}") from e
            log.debug("Cannot read %s: %s", current, e)
            warnings.append(SizeComputationWarning(current, _reason(e)))
            continue

        children: list[Path] = []
        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            path = Path(entry.path)
            if entry.name in names and (accept is None or accept(path)):
                found.append(path)
                continue
            if entry.name in prune:
                continue
            children.append(path)

        stack.extend(reversed(children))

    return found, warnings
