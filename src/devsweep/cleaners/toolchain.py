"""Cleaners for global toolchain caches."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from devsweep.models.cleaner import GIB, FixedDirCleaner
from devsweep.models.item import CleanableItem

log = logging.getLogger(__name__)


class GoModCacheCleaner(FixedDirCleaner):
    """Cleans the Go module cache."""

    id = "go"
    name = "Go"
    description = "Go module cache (GOMODCACHE)"
    icon = "🐹"
    large_bytes = 2 * GIB

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        if os.environ.get("GOMODCACHE"):
            return (Path(os.environ["GOMODCACHE"]),)
        if os.environ.get("GOPATH"):
            return (Path(os.environ["GOPATH"]) / "pkg" / "mod",)
        return (Path.home() / "go" / "pkg" / "mod",)

    def delete(self, item: CleanableItem) -> None:
        # Go marks module directories read-only.
        if item.is_path and item.path.is_dir():
            _make_writable(item.path)
        super().delete(item)


class GradleCacheCleaner(FixedDirCleaner):
    """Cleans the Gradle dependency and build cache."""

    id = "gradle"
    name = "Gradle"
    description = "Gradle caches directory"
    icon = "🐘"
    large_bytes = 3 * GIB

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        gradle_home = Path(os.environ.get("GRADLE_USER_HOME") or Path.home() / ".gradle")
        return (gradle_home / "caches",)


class XcodeDerivedDataCleaner(FixedDirCleaner):
    """Cleans Xcode DerivedData."""

    id = "xcode"
    name = "Xcode"
    description = "Xcode DerivedData build intermediates"
    icon = "🔨"

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        return (Path.home() / "Library" / "Developer" / "Xcode" / "DerivedData",)


def _make_writable(root: Path) -> None:
    """Add owner write permission to every directory below *root*."""
    for dirpath, dirnames, _filenames in os.walk(root):
        for path in [dirpath, *(os.path.join(dirpath, d) for d in dirnames)]:
            if os.path.islink(path):
                continue
            try:
                os.chmod(path, 0o755)
            except OSError as e:
                log.debug("Cannot chmod %s: %s", path, e)
