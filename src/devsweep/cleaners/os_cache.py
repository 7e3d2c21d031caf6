"""Cleaner for large per-application caches."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from devsweep.core.safety import SafetyClassifier
from devsweep.errors import ScanError
from devsweep.models.cleaner import GIB, Cleaner, CleanerOptions
from devsweep.models.item import CleanableItem, ScanResult, SizeComputationWarning
from devsweep.utils import bytes_to_human, os_cache_root

log = logging.getLogger(__name__)


class CacheCleaner(Cleaner):
    """Reports application cache directories above a size threshold.

    Walks ``~/Library/Caches`` on macOS and ``$XDG_CACHE_HOME`` elsewhere.
    Each entry gets a safety tier from the classifier; entries below the
    threshold are never reported, whatever their tier.
    """

    id = "cache"
    name = "Cache"
    description = "Application caches at or above a minimum size"
    icon = "💾"
    large_bytes = 10 * GIB

    def __init__(
        self,
        min_size_bytes: int = GIB,
        classifier: SafetyClassifier | None = None,
        root: Path | None = None,
    ) -> None:
        if min_size_bytes < 0:
            raise ValueError("min_size_bytes must not be negative")
        self.min_size_bytes = min_size_bytes
        self.classifier = classifier or SafetyClassifier.default()
        self.root = root or os_cache_root()

    @classmethod
    def from_options(cls, options: CleanerOptions) -> Cleaner:
        return cls(
            min_size_bytes=options.min_size_bytes,
            classifier=SafetyClassifier.load(options.safety_table),
        )

    @property
    def unavailable_reason(self) -> str | None:
        if not self.root.is_dir():
            return "Cache directory not found"
        return None

    def safety_of(self, item: CleanableItem) -> str | None:
        return self.classifier.classify(_identifier(item))

    def scan(self) -> ScanResult:
        from devsweep.core.scanner import check_root, measure_dirs

        check_root(self.root)
        warnings: list[SizeComputationWarning] = []
        try:
            entries = sorted(self.root.iterdir())
        except OSError as e:
            raise ScanError(f"Cannot read cache directory {self.root}: {e}") from e

        candidates: list[Path] = []
        for entry in entries:
            try:
                if entry.is_dir() and not entry.is_symlink():
                    candidates.append(entry)
            except OSError as e:
                warnings.append(SizeComputationWarning(entry, e.strerror or str(e)))

        items: list[CleanableItem] = []
        for path, info in zip(candidates, measure_dirs(candidates)):
            warnings.extend(info.warnings)
            if info.size < self.min_size_bytes:
                continue
            identifier = path.name
            items.append(
                CleanableItem(
                    path=path,
                    size_bytes=info.size,
                    kind=self.name,
                    name=identifier,
                    safety=self.classifier.classify(identifier),
                    description=f"Application cache: {identifier}",
                )
            )

        items.sort(key=lambda i: (-(i.size_bytes or 0), i.name))
        log.info(
            "Cache: %d of %d entries at or above %s in %s",
            len(items),
            len(candidates),
            bytes_to_human(self.min_size_bytes),
            self.root,
        )
        return ScanResult(cleaner_id=self.id, cleaner_name=self.name, items=items, warnings=warnings)


def _identifier(item: CleanableItem) -> str:
    if item.is_path:
        return item.path.name
    return os.path.basename(str(item.path))
