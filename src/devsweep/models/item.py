"""Scanned item dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# Safety tiers. Only cache-style cleaners attach one; elsewhere it is None.
SAFE = "safe"
NEEDS_REVIEW = "needs_review"
UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class CleanableItem:
    """Single deletable unit discovered by a cleaner.

    ``path`` is a filesystem location for directory items and an opaque
    engine identifier (image ID, container ID, volume name) otherwise.
    ``size_bytes`` is ``None`` when the size is unknown.
    """

    path: Path | str
    size_bytes: int | None
    kind: str
    name: str = ""
    safety: str | None = None
    resource_type: str = "directory"
    description: str = ""

    @property
    def is_path(self) -> bool:
        """Whether ``path`` refers to the filesystem."""
        return isinstance(self.path, Path)


@dataclass(frozen=True, slots=True)
class SizeComputationWarning:
    """A subtree or entry that could not be measured."""

    path: Path
    reason: str


@dataclass(slots=True)
class ScanResult:
    """Result of one cleaner scan."""

    cleaner_id: str
    cleaner_name: str
    items: list[CleanableItem] = field(default_factory=list)
    warnings: list[SizeComputationWarning] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        """Sum of all known item sizes."""
        return sum(i.size_bytes for i in self.items if i.size_bytes is not None)

    @property
    def unknown_size_count(self) -> int:
        return sum(1 for i in self.items if i.size_bytes is None)
