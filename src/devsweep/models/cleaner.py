"""Base cleaner interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from devsweep.errors import DeletionFailure
from devsweep.models.item import CleanableItem, ScanResult

log = logging.getLogger(__name__)

GIB = 1024**3


@dataclass(slots=True)
class CleanerOptions:
    """Everything the CLI layer can pass to a cleaner.

    Each cleaner picks the options that apply to it in ``from_options``.
    """

    root: Path = field(default_factory=lambda: Path("."))
    all_images: bool = False
    include_volumes: bool = False
    min_size_bytes: int = GIB
    safety_table: Path | None = None
    skip_dirs: tuple[str, ...] = ()


class Cleaner(ABC):
    """Base class for all cleaners.

    Every resource kind implements this interface to take part in
    scanning and execution.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Registry token, e.g. 'rust'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name, e.g. 'Rust'."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What this cleaner removes and why it's safe."""

    @property
    def icon(self) -> str:
        """Short display glyph. Cosmetic only."""
        return "🧹"

    # Diagnostics flag a category at or above this total as large.
    large_bytes: int = 5 * GIB

    @classmethod
    def from_options(cls, options: CleanerOptions) -> Cleaner:
        """Build an instance from CLI-level options."""
        return cls()

    @classmethod
    def has_safety_tiers(cls) -> bool:
        """Whether this cleaner classifies its items (overrides ``safety_of``)."""
        return cls.safety_of is not Cleaner.safety_of

    @abstractmethod
    def scan(self) -> ScanResult:
        """Scan for cleanable items. MUST NOT delete or modify anything.

        Raises:
            ScanError: If the search root or external engine is unusable.
        """

    def safety_of(self, item: CleanableItem) -> str | None:
        """Safety tier of *item*. None means no opinion."""
        return None

    def delete(self, item: CleanableItem) -> None:
        """Remove one scanned item.

        The default implementation removes filesystem items. Override in
        cleaners whose items are not paths (e.g. calling external commands).

        Raises:
            DeletionFailure: If the item could not be removed.
        """
        from devsweep.utils import remove_path

        if not item.is_path:
            raise DeletionFailure(f"{item.path}: not a filesystem item")
        remove_path(item.path)

    @property
    def unavailable_reason(self) -> str | None:
        """Why this cleaner cannot work on this system, or None if supported."""
        return None

    def is_available(self) -> bool:
        """Check if this cleaner is applicable on the current system."""
        return self.unavailable_reason is None


class ProjectDirCleaner(Cleaner, ABC):
    """Base class for cleaners that search a tree for conventionally named directories.

    Subclasses define metadata, ``_dir_names`` and optionally ``_markers``:
    glob patterns of which at least one must match next to the directory
    (``Cargo.toml`` beside ``target``). Search and measuring are provided.
    """

    _dir_names: tuple[str, ...] = ()
    _markers: tuple[str, ...] = ()

    def __init__(self, root: Path | str = ".", skip_dirs: tuple[str, ...] = ()) -> None:
        self.root = Path(root).expanduser().absolute()
        self.skip_dirs = tuple(skip_dirs)

    @classmethod
    def from_options(cls, options: CleanerOptions) -> Cleaner:
        return cls(root=options.root, skip_dirs=options.skip_dirs)

    def _accept(self, path: Path) -> bool:
        """Whether a directory with a matching name belongs to a project."""
        if not self._markers:
            return True
        parent = path.parent
        try:
            return any(any(parent.glob(pattern)) for pattern in self._markers)
        except OSError:
            return False

    def _describe(self, path: Path) -> str:
        return f"{self.name} {path.name} in {path.parent}"

    def scan(self) -> ScanResult:
        from devsweep.core.scanner import DEFAULT_PRUNE, find_named_dirs, measure_dirs

        found, warnings = find_named_dirs(
            self.root,
            self._dir_names,
            accept=self._accept,
            prune=DEFAULT_PRUNE | set(self.skip_dirs),
        )
        items: list[CleanableItem] = []
        for path, info in zip(found, measure_dirs(found)):
            warnings.extend(info.warnings)
            items.append(
                CleanableItem(
                    path=path,
                    size_bytes=info.size,
                    kind=self.name,
                    name=str(path.parent),
                    description=self._describe(path),
                )
            )

        log.info("%s: found %d directories under %s", self.name, len(items), self.root)
        return ScanResult(cleaner_id=self.id, cleaner_name=self.name, items=items, warnings=warnings)


class FixedDirCleaner(Cleaner, ABC):
    """Base class for cleaners that remove one or more well-known directories.

    Subclasses define metadata properties and ``_cache_dirs``. Missing
    directories are simply not reported.
    """

    @property
    @abstractmethod
    def _cache_dirs(self) -> tuple[Path, ...]:
        """Directories to clean."""

    @property
    def unavailable_reason(self) -> str | None:
        if not any(d.is_dir() for d in self._cache_dirs):
            return f"{self.name} not found"
        return None

    def scan(self) -> ScanResult:
        from devsweep.core.scanner import measure_dirs

        present = [d for d in self._cache_dirs if d.is_dir() and not d.is_symlink()]
        items: list[CleanableItem] = []
        warnings = []
        for cache_dir, info in zip(present, measure_dirs(present)):
            warnings.extend(info.warnings)
            items.append(
                CleanableItem(
                    path=cache_dir,
                    size_bytes=info.size,
                    kind=self.name,
                    name=str(cache_dir),
                    description=self.description,
                )
            )

        if not present:
            log.info("%s: no cache directory present", self.name)
        return ScanResult(cleaner_id=self.id, cleaner_name=self.name, items=items, warnings=warnings)
