"""Run mode constants and the run summary dataclass."""

from __future__ import annotations

from dataclasses import dataclass

from devsweep.models.item import CleanableItem

SEARCH_ONLY = "search"
INTERACTIVE = "interactive"
DELETE = "delete"

RUN_MODES = (SEARCH_ONLY, INTERACTIVE, DELETE)


def validate_mode(mode: str) -> str:
    """Return *mode* unchanged, or raise ValueError for an unknown mode."""
    if mode not in RUN_MODES:
        raise ValueError(f"Unknown run mode {mode!r}, expected one of {', '.join(RUN_MODES)}")
    return mode


@dataclass(frozen=True, slots=True)
class ItemFailure:
    """An item the engine tried and failed to delete."""

    item: CleanableItem
    reason: str


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Aggregated result of one execution.

    ``items_found`` always equals ``items_deleted + items_skipped +
    len(failures)``.
    """

    cleaner_id: str
    mode: str
    items_found: int = 0
    bytes_found: int = 0
    items_deleted: int = 0
    bytes_freed: int = 0
    items_skipped: int = 0
    failures: tuple[ItemFailure, ...] = ()
    warnings: int = 0
    unknown_size_items: int = 0
    quit_early: bool = False

    @property
    def ok(self) -> bool:
        """True when no item failed to delete."""
        return not self.failures
