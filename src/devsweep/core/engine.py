"""Search, interactive and delete execution of one cleaner."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

import click

from devsweep.core.safety import filter_safe
from devsweep.errors import DeletionFailure
from devsweep.models.cleaner import Cleaner
from devsweep.models.item import CleanableItem, ScanResult
from devsweep.models.summary import (
    DELETE,
    INTERACTIVE,
    SEARCH_ONLY,
    ItemFailure,
    RunSummary,
    validate_mode,
)
from devsweep.utils import bytes_to_human

log = logging.getLogger(__name__)

# Answers to the per-item confirmation.
YES = "yes"
NO = "no"
QUIT = "quit"

# Engine states.
IDLE = "idle"
SCANNING = "scanning"
REPORTING = "reporting"
CONFIRMING = "confirming"
DELETING = "deleting"
DONE = "done"

ConfirmFn = Callable[[CleanableItem], str]
ProgressCallback = Callable[[CleanableItem, str], None]  # (item, status)
ResultCallback = Callable[[ScanResult], None]

_ANSWERS = {"y": YES, "yes": YES, "n": NO, "no": NO, "q": QUIT, "quit": QUIT}


def prompt_confirm(item: CleanableItem) -> str:
    """Ask on the terminal whether to delete *item*.

    End of input (Ctrl-D, closed stdin) answers QUIT.
    """
    try:
        raw = click.prompt(
            f"Delete {item.path} ({bytes_to_human(item.size_bytes)})? [y/n/q]",
            type=click.Choice(sorted(_ANSWERS), case_sensitive=False),
            default="n",
            show_choices=False,
            show_default=False,
        )
    except (click.Abort, EOFError):
        log.info("Input closed, stopping")
        return QUIT
    return _ANSWERS[raw.lower()]


@dataclass(slots=True)
class _Tally:
    """Mutable accumulator behind a RunSummary. Counters only grow."""

    items_found: int = 0
    bytes_found: int = 0
    items_deleted: int = 0
    bytes_freed: int = 0
    items_skipped: int = 0
    failures: list[ItemFailure] = field(default_factory=list)
    warnings: int = 0
    unknown_size_items: int = 0
    quit_early: bool = False

    def freeze(self, cleaner_id: str, mode: str) -> RunSummary:
        return RunSummary(
            cleaner_id=cleaner_id,
            mode=mode,
            items_found=self.items_found,
            bytes_found=self.bytes_found,
            items_deleted=self.items_deleted,
            bytes_freed=self.bytes_freed,
            items_skipped=self.items_skipped,
            failures=tuple(self.failures),
            warnings=self.warnings,
            unknown_size_items=self.unknown_size_items,
            quit_early=self.quit_early,
        )


class ExecutionEngine:
    """Drives one cleaner through scanning and the chosen run mode.

    Items are processed exactly once, in scan order. Nothing outside the
    scan result is ever touched.
    """

    def __init__(
        self,
        confirm: ConfirmFn | None = None,
        on_progress: ProgressCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> None:
        self._confirm = confirm or prompt_confirm
        self._on_progress = on_progress
        self._on_result = on_result
        self.state = IDLE

    def run(self, cleaner: Cleaner, mode: str, *, safe_only: bool = False) -> RunSummary:
        """Scan with *cleaner* and execute *mode* on the result.

        Args:
            cleaner: The cleaner to drive.
            mode: One of SEARCH_ONLY, INTERACTIVE, DELETE.
            safe_only: Drop every item not classified safe before execution.
                Only valid for cleaners with safety tiers.

        Raises:
            ScanError: If the scan fails. No summary is produced.
            ValueError: On an unknown mode, or *safe_only* for a cleaner
                without safety tiers.
        """
        validate_mode(mode)
        if safe_only and not cleaner.has_safety_tiers():
            raise ValueError(f"Cleaner '{cleaner.id}' has no safety tiers, safe-only does not apply")
        self._set_state(SCANNING)
        try:
            result = cleaner.scan()
        except Exception:
            self._set_state(DONE)
            raise

        if safe_only:
            result = filter_safe(result)
        if self._on_result:
            self._on_result(result)
        return self.execute(result, mode, cleaner)

    def execute(self, result: ScanResult, mode: str, cleaner: Cleaner) -> RunSummary:
        """Apply *mode* to an existing scan result."""
        validate_mode(mode)
        items = list(result.items)
        tally = _Tally(
            items_found=len(items),
            bytes_found=result.total_bytes,
            warnings=len(result.warnings),
            unknown_size_items=result.unknown_size_count,
        )

        if mode == SEARCH_ONLY:
            self._set_state(REPORTING)
            for item in items:
                self._progress(item, "found")
            tally.items_skipped = len(items)
        elif mode == INTERACTIVE:
            self._set_state(CONFIRMING)
            self._run_interactive(cleaner, items, tally)
        elif mode == DELETE:
            self._set_state(DELETING)
            for item in items:
                self._delete_one(cleaner, item, tally)

        self._set_state(DONE)
        summary = tally.freeze(result.cleaner_id, mode)
        log.info(
            "%s (%s): %d found, %d deleted, %d skipped, %d failed, %s freed",
            result.cleaner_name,
            mode,
            summary.items_found,
            summary.items_deleted,
            summary.items_skipped,
            len(summary.failures),
            bytes_to_human(summary.bytes_freed),
        )
        return summary

    def _run_interactive(self, cleaner: Cleaner, items: list[CleanableItem], tally: _Tally) -> None:
        for index, item in enumerate(items):
            answer = self._confirm(item)
            if answer == QUIT:
                remaining = len(items) - index
                tally.items_skipped += remaining
                tally.quit_early = True
                log.info("Stopped by user, %d items left untouched", remaining)
                return
            if answer == YES:
                self._delete_one(cleaner, item, tally)
            elif answer == NO:
                tally.items_skipped += 1
                self._progress(item, "skipped")
            else:
                raise ValueError(f"Unknown confirmation answer {answer!r}")

    def _delete_one(self, cleaner: Cleaner, item: CleanableItem, tally: _Tally) -> None:
        """Delete one item, recording a failure instead of raising."""
        try:
            cleaner.delete(item)
        except (DeletionFailure, OSError) as e:
            log.warning("Could not delete %s: %s", item.path, e)
            tally.failures.append(ItemFailure(item=item, reason=str(e)))
            self._progress(item, "failed")
            return
        except Exception as e:
            log.exception("Cleaner '%s' crashed deleting %s", cleaner.id, item.path)
            tally.failures.append(ItemFailure(item=item, reason=f"Unexpected error: {e}"))
            self._progress(item, "failed")
            return

        tally.items_deleted += 1
        tally.bytes_freed += item.size_bytes or 0
        self._progress(item, "deleted")

    def _progress(self, item: CleanableItem, status: str) -> None:
        if self._on_progress:
            self._on_progress(item, status)

    def _set_state(self, state: str) -> None:
        log.debug("Engine state: %s -> %s", self.state, state)
        self.state = state
