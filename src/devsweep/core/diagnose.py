"""Search-only overview across every registered cleaner."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from devsweep.core.engine import ExecutionEngine
from devsweep.core.registry import CleanerRegistry
from devsweep.errors import ConfigError, ScanError
from devsweep.models.cleaner import Cleaner, CleanerOptions, ProjectDirCleaner
from devsweep.models.summary import SEARCH_ONLY

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DiagnosticCategory:
    """What one cleaner would reclaim."""

    cleaner_id: str
    name: str
    icon: str
    count: int
    total_bytes: int
    unknown_size_items: int
    is_large: bool
    command_hint: str


@dataclass(frozen=True, slots=True)
class SkippedCleaner:
    """A cleaner left out of the report, and why."""

    cleaner_id: str
    name: str
    reason: str


@dataclass(slots=True)
class DiagnosticReport:
    categories: list[DiagnosticCategory] = field(default_factory=list)
    skipped: list[SkippedCleaner] = field(default_factory=list)
    timestamp: str = ""

    @property
    def total_bytes(self) -> int:
        return sum(c.total_bytes for c in self.categories)


def command_hint(cleaner: Cleaner) -> str:
    """The interactive clean command for *cleaner*."""
    if isinstance(cleaner, ProjectDirCleaner):
        return f"devsweep clean {cleaner.id} -p {cleaner.root} -i"
    return f"devsweep clean {cleaner.id} -i"


def diagnose(
    registry: CleanerRegistry,
    options: CleanerOptions,
    *,
    threshold_bytes: int | None = None,
) -> DiagnosticReport:
    """Scan with every registered cleaner in search-only mode.

    Nothing is deleted. Cleaners that are unavailable, misconfigured or
    fail to scan are recorded in ``skipped``. Cleaners that find nothing,
    or less than *threshold_bytes*, are left out of ``categories``.
    """
    report = DiagnosticReport(timestamp=datetime.now().strftime("%Y-%m-%d %H:%M:%S"))

    for cls in registry:
        try:
            cleaner = registry.create(cls.id, options)
        except ConfigError as e:
            report.skipped.append(SkippedCleaner(cls.id, cls.name, str(e)))
            continue

        if not cleaner.is_available():
            reason = cleaner.unavailable_reason or "not available"
            log.debug("Skipping %s: %s", cls.id, reason)
            report.skipped.append(SkippedCleaner(cls.id, cls.name, reason))
            continue

        try:
            summary = ExecutionEngine().run(cleaner, SEARCH_ONLY)
        except ScanError as e:
            log.info("Scan failed for %s: %s", cls.id, e)
            report.skipped.append(SkippedCleaner(cls.id, cls.name, str(e)))
            continue
        except Exception as e:
            log.exception("Cleaner '%s' crashed during diagnostics", cls.id)
            report.skipped.append(SkippedCleaner(cls.id, cls.name, f"Unexpected error: {e}"))
            continue

        if not summary.items_found:
            continue
        if threshold_bytes is not None and summary.bytes_found < threshold_bytes:
            continue

        report.categories.append(
            DiagnosticCategory(
                cleaner_id=cleaner.id,
                name=cleaner.name,
                icon=cleaner.icon,
                count=summary.items_found,
                total_bytes=summary.bytes_found,
                unknown_size_items=summary.unknown_size_items,
                is_large=summary.bytes_found >= cleaner.large_bytes,
                command_hint=command_hint(cleaner),
            )
        )

    log.info("Diagnostics: %d categories, %d skipped", len(report.categories), len(report.skipped))
    return report
