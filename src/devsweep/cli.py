"""CLI interface for devsweep."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from devsweep.core.cleaner_loader import load_cleaners
from devsweep.core.diagnose import DiagnosticReport
from devsweep.core.diagnose import diagnose as run_diagnostics
from devsweep.core.engine import ExecutionEngine
from devsweep.core.registry import CleanerRegistry
from devsweep.errors import ConfigError, ScanError
from devsweep.models.cleaner import GIB, CleanerOptions
from devsweep.models.item import NEEDS_REVIEW, SAFE, CleanableItem, ScanResult
from devsweep.models.summary import DELETE, INTERACTIVE, SEARCH_ONLY, RunSummary
from devsweep.settings import Settings
from devsweep.utils import bytes_to_human


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _icon(cls: type) -> str:
    """Class-level icon; cleaners that keep the base property get the default glyph."""
    icon = getattr(cls, "icon", None)
    return icon if isinstance(icon, str) else "🧹"


def _build_registry(settings: Settings) -> CleanerRegistry:
    registry = CleanerRegistry()
    load_cleaners(registry, settings)
    return registry


def _options(
    settings: Settings,
    root: Path,
    min_size_gb: float | None,
    *,
    all_images: bool = False,
    include_volumes: bool = False,
) -> CleanerOptions:
    """CleanerOptions from command-line values, falling back to settings."""
    if min_size_gb is None:
        min_size_gb = float(settings.get("cache.min_size_gb", 1.0))
    table = settings.get("cache.safety_table")
    return CleanerOptions(
        root=root,
        all_images=all_images,
        include_volumes=include_volumes,
        min_size_bytes=int(min_size_gb * GIB),
        safety_table=Path(table).expanduser() if table else None,
        skip_dirs=tuple(settings.get("scan.skip_dirs", [])),
    )


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """devsweep: find and remove disposable developer artifacts."""
    _setup_logging(verbose)


# ── list ─────────────────────────────────────────────────────────────────

def _unavailable_reason(registry: CleanerRegistry, token: str) -> str | None:
    """Why *token* cannot run here, or None. Built with default options."""
    try:
        return registry.create(token).unavailable_reason
    except ConfigError as e:
        return str(e)


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(as_json: bool) -> None:
    """List available cleaners."""
    registry = _build_registry(Settings.instance())
    reasons = {token: _unavailable_reason(registry, token) for token in registry.tokens()}

    if as_json:
        data = [
            {
                "id": cls.id,
                "name": cls.name,
                "icon": _icon(cls),
                "description": cls.description,
                "available": reasons[cls.id] is None,
                "unavailable_reason": reasons[cls.id],
            }
            for cls in registry
        ]
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    for cls in registry:
        reason = reasons[cls.id]
        if reason is None:
            status = click.style("available", fg="green")
        else:
            status = click.style(f"not available ({reason})", fg="bright_black")
        click.echo(f"  {_icon(cls)} {click.style(cls.id, fg='cyan', bold=True):20s}  {cls.name:12s} {status}")
        click.echo(f"      {cls.description}")


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("target")
@click.option(
    "--path", "-p", "root", default=".", show_default=True,
    type=click.Path(file_okay=False, path_type=Path), help="Directory to search",
)
@click.option("--search", "-s", "mode", flag_value=SEARCH_ONLY, default=True, help="Only report (default)")
@click.option("--interactive", "-i", "mode", flag_value=INTERACTIVE, help="Confirm each item before deleting")
@click.option("--delete", "-d", "mode", flag_value=DELETE, help="Delete every item without asking")
@click.option("--all", "-a", "all_images", is_flag=True, help="Docker: include all unused images")
@click.option("--volumes", "include_volumes", is_flag=True, help="Docker: include unused volumes")
@click.option("--min-size", type=click.FloatRange(min=0), default=None, help="Cache: minimum entry size in GB")
@click.option("--safe-only", is_flag=True, help="Cache: only keep entries known to be safe")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(
    target: str,
    root: Path,
    mode: str,
    all_images: bool,
    include_volumes: bool,
    min_size: float | None,
    safe_only: bool,
    as_json: bool,
) -> None:
    """Find (and optionally delete) items for one TARGET cleaner."""
    settings = Settings.instance()
    registry = _build_registry(settings)

    if target not in registry:
        click.echo(f"Unknown target '{target}'. Available: {', '.join(registry.tokens())}", err=True)
        sys.exit(1)
    if as_json and mode == INTERACTIVE:
        raise click.UsageError("--json cannot be combined with --interactive")

    # Safe-only is meaningful only for cleaners that classify their items;
    # the saved setting applies to those and is ignored elsewhere.
    tiered = registry.get(target).has_safety_tiers()
    if safe_only and not tiered:
        raise click.UsageError(f"--safe-only only applies to cleaners with safety tiers, not '{target}'")
    safe_only = tiered and (safe_only or bool(settings.get("cache.safe_only", False)))

    options = _options(settings, root, min_size, all_images=all_images, include_volumes=include_volumes)
    try:
        cleaner = registry.create(target, options)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    def on_result(result: ScanResult) -> None:
        if not as_json:
            _print_scan(result)

    def on_progress(item: CleanableItem, status: str) -> None:
        if as_json:
            return
        if status == "deleted":
            click.echo(f"  {click.style('✓', fg='green')} {item.path}")
        elif status == "failed":
            click.echo(f"  {click.style('✗', fg='red')} {item.path}")

    if not as_json:
        click.echo(f"\n{cleaner.icon} {click.style(f'Scanning {cleaner.name}...', bold=True)}\n")

    engine = ExecutionEngine(on_progress=on_progress, on_result=on_result)
    try:
        summary = engine.run(cleaner, mode, safe_only=safe_only)
    except ScanError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(_summary_to_dict(summary), indent=2, ensure_ascii=False))
        return
    _print_summary(summary)


def _print_scan(result: ScanResult) -> None:
    if not result.items:
        click.echo(click.style(f"Nothing to clean for {result.cleaner_name}.", fg="green"))
        return

    click.echo(
        f"Found {click.style(str(len(result.items)), fg='yellow', bold=True)} items "
        f"(total {click.style(bytes_to_human(result.total_bytes), fg='yellow', bold=True)})\n"
    )
    for i, item in enumerate(result.items, 1):
        label = item.name or str(item.path)
        line = f"  {i:>3}. {label} — {bytes_to_human(item.size_bytes)}"
        if item.safety is not None:
            color = {SAFE: "green", NEEDS_REVIEW: "yellow"}.get(item.safety, "bright_black")
            line += f"  {click.style(f'[{item.safety}]', fg=color)}"
        click.echo(line)
    click.echo()


def _print_summary(summary: RunSummary) -> None:
    if summary.mode == SEARCH_ONLY:
        if summary.items_found:
            click.echo(click.style("Search mode: nothing was deleted.", fg="bright_black"))
            click.echo(click.style("Use --delete (-d) to delete, or --interactive (-i) to confirm each item.", fg="bright_black"))
    else:
        click.echo(
            f"\nDeleted {click.style(str(summary.items_deleted), fg='green', bold=True)} of {summary.items_found} items, "
            f"freed {click.style(bytes_to_human(summary.bytes_freed), fg='green', bold=True)}"
        )
        if summary.items_skipped:
            click.echo(f"  Skipped: {summary.items_skipped}")
        if summary.quit_early:
            click.echo(click.style("  Stopped early at your request.", fg="yellow"))
        for failure in summary.failures:
            click.echo(f"  {click.style('!', fg='yellow')} {failure.item.path}: {failure.reason}")

    if summary.unknown_size_items:
        click.echo(click.style(f"  {summary.unknown_size_items} item(s) of unknown size", fg="bright_black"))
    if summary.warnings:
        click.echo(click.style(f"  {summary.warnings} path(s) could not be measured", fg="yellow"))
    click.echo()


def _summary_to_dict(summary: RunSummary) -> dict[str, Any]:
    return {
        "cleaner": summary.cleaner_id,
        "mode": summary.mode,
        "items_found": summary.items_found,
        "bytes_found": summary.bytes_found,
        "items_deleted": summary.items_deleted,
        "bytes_freed": summary.bytes_freed,
        "items_skipped": summary.items_skipped,
        "unknown_size_items": summary.unknown_size_items,
        "warnings": summary.warnings,
        "quit_early": summary.quit_early,
        "failures": [{"path": str(f.item.path), "reason": f.reason} for f in summary.failures],
    }


# ── diagnose ─────────────────────────────────────────────────────────────

_MAX_HINTS = 5


@main.command()
@click.option(
    "--path", "-p", "root", default=".", show_default=True,
    type=click.Path(file_okay=False, path_type=Path), help="Directory to search for projects",
)
@click.option("--threshold", type=click.FloatRange(min=0), default=None, help="Only show categories of at least this many GB")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def diagnose(root: Path, threshold: float | None, as_json: bool) -> None:
    """Search with every cleaner and summarize what could be reclaimed."""
    settings = Settings.instance()
    registry = _build_registry(settings)
    options = _options(settings, root, None)
    threshold_bytes = int(threshold * GIB) if threshold is not None else None

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Running diagnostics...\n")
    report = run_diagnostics(registry, options, threshold_bytes=threshold_bytes)

    if as_json:
        click.echo(json.dumps(_report_to_dict(report), indent=2, ensure_ascii=False))
        return
    _print_report(report)


def _print_report(report: DiagnosticReport) -> None:
    if not report.categories:
        click.echo(click.style("Nothing to clean.", fg="green"))
    for category in report.categories:
        size = click.style(bytes_to_human(category.total_bytes), fg="yellow", bold=True)
        large = click.style("  [large]", fg="yellow") if category.is_large else ""
        click.echo(f"  {category.icon} {category.name:20s} — {size} ({category.count:,} items){large}")

    for skipped in report.skipped:
        click.echo(
            f"  {click.style('✗', fg='bright_black')} {skipped.name:20s} — "
            f"{click.style(skipped.reason, fg='bright_black')}"
        )

    click.echo(f"\nTotal reclaimable: {click.style(bytes_to_human(report.total_bytes), fg='green', bold=True)}")
    if report.categories:
        click.echo("\nNext steps:")
        for category in report.categories[:_MAX_HINTS]:
            click.echo(f"  {click.style(category.command_hint, fg='bright_black')}")
        if len(report.categories) > _MAX_HINTS:
            click.echo(f"  ... and {len(report.categories) - _MAX_HINTS} more")
    click.echo(click.style(f"\nDiagnosed at {report.timestamp}\n", fg="bright_black"))


def _report_to_dict(report: DiagnosticReport) -> dict[str, Any]:
    return {
        "categories": [
            {
                "cleaner": c.cleaner_id,
                "name": c.name,
                "icon": c.icon,
                "count": c.count,
                "total_bytes": c.total_bytes,
                "unknown_size_items": c.unknown_size_items,
                "is_large": c.is_large,
                "command_hint": c.command_hint,
            }
            for c in report.categories
        ],
        "skipped": [{"cleaner": s.cleaner_id, "reason": s.reason} for s in report.skipped],
        "total_bytes": report.total_bytes,
        "timestamp": report.timestamp,
    }


# ── config ───────────────────────────────────────────────────────────────

@main.group()
def config() -> None:
    """Settings management commands."""


@config.command("show")
def config_show() -> None:
    """Show effective settings."""
    settings = Settings.instance()
    click.echo(f"# {settings.path}")
    click.echo(json.dumps(settings.as_dict(), indent=2, ensure_ascii=False))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set KEY (dot notation) to VALUE. VALUE is parsed as JSON when possible."""
    try:
        parsed: Any = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    Settings.instance().set(key, parsed)
    click.echo(f"{key} = {json.dumps(parsed, ensure_ascii=False)}")
