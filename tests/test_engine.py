"""Tests for the execution engine."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from devsweep.core.engine import DONE, IDLE, NO, QUIT, YES, ExecutionEngine
from devsweep.errors import DeletionFailure, ScanError
from devsweep.models.cleaner import Cleaner
from devsweep.models.item import NEEDS_REVIEW, SAFE, UNKNOWN, CleanableItem, ScanResult
from devsweep.models.summary import DELETE, INTERACTIVE, SEARCH_ONLY


class FakeCleaner(Cleaner):
    """Test cleaner that records deletions instead of touching the filesystem."""

    id = "fake"
    name = "Fake"
    description = "A fake cleaner for testing"

    def __init__(self, items=(), fail_on=(), crash_on=(), scan_error=None):
        self.items = list(items)
        self.fail_on = set(fail_on)
        self.crash_on = set(crash_on)
        self.scan_error = scan_error
        self.deleted: list[CleanableItem] = []
        self.scans = 0

    def scan(self) -> ScanResult:
        self.scans += 1
        if self.scan_error:
            raise self.scan_error
        return ScanResult(cleaner_id=self.id, cleaner_name=self.name, items=list(self.items))

    def delete(self, item: CleanableItem) -> None:
        if item.path in self.fail_on:
            raise DeletionFailure(f"{item.path}: permission denied")
        if item.path in self.crash_on:
            raise RuntimeError("boom")
        self.deleted.append(item)


class TieredFakeCleaner(FakeCleaner):
    """Fake cleaner whose items carry their own safety tier."""

    id = "tiered"
    name = "Tiered"

    def safety_of(self, item: CleanableItem) -> str | None:
        return item.safety


def _item(name: str, size: int | None, safety: str | None = None) -> CleanableItem:
    return CleanableItem(path=Path("/work") / name, size_bytes=size, kind="Fake", name=name, safety=safety)


def _scripted(answers):
    answers = iter(answers)
    return lambda item: next(answers)


@pytest.fixture
def three_items():
    return [_item("a", 10), _item("b", 20), _item("c", 30)]


class TestSearchOnly:
    def test_reports_without_deleting(self, three_items):
        cleaner = FakeCleaner(three_items)
        summary = ExecutionEngine().run(cleaner, SEARCH_ONLY)

        assert cleaner.deleted == []
        assert summary.items_found == 3
        assert summary.bytes_found == 60
        assert summary.items_deleted == 0
        assert summary.bytes_freed == 0
        assert summary.items_skipped == 3
        assert summary.ok

    def test_reports_each_item_once(self, three_items):
        events: list[tuple[str, str]] = []
        engine = ExecutionEngine(on_progress=lambda item, status: events.append((item.name, status)))
        engine.run(FakeCleaner(three_items), SEARCH_ONLY)
        assert events == [("a", "found"), ("b", "found"), ("c", "found")]

    def test_never_prompts(self, three_items):
        def confirm(item):
            raise AssertionError("search mode must not prompt")

        ExecutionEngine(confirm=confirm).run(FakeCleaner(three_items), SEARCH_ONLY)

    def test_empty_scan(self):
        summary = ExecutionEngine().run(FakeCleaner(), SEARCH_ONLY)
        assert summary.items_found == 0
        assert summary.bytes_found == 0
        assert summary.ok


class TestDelete:
    def test_deletes_everything_in_order(self, three_items):
        cleaner = FakeCleaner(three_items)
        summary = ExecutionEngine().run(cleaner, DELETE)

        assert [i.name for i in cleaner.deleted] == ["a", "b", "c"]
        assert summary.items_deleted == 3
        assert summary.bytes_freed == 60
        assert summary.items_skipped == 0

    def test_failure_does_not_stop_the_run(self, three_items):
        cleaner = FakeCleaner(three_items, fail_on={Path("/work/b")})
        summary = ExecutionEngine().run(cleaner, DELETE)

        assert [i.name for i in cleaner.deleted] == ["a", "c"]
        assert summary.items_deleted == 2
        assert summary.bytes_freed == 40
        assert len(summary.failures) == 1
        assert summary.failures[0].item.name == "b"
        assert "permission denied" in summary.failures[0].reason
        assert not summary.ok

    def test_unexpected_exception_is_recorded(self, three_items):
        cleaner = FakeCleaner(three_items, crash_on={Path("/work/a")})
        summary = ExecutionEngine().run(cleaner, DELETE)

        assert summary.items_deleted == 2
        assert summary.failures[0].reason == "Unexpected error: boom"

    def test_unknown_size_counts_as_zero_freed(self):
        cleaner = FakeCleaner([_item("a", None), _item("b", 5)])
        summary = ExecutionEngine().run(cleaner, DELETE)

        assert summary.items_deleted == 2
        assert summary.bytes_found == 5
        assert summary.bytes_freed == 5
        assert summary.unknown_size_items == 1

    def test_progress_statuses(self, three_items):
        events: list[tuple[str, str]] = []
        cleaner = FakeCleaner(three_items, fail_on={Path("/work/c")})
        engine = ExecutionEngine(on_progress=lambda item, status: events.append((item.name, status)))
        engine.run(cleaner, DELETE)
        assert events == [("a", "deleted"), ("b", "deleted"), ("c", "failed")]


class TestInteractive:
    def test_yes_and_no(self, three_items):
        cleaner = FakeCleaner(three_items)
        engine = ExecutionEngine(confirm=_scripted([YES, NO, YES]))
        summary = engine.run(cleaner, INTERACTIVE)

        assert [i.name for i in cleaner.deleted] == ["a", "c"]
        assert summary.items_deleted == 2
        assert summary.items_skipped == 1
        assert summary.bytes_freed == 40
        assert not summary.quit_early

    def test_quit_leaves_the_rest_untouched(self, three_items):
        asked: list[str] = []

        def confirm(item):
            asked.append(item.name)
            return YES if item.name == "a" else QUIT

        cleaner = FakeCleaner(three_items)
        summary = ExecutionEngine(confirm=confirm).run(cleaner, INTERACTIVE)

        assert asked == ["a", "b"]
        assert [i.name for i in cleaner.deleted] == ["a"]
        assert summary.items_deleted == 1
        assert summary.items_skipped == 2
        assert summary.quit_early

    def test_quit_on_first_item(self, three_items):
        cleaner = FakeCleaner(three_items)
        summary = ExecutionEngine(confirm=_scripted([QUIT])).run(cleaner, INTERACTIVE)

        assert cleaner.deleted == []
        assert summary.items_skipped == 3
        assert summary.quit_early

    def test_failed_confirmed_delete(self, three_items):
        cleaner = FakeCleaner(three_items, fail_on={Path("/work/a")})
        summary = ExecutionEngine(confirm=_scripted([YES, YES, NO])).run(cleaner, INTERACTIVE)

        assert summary.items_deleted == 1
        assert summary.items_skipped == 1
        assert len(summary.failures) == 1

    def test_unknown_answer_raises(self, three_items):
        engine = ExecutionEngine(confirm=_scripted(["maybe"]))
        with pytest.raises(ValueError):
            engine.run(FakeCleaner(three_items), INTERACTIVE)

    def test_prompt_confirm_reads_answers(self, three_items, monkeypatch):
        from devsweep.core import engine as engine_mod

        monkeypatch.setattr(engine_mod.click, "prompt", lambda *a, **kw: "Q")
        assert engine_mod.prompt_confirm(three_items[0]) == QUIT

    def test_closed_input_stops_with_partial_summary(self, three_items, monkeypatch):
        from devsweep.core import engine as engine_mod

        replies = iter(["y"])

        def prompt(*args, **kwargs):
            try:
                return next(replies)
            except StopIteration:
                raise click.Abort() from None

        monkeypatch.setattr(engine_mod.click, "prompt", prompt)
        cleaner = FakeCleaner(three_items)
        engine = ExecutionEngine()
        summary = engine.run(cleaner, INTERACTIVE)

        assert [i.name for i in cleaner.deleted] == ["a"]
        assert summary.items_deleted == 1
        assert summary.items_skipped == 2
        assert summary.quit_early
        assert engine.state == DONE

    def test_eof_answers_quit(self, three_items, monkeypatch):
        from devsweep.core import engine as engine_mod

        def prompt(*args, **kwargs):
            raise EOFError

        monkeypatch.setattr(engine_mod.click, "prompt", prompt)
        assert engine_mod.prompt_confirm(three_items[0]) == QUIT


@pytest.mark.parametrize(
    "mode,answers",
    [
        (SEARCH_ONLY, []),
        (DELETE, []),
        (INTERACTIVE, [YES, NO, YES, YES]),
        (INTERACTIVE, [NO, QUIT]),
    ],
)
def test_counts_always_add_up(mode, answers):
    items = [_item("a", 1), _item("b", 2), _item("c", None), _item("d", 4)]
    cleaner = FakeCleaner(items, fail_on={Path("/work/d")})
    summary = ExecutionEngine(confirm=_scripted(answers)).run(cleaner, mode)

    assert summary.items_found == summary.items_deleted + summary.items_skipped + len(summary.failures)
    assert summary.bytes_found == 7
    assert summary.bytes_freed <= summary.bytes_found


class TestRun:
    def test_scan_error_propagates(self):
        engine = ExecutionEngine()
        cleaner = FakeCleaner(scan_error=ScanError("root missing"))

        assert engine.state == IDLE
        with pytest.raises(ScanError, match="root missing"):
            engine.run(cleaner, DELETE)
        assert engine.state == DONE

    def test_invalid_mode_rejected_before_scan(self):
        cleaner = FakeCleaner([_item("a", 1)])
        with pytest.raises(ValueError):
            ExecutionEngine().run(cleaner, "purge")
        assert cleaner.scans == 0

    def test_scans_exactly_once(self, three_items):
        cleaner = FakeCleaner(three_items)
        ExecutionEngine().run(cleaner, DELETE)
        assert cleaner.scans == 1

    def test_on_result_sees_items_before_deletion(self, three_items):
        seen: list[int] = []
        cleaner = FakeCleaner(three_items)
        engine = ExecutionEngine(on_result=lambda result: seen.append(len(cleaner.deleted)))
        engine.run(cleaner, DELETE)
        assert seen == [0]

    def test_state_is_done_after_run(self, three_items):
        engine = ExecutionEngine()
        engine.run(FakeCleaner(three_items), SEARCH_ONLY)
        assert engine.state == DONE

    def test_safe_only_filters_before_execution(self):
        items = [_item("a", 10, SAFE), _item("b", 20, NEEDS_REVIEW), _item("c", 30, UNKNOWN)]
        cleaner = TieredFakeCleaner(items)
        summary = ExecutionEngine().run(cleaner, DELETE, safe_only=True)

        assert [i.name for i in cleaner.deleted] == ["a"]
        assert summary.items_found == 1
        assert summary.bytes_found == 10

    def test_safe_only_rejected_without_tiers(self, three_items):
        cleaner = FakeCleaner(three_items)
        with pytest.raises(ValueError, match="no safety tiers"):
            ExecutionEngine().run(cleaner, DELETE, safe_only=True)
        assert cleaner.scans == 0
        assert cleaner.deleted == []

    def test_execute_existing_result(self, three_items):
        cleaner = FakeCleaner()
        result = ScanResult(cleaner_id="fake", cleaner_name="Fake", items=three_items)
        summary = ExecutionEngine().execute(result, DELETE, cleaner)

        assert cleaner.scans == 0
        assert summary.items_deleted == 3
        assert summary.cleaner_id == "fake"
        assert summary.mode == DELETE
