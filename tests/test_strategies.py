"""Tests for rule-based classification strategies."""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from smart_organizer.classification import (
    ArchiveStrategy,
    DateStrategy,
    DestinationAllocator,
    ExtensionStrategy,
    PatternRenameStrategy,
    SizeStrategy,
    TempStrategy,
    is_temporary,
    prune_empty_directories,
)
from smart_organizer.errors import InvalidRequestError
from smart_organizer.scanning import DirectoryScanner


def _scan(root: Path, recursive: bool = False):
    return DirectoryScanner(recursive=recursive).scan(root)


def test_extension_strategy_groups_by_lowercase_extension(tmp_path: Path) -> None:
    for name in ("a.txt", "b.TXT", "c"):
        (tmp_path / name).write_text(name, encoding="utf-8")
    root = tmp_path.resolve()

    plan = ExtensionStrategy().build_plan(_scan(root), root)

    destinations = {move.src.name: move.dest for move in plan.moves}
    assert destinations == {
        "a.txt": root / "txt" / "a.txt",
        "b.TXT": root / "txt" / "b.TXT",
        "c": root / "no_extension" / "c",
    }


def test_allocator_appends_numeric_suffixes(tmp_path: Path) -> None:
    (tmp_path / "report.pdf").write_text("existing", encoding="utf-8")
    allocator = DestinationAllocator()
    candidate = tmp_path / "report.pdf"

    first = allocator.allocate(tmp_path / "a" / "report.pdf", candidate)
    second = allocator.allocate(tmp_path / "b" / "report.pdf", candidate)

    assert first == tmp_path / "report_1.pdf"
    assert second == tmp_path / "report_2.pdf"
    assert allocator.allocate(candidate, candidate) is None


@pytest.mark.parametrize(
    "name",
    ["notes.tmp", "BACKUP.BAK", "~$report.docx", "~lock", ".DS_Store", "Thumbs.db", "movie.part"],
)
def test_temporary_names_match(name: str) -> None:
    assert is_temporary(name)


@pytest.mark.parametrize("name", ["report.pdf", "template.docx", "partial.txt", "catalog"])
def test_regular_names_do_not_match(name: str) -> None:
    assert not is_temporary(name)


def test_temp_strategy_skips_review_folder(tmp_path: Path) -> None:
    review = tmp_path / "_temp_files_to_review"
    review.mkdir()
    (review / "old.tmp").write_text("x", encoding="utf-8")
    (tmp_path / "new.tmp").write_text("y", encoding="utf-8")
    (tmp_path / "keep.txt").write_text("z", encoding="utf-8")
    root = tmp_path.resolve()

    plan = TempStrategy().build_plan(_scan(root, recursive=True), root)

    assert [(move.src.name, move.dest) for move in plan.moves] == [
        ("new.tmp", root / "_temp_files_to_review" / "new.tmp")
    ]


def test_size_strategy_requires_threshold() -> None:
    with pytest.raises(InvalidRequestError):
        SizeStrategy(None)
    with pytest.raises(InvalidRequestError):
        SizeStrategy(-1)


def test_size_strategy_moves_files_strictly_above_threshold(tmp_path: Path) -> None:
    (tmp_path / "small.bin").write_bytes(b"x" * 10)
    (tmp_path / "exact.bin").write_bytes(b"x" * 50)
    (tmp_path / "large.bin").write_bytes(b"x" * 100)
    root = tmp_path.resolve()

    plan = SizeStrategy(50).build_plan(_scan(root), root)

    assert [move.src.name for move in plan.moves] == ["large.bin"]
    assert plan.moves[0].dest == root / "_large_files_to_review" / "large.bin"


def test_date_strategy_buckets_by_local_month(tmp_path: Path) -> None:
    target = tmp_path / "photo.jpg"
    target.write_bytes(b"jpg")
    stamp = datetime(2023, 3, 15, 12, 0, 0).timestamp()
    os.utime(target, (stamp, stamp))
    root = tmp_path.resolve()

    plan = DateStrategy().build_plan(_scan(root), root)

    assert plan.moves[0].dest == root / "2023-03" / "photo.jpg"


def test_date_flatten_plan_lifts_nested_files(tmp_path: Path) -> None:
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "top.txt").write_text("top", encoding="utf-8")
    (tmp_path / "a" / "top.txt").write_text("nested", encoding="utf-8")
    (tmp_path / "a" / "b" / "deep.txt").write_text("deep", encoding="utf-8")
    root = tmp_path.resolve()

    plan = DateStrategy().flatten_plan(_scan(root, recursive=True), root)

    assert [(move.src.relative_to(root).as_posix(), move.dest.name) for move in plan.moves] == [
        ("a/top.txt", "top_1.txt"),
        ("a/b/deep.txt", "deep.txt"),
    ]


def test_prune_empty_directories_keeps_non_empty(tmp_path: Path) -> None:
    (tmp_path / "empty" / "nested").mkdir(parents=True)
    (tmp_path / "full").mkdir()
    (tmp_path / "full" / "file.txt").write_text("x", encoding="utf-8")

    removed = prune_empty_directories(tmp_path)

    assert not (tmp_path / "empty").exists()
    assert (tmp_path / "full" / "file.txt").exists()
    assert tmp_path.exists()
    assert tmp_path / "empty" / "nested" in removed


def test_archive_strategy_moves_old_files(tmp_path: Path) -> None:
    old = tmp_path / "old.log"
    old.write_text("old", encoding="utf-8")
    fresh = tmp_path / "fresh.log"
    fresh.write_text("fresh", encoding="utf-8")
    past = (datetime.now(timezone.utc) - timedelta(days=45)).timestamp()
    os.utime(old, (past, past))
    root = tmp_path.resolve()

    plan = ArchiveStrategy(min_age_days=30).build_plan(_scan(root), root)

    assert [(move.src.name, move.dest) for move in plan.moves] == [
        ("old.log", root / "archive" / "old.log")
    ]


def test_pattern_rename_strips_literal_text_ignoring_case(tmp_path: Path) -> None:
    for name in ("report_COPY.txt", "notes_copy_copy.md", "plain.txt"):
        (tmp_path / name).write_text(name, encoding="utf-8")
    (tmp_path / "report.txt").write_text("existing", encoding="utf-8")
    root = tmp_path.resolve()

    plan = PatternRenameStrategy("_copy").build_plan(_scan(root), root)

    assert [(action.src.name, action.new_name) for action in plan.actions] == [
        ("notes_copy_copy.md", "notes_copy.md"),
        ("report_COPY.txt", "report_1.txt"),
    ]


def test_pattern_rename_supports_regex_and_case_sensitivity(tmp_path: Path) -> None:
    for name in ("IMG_0001.jpg", "img_0002.jpg", "IMG.jpg"):
        (tmp_path / name).write_bytes(b"jpg")
    root = tmp_path.resolve()

    strategy = PatternRenameStrategy(r"^IMG_(?=\d)", use_regex=True, case_sensitive=True)
    plan = strategy.build_plan(_scan(root), root)

    assert [(action.src.name, action.new_name) for action in plan.actions] == [
        ("IMG_0001.jpg", "0001.jpg"),
    ]


def test_pattern_rename_leaves_names_that_would_vanish(tmp_path: Path) -> None:
    (tmp_path / "draft").write_text("x", encoding="utf-8")
    root = tmp_path.resolve()

    plan = PatternRenameStrategy("DRAFT").build_plan(_scan(root), root)

    assert len(plan) == 0


@pytest.mark.parametrize(
    ("pattern", "use_regex"),
    [(None, False), ("", True), ("([unclosed", True)],
)
def test_pattern_rename_rejects_missing_or_invalid_patterns(
    pattern: str | None, use_regex: bool
) -> None:
    with pytest.raises(InvalidRequestError):
        PatternRenameStrategy(pattern, use_regex=use_regex)
