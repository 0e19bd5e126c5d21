"""Tests for duplicate detection."""

from pathlib import Path

import pytest

from smart_organizer.cancellation import CancellationToken
from smart_organizer.config.models import DuplicateOptions
from smart_organizer.duplicates import ContentHasher, DuplicateDetector
from smart_organizer.errors import FilesystemError, OperationCancelled
from smart_organizer.scanning import DirectoryScanner


def _scan(root: Path, recursive: bool = False):
    return DirectoryScanner(recursive=recursive).scan(root)


def test_identical_files_form_one_group(tmp_path: Path) -> None:
    payload = b"a" * 100
    (tmp_path / "a.bin").write_bytes(payload)
    (tmp_path / "b.bin").write_bytes(payload)
    (tmp_path / "c.bin").write_bytes(b"c" * 100)
    root = tmp_path.resolve()

    detector = DuplicateDetector()
    groups = detector.find_groups(_scan(root))

    assert len(groups) == 1
    assert [entry.name for entry in groups[0].members] == ["a.bin", "b.bin"]
    assert groups[0].size == 100

    plan = detector.build_plan(groups, root)
    assert [(move.src.name, move.dest) for move in plan.moves] == [
        ("b.bin", root / "_duplicates_to_review" / "b_duplicate1.bin")
    ]


def test_unique_sizes_are_never_hashed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "one.txt").write_text("1", encoding="utf-8")
    (tmp_path / "two.txt").write_text("22", encoding="utf-8")
    (tmp_path / "three.txt").write_text("333", encoding="utf-8")
    hashed: list[Path] = []
    original = ContentHasher.digest

    def _recording_digest(self: ContentHasher, path: Path) -> str:
        hashed.append(path)
        return original(self, path)

    monkeypatch.setattr(ContentHasher, "digest", _recording_digest)

    groups = DuplicateDetector().find_groups(_scan(tmp_path))

    assert groups == []
    assert hashed == []


def test_unhashable_files_are_dropped(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("a.txt", "b.txt", "c.txt"):
        (tmp_path / name).write_text("same", encoding="utf-8")
    original = ContentHasher.digest

    def _failing_digest(self: ContentHasher, path: Path) -> str:
        if path.name == "b.txt":
            raise FilesystemError("unreadable", path=str(path))
        return original(self, path)

    monkeypatch.setattr(ContentHasher, "digest", _failing_digest)

    groups = DuplicateDetector(DuplicateOptions(max_workers=2)).find_groups(_scan(tmp_path))

    assert [[entry.name for entry in group.members] for group in groups] == [["a.txt", "c.txt"]]


def test_recursive_names_carry_folder_prefix(tmp_path: Path) -> None:
    (tmp_path / "photos" / "sub").mkdir(parents=True)
    (tmp_path / "img.png").write_bytes(b"png-bytes")
    (tmp_path / "photos" / "sub" / "img.png").write_bytes(b"png-bytes")
    (tmp_path / "photos" / "copy.png").write_bytes(b"png-bytes")
    root = tmp_path.resolve()

    detector = DuplicateDetector()
    groups = detector.find_groups(_scan(root, recursive=True))
    plan = detector.build_plan(groups, root, recursive=True)

    assert [move.dest.name for move in plan.moves] == [
        "photos_copy_duplicate1.png",
        "photos_sub_img_duplicate2.png",
    ]


def test_review_folder_is_excluded(tmp_path: Path) -> None:
    review = tmp_path / "_duplicates_to_review"
    review.mkdir()
    (review / "a_duplicate1.txt").write_text("same", encoding="utf-8")
    (tmp_path / "a.txt").write_text("same", encoding="utf-8")
    root = tmp_path.resolve()

    groups = DuplicateDetector().find_groups(
        _scan(root, recursive=True), exclude_dir=root / "_duplicates_to_review"
    )

    assert groups == []


def test_sha256_can_be_configured(tmp_path: Path) -> None:
    target = tmp_path / "file.bin"
    target.write_bytes(b"abc")

    digest = ContentHasher("sha256", chunk_size=1).digest(target)

    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_cancel_during_hashing_skips_queued_files(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    for index in range(40):
        (tmp_path / f"file{index:02d}.bin").write_bytes(f"{index:04d}".encode())
    token = CancellationToken()
    hashed: list[Path] = []
    original = ContentHasher.digest

    def _cancelling_digest(self: ContentHasher, path: Path) -> str:
        hashed.append(path)
        token.cancel()
        return original(self, path)

    monkeypatch.setattr(ContentHasher, "digest", _cancelling_digest)
    detector = DuplicateDetector(DuplicateOptions(max_workers=1), cancel_token=token)

    with pytest.raises(OperationCancelled):
        detector.find_groups(_scan(tmp_path))

    assert len(hashed) == 1
