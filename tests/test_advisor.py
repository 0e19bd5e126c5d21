"""Tests for advisor prompt building and response parsing."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from smart_organizer.errors import AdvisorError
from smart_organizer.organization.advisor import build_prompt, parse_actions
from smart_organizer.scanning.models import FileEntry


def _entry(root: Path, name: str, size: int = 10) -> FileEntry:
    path = root / name
    return FileEntry(
        path=path,
        name=path.name,
        size=size,
        modified_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        extension=path.suffix.lower(),
    )


def test_prompt_lists_files_and_truncates(tmp_path: Path) -> None:
    entries = [_entry(tmp_path, f"file{index}.txt") for index in range(5)]

    prompt = build_prompt("Sort my notes", entries, tmp_path, max_listed_files=3)

    assert "Sort my notes" in prompt
    assert "- file0.txt (.txt, 10 bytes, 2024-01-02T03:04:05+00:00)" in prompt
    assert "file3.txt" not in prompt
    assert "...and 2 more files" in prompt
    assert '{"actions": [...]}' in prompt
    assert "delete" in prompt


def test_prompt_uses_root_relative_paths(tmp_path: Path) -> None:
    prompt = build_prompt("tidy", [_entry(tmp_path, "sub/report.pdf")], tmp_path)

    assert "- sub/report.pdf (.pdf" in prompt
    assert "more files" not in prompt


def test_parse_actions_ignores_surrounding_chatter() -> None:
    text = 'Sure! Here you go:\n{"actions": [{"type": "mkdir", "dest": "docs"}]}\nThanks.'

    assert parse_actions(text) == [{"type": "mkdir", "dest": "docs"}]


def test_parse_actions_accepts_bare_array() -> None:
    assert parse_actions('[{"type": "move", "src": "a", "dest": "b/a"}]') == [
        {"type": "move", "src": "a", "dest": "b/a"}
    ]


@pytest.mark.parametrize(
    "text",
    ["no json here", '{"actions": "nope"}', '{"steps": []}', "{not valid json}"],
)
def test_parse_actions_rejects_unusable_output(text: str) -> None:
    with pytest.raises(AdvisorError):
        parse_actions(text)
