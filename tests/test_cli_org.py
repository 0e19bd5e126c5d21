"""CLI integration tests for `smart-organizer org`."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from smart_organizer.cli import SizeParamType, cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        dict[str, str]: Environment mapping with HOME set.
    """
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


def _make_root(tmp_path: Path) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    return root


def test_cli_org_extension_mode_moves_files(tmp_path: Path) -> None:
    root = _make_root(tmp_path)
    (root / "doc.txt").write_text("hello", encoding="utf-8")
    (root / "README").write_text("readme", encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["org", str(root), "--mode", "extension"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    assert (root / "txt" / "doc.txt").exists()
    assert (root / "no_extension" / "README").exists()
    assert "Organization summary" in result.output


def test_cli_org_json_emits_envelope(tmp_path: Path) -> None:
    root = _make_root(tmp_path)
    (root / "scratch.tmp").write_text("x", encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["org", str(root), "--mode", "temp", "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"success": True, "moved": 1}
    assert (root / "_temp_files_to_review" / "scratch.tmp").exists()


def test_cli_org_dry_run_leaves_files(tmp_path: Path) -> None:
    root = _make_root(tmp_path)
    (root / "doc.txt").write_text("hello", encoding="utf-8")

    result = CliRunner().invoke(
        cli,
        ["org", str(root), "--mode", "extension", "--dry-run", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["success"] is True
    assert payload["dry_run"] is True
    assert payload["plan"][0]["kind"] == "move"
    assert (root / "doc.txt").exists()
    assert not (root / "txt").exists()


def test_cli_org_size_threshold_accepts_units(tmp_path: Path) -> None:
    root = _make_root(tmp_path)
    (root / "big.bin").write_bytes(b"x" * 2048)
    (root / "small.bin").write_bytes(b"x" * 512)

    result = CliRunner().invoke(
        cli,
        ["org", str(root), "--mode", "size", "--threshold", "1KB", "--quiet"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert (root / "_large_files_to_review" / "big.bin").exists()
    assert (root / "small.bin").exists()
    assert result.output.strip() == ""


def test_cli_org_size_without_threshold_fails(tmp_path: Path) -> None:
    root = _make_root(tmp_path)
    (root / "big.bin").write_bytes(b"x" * 2048)

    result = CliRunner().invoke(
        cli, ["org", str(root), "--mode", "size"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    assert "threshold" in result.output
    assert (root / "big.bin").exists()


def test_cli_org_ai_mode_reads_actions_file(tmp_path: Path) -> None:
    root = _make_root(tmp_path)
    (root / "a.txt").write_text("a", encoding="utf-8")
    actions_file = tmp_path / "actions.json"
    actions_file.write_text(
        json.dumps(
            {
                "actions": [
                    {"type": "move", "src": "a.txt", "dest": "notes/a.txt"},
                    {"type": "delete", "src": "a.txt"},
                ]
            }
        ),
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        cli,
        ["org", str(root), "--mode", "ai", "--actions", str(actions_file)],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert (root / "notes" / "a.txt").exists()
    assert "Rejected action #1" in result.output


def test_cli_org_ai_mode_requires_actions(tmp_path: Path) -> None:
    root = _make_root(tmp_path)

    result = CliRunner().invoke(
        cli, ["org", str(root), "--mode", "ai"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    assert "--actions is required" in result.output


def test_cli_org_rejects_json_with_quiet(tmp_path: Path) -> None:
    root = _make_root(tmp_path)

    result = CliRunner().invoke(
        cli,
        ["org", str(root), "--mode", "extension", "--json", "--quiet"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 1
    assert "--json cannot be combined with --quiet" in result.output


@pytest.mark.parametrize(
    ("value", "expected"),
    [("500", 500), ("10KB", 10 * 1024), ("1.5mb", int(1.5 * 1024**2)), ("2 GB", 2 * 1024**3)],
)
def test_size_param_type_parses_units(value: str, expected: int) -> None:
    assert SizeParamType().convert(value, None, None) == expected


def test_cli_org_rename_mode_strips_pattern(tmp_path: Path) -> None:
    root = _make_root(tmp_path)
    (root / "Invoice_FINAL.pdf").write_bytes(b"pdf")

    result = CliRunner().invoke(
        cli,
        ["org", str(root), "--mode", "rename", "--pattern", "_final", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"success": True, "renamed": 1}
    assert (root / "Invoice.pdf").exists()
