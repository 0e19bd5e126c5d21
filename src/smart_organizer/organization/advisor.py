"""Prompt construction and response parsing for an external organizing advisor."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Iterable, Protocol, runtime_checkable

from smart_organizer.errors import AdvisorError
from smart_organizer.scanning.models import FileEntry

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")

_INSTRUCTIONS = """You are a file organization expert. Analyze the user's request and organize the files below.

Rules:
1. Reply with JSON only, shaped as {"actions": [...]}. No explanations, code fences, or extra text.
2. If nothing needs organizing, reply with {"actions": []}.
3. Never use a "delete" action. Files must not be deleted.
4. For move and copy, "dest" must be a relative "folder/file" path.

Supported action types:
- move: move a file (requires "src" and "dest")
- copy: copy a file (requires "src" and "dest")
- rename: rename a file in place (requires "src" and "newName")
- mkdir: create a folder (requires "dest")"""


@runtime_checkable
class Completer(Protocol):
    """Text-completion backend used to obtain suggested actions.

    Implementations raise `AdvisorError` when the backend fails.
    """

    def complete(self, prompt: str) -> str: ...


def build_prompt(
    user_request: str,
    entries: Iterable[FileEntry],
    root: Path,
    *,
    max_listed_files: int = 30,
) -> str:
    """Build the advisor prompt for a request over scanned files.

    Args:
        user_request: Free-form organizing request from the user.
        entries: Scanned files offered to the advisor.
        root: Root the listed paths are made relative to.
        max_listed_files: Number of files listed individually.

    Returns:
        str: Prompt text.
    """

    entries = list(entries)
    lines = []
    for entry in entries[:max_listed_files]:
        try:
            relative = entry.path.relative_to(root).as_posix()
        except ValueError:
            relative = entry.path.as_posix()
        extension = entry.extension or "none"
        modified = entry.timestamp.isoformat() if entry.timestamp else "unknown"
        lines.append(f"- {relative} ({extension}, {entry.size} bytes, {modified})")
    remaining = len(entries) - max_listed_files
    if remaining > 0:
        lines.append(f"...and {remaining} more files")

    listing = "\n".join(lines) if lines else "(no files)"
    return (
        f"{_INSTRUCTIONS}\n\n"
        f"[User request]\n{user_request.strip()}\n\n"
        f"[Files]\n{listing}\n\n"
        "Return only the JSON object with the actions array."
    )


def parse_actions(text: str) -> list[Any]:
    """Extract the raw action list from advisor output.

    Surrounding chatter is ignored: the outermost `{...}` span is decoded
    and must carry an `actions` list. A bare JSON array is accepted as well.

    Raises:
        AdvisorError: If no JSON payload can be decoded or it lacks actions.
    """

    matches = [match for match in (_JSON_OBJECT.search(text), _JSON_ARRAY.search(text)) if match]
    if not matches:
        raise AdvisorError("Advisor response did not contain JSON", details={"response": text[:200]})
    matches.sort(key=lambda match: match.start())

    payload: Any = None
    error: json.JSONDecodeError | None = None
    for match in matches:
        try:
            payload = json.loads(match.group(0))
            break
        except json.JSONDecodeError as exc:
            error = error or exc
    else:
        raise AdvisorError("Advisor response is not valid JSON") from error

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("actions"), list):
        return payload["actions"]
    raise AdvisorError("Advisor response is missing an 'actions' list")


__all__ = ["Completer", "build_prompt", "parse_actions"]
