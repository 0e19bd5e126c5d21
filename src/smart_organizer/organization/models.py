"""Organization plan data models."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class MoveAction(BaseModel):
    """Represents moving a file to a new location.

    Attributes:
        src: File path prior to the move.
        dest: Destination file path, or destination directory when
            `into_directory` is set.
        into_directory: Append the source base name to `dest` on execution.
        reason: Optional explanation for the move.
    """

    kind: Literal["move"] = "move"
    src: Path
    dest: Path
    into_directory: bool = False
    reason: Optional[str] = None


class CopyAction(BaseModel):
    """Represents copying a file; fields mirror `MoveAction`."""

    kind: Literal["copy"] = "copy"
    src: Path
    dest: Path
    into_directory: bool = False
    reason: Optional[str] = None


class RenameAction(BaseModel):
    """Represents renaming a file within its directory."""

    kind: Literal["rename"] = "rename"
    src: Path
    new_name: str
    reason: Optional[str] = None

    @property
    def dest(self) -> Path:
        return self.src.parent / self.new_name


class WriteAction(BaseModel):
    """Represents writing text content to a (possibly new) file."""

    kind: Literal["write"] = "write"
    dest: Path
    content: str = ""
    reason: Optional[str] = None


class ModifyAction(BaseModel):
    """Represents overwriting an existing file in place."""

    kind: Literal["modify"] = "modify"
    src: Path
    content: str = ""
    reason: Optional[str] = None


class MkdirAction(BaseModel):
    """Represents creating a directory and any missing parents."""

    kind: Literal["mkdir"] = "mkdir"
    dest: Path
    reason: Optional[str] = None


ActionDescriptor = Annotated[
    Union[MoveAction, CopyAction, RenameAction, WriteAction, ModifyAction, MkdirAction],
    Field(discriminator="kind"),
]


class OrganizePlan(BaseModel):
    """Ordered list of actions; execution follows list order."""

    actions: List[ActionDescriptor] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)

    def add(self, action: ActionDescriptor) -> None:
        self.actions.append(action)

    def extend(self, other: "OrganizePlan") -> None:
        self.actions.extend(other.actions)
        self.notes.extend(other.notes)

    @property
    def moves(self) -> list[MoveAction]:
        return [action for action in self.actions if isinstance(action, MoveAction)]

    def __len__(self) -> int:
        return len(self.actions)


class ActionResult(BaseModel):
    """Outcome of executing one action.

    Attributes:
        kind: Action kind as reported to callers.
        action: The executed action, or None for unsupported inputs.
        success: Whether the action completed.
        error: Failure message when `success` is False.
        destination: Final path produced by the action, when applicable.
    """

    kind: str
    action: Optional[ActionDescriptor] = None
    success: bool
    error: Optional[str] = None
    destination: Optional[Path] = None

    def to_payload(self) -> dict[str, Any]:
        """Return the flat result shape used in JSON envelopes."""
        payload: dict[str, Any] = {"type": self.kind, "success": self.success}
        src = getattr(self.action, "src", None)
        if src is not None:
            payload["src"] = src.as_posix()
        if self.destination is not None:
            payload["dest"] = self.destination.as_posix()
        if isinstance(self.action, RenameAction):
            payload["newName"] = self.action.new_name
        if self.error is not None:
            payload["error"] = self.error
        return payload


class ActionRejection(BaseModel):
    """An untrusted action dropped during validation."""

    index: int
    kind: Optional[str] = None
    reason: str


class ValidationOutcome(BaseModel):
    """Accepted and rejected subsets of an untrusted action list."""

    accepted: List[ActionDescriptor] = Field(default_factory=list)
    rejected: List[ActionRejection] = Field(default_factory=list)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    def to_plan(self) -> OrganizePlan:
        return OrganizePlan(actions=list(self.accepted))


class OrganizeReport(BaseModel):
    """Result of one orchestrator invocation.

    Attributes:
        mode: Strategy that produced the plan.
        root: Organized root directory; None when the target path was unusable.
        recursive: Whether subdirectories were included.
        dry_run: Whether execution was skipped.
        success: False when the call failed as a whole.
        error: Failure message when `success` is False.
        plan: The executed (or previewed) plan.
        results: Per-action results, aligned with `plan.actions`.
        rejected: AI actions dropped by validation.
    """

    mode: str
    root: Optional[Path] = None
    recursive: bool = False
    dry_run: bool = False
    success: bool = True
    error: Optional[str] = None
    plan: OrganizePlan = Field(default_factory=OrganizePlan)
    results: List[ActionResult] = Field(default_factory=list)
    rejected: List[ActionRejection] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def moved(self) -> int:
        """Number of files moved (planned moves during a dry run)."""
        if self.dry_run:
            return len(self.plan.moves)
        return sum(1 for result in self.results if result.success and result.kind == "move")

    @property
    def renamed(self) -> int:
        """Number of files renamed (planned renames during a dry run)."""
        if self.dry_run:
            return sum(1 for action in self.plan.actions if action.kind == "rename")
        return sum(1 for result in self.results if result.success and result.kind == "rename")

    @property
    def summary(self) -> str:
        if self.dry_run:
            text = f"{len(self.plan)} action(s) planned; dry run, nothing executed"
        elif not self.results:
            text = "Nothing to execute"
        else:
            text = f"{self.succeeded} of {len(self.results)} action(s) succeeded"
        if self.rejected:
            text += f"; {len(self.rejected)} suggested action(s) rejected"
        return text

    def to_envelope(self) -> dict[str, Any]:
        """Return the success or error envelope for this report."""
        if not self.success:
            return {"success": False, "error": self.error or "Unknown error"}
        envelope: dict[str, Any] = {"success": True}
        if self.mode in {"temp", "archive"}:
            envelope["moved"] = self.moved
        if self.mode == "rename":
            envelope["renamed"] = self.renamed
        if self.mode == "ai":
            envelope["results"] = [result.to_payload() for result in self.results]
            envelope["summary"] = self.summary
        return envelope


__all__ = [
    "MoveAction",
    "CopyAction",
    "RenameAction",
    "WriteAction",
    "ModifyAction",
    "MkdirAction",
    "ActionDescriptor",
    "OrganizePlan",
    "ActionResult",
    "ActionRejection",
    "ValidationOutcome",
    "OrganizeReport",
]
