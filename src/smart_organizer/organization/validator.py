"""Validation of untrusted, advisor-proposed actions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from smart_organizer.errors import PathViolationError
from smart_organizer.scanning.sandbox import PathSandbox

from .models import (
    ActionDescriptor,
    ActionRejection,
    CopyAction,
    MkdirAction,
    ModifyAction,
    MoveAction,
    RenameAction,
    ValidationOutcome,
    WriteAction,
)

LOGGER = logging.getLogger(__name__)

SUPPORTED_KINDS = frozenset({"move", "copy", "rename", "write", "modify", "mkdir"})
_DIRECTORY_SEPARATORS = ("/", "\\")


class _WireAction(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore", populate_by_name=True)

    reason: Optional[str] = None


class _WireMove(_WireAction):
    type: Literal["move"]
    src: str = Field(min_length=1)
    dest: str = Field(min_length=1)


class _WireCopy(_WireAction):
    type: Literal["copy"]
    src: str = Field(min_length=1)
    dest: str = Field(min_length=1)


class _WireRename(_WireAction):
    type: Literal["rename"]
    src: str = Field(min_length=1)
    new_name: str = Field(alias="newName", min_length=1)


class _WireWrite(_WireAction):
    type: Literal["write"]
    dest: str = Field(min_length=1)
    content: str


class _WireModify(_WireAction):
    type: Literal["modify"]
    src: str = Field(min_length=1)
    content: str


class _WireMkdir(_WireAction):
    type: Literal["mkdir"]
    dest: str = Field(min_length=1)


_WIRE_ADAPTER: TypeAdapter[Any] = TypeAdapter(
    Annotated[
        Union[_WireMove, _WireCopy, _WireRename, _WireWrite, _WireModify, _WireMkdir],
        Field(discriminator="type"),
    ]
)


class _Rejected(Exception):
    """Internal signal carrying a rejection reason."""


class ActionValidator:
    """Filter untrusted action dictionaries down to safe, typed actions.

    Every path is resolved through the sandbox; sources must be files seen
    by the scan that produced `known_paths`. Deletion is never accepted.
    """

    def __init__(
        self,
        sandbox: PathSandbox,
        known_paths: Iterable[Path],
        *,
        min_destination_length: int = 3,
    ) -> None:
        self.sandbox = sandbox
        self.known_paths = {Path(path) for path in known_paths}
        self.min_destination_length = min_destination_length

    def validate(self, raw_actions: Any) -> ValidationOutcome:
        """Split `raw_actions` into accepted actions and rejections.

        Args:
            raw_actions: Decoded advisor output; expected to be a list of
                mappings keyed by `type` (or `kind`).

        Returns:
            ValidationOutcome: Accepted actions in input order plus a
            rejection record for every dropped item.
        """

        outcome = ValidationOutcome()
        if not isinstance(raw_actions, list):
            outcome.rejected.append(ActionRejection(index=0, reason="actions must be a list"))
            return outcome

        for index, item in enumerate(raw_actions):
            kind = self._kind_of(item)
            try:
                outcome.accepted.append(self._validate_one(item, kind))
            except _Rejected as exc:
                outcome.rejected.append(ActionRejection(index=index, kind=kind, reason=str(exc)))
            except PathViolationError as exc:
                outcome.rejected.append(ActionRejection(index=index, kind=kind, reason=exc.message))

        for rejection in outcome.rejected:
            LOGGER.info(
                "Rejected action #%d (%s): %s",
                rejection.index,
                rejection.kind or "unknown",
                rejection.reason,
            )
        return outcome

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _kind_of(self, item: Any) -> Optional[str]:
        if not isinstance(item, dict):
            return None
        kind = item.get("type", item.get("kind"))
        return kind if isinstance(kind, str) else None

    def _validate_one(self, item: Any, kind: Optional[str]) -> ActionDescriptor:
        if not isinstance(item, dict):
            raise _Rejected("action must be an object")
        if kind is None:
            raise _Rejected("missing action type")
        if kind == "delete":
            raise _Rejected("delete actions are not permitted")
        if kind not in SUPPORTED_KINDS:
            raise _Rejected(f"unsupported type '{kind}'")

        payload = dict(item)
        payload["type"] = kind
        try:
            wire = _WIRE_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"][1:]) or "action"
            raise _Rejected(f"{location}: {first['msg']}") from exc

        if isinstance(wire, (_WireMove, _WireCopy)):
            src = self._known_source(wire.src)
            into_directory = wire.dest.endswith(_DIRECTORY_SEPARATORS)
            stripped = wire.dest.rstrip("/\\")
            if not stripped:
                raise PathViolationError(wire.dest, self.sandbox.root)
            dest = self._destination(stripped)
            if dest == self.sandbox.root and not into_directory:
                raise _Rejected("destination is the root directory")
            model = MoveAction if isinstance(wire, _WireMove) else CopyAction
            return model(src=src, dest=dest, into_directory=into_directory, reason=wire.reason)

        if isinstance(wire, _WireRename):
            src = self._known_source(wire.src)
            new_name = wire.new_name
            if (
                new_name in {".", ".."}
                or "\x00" in new_name
                or any(sep in new_name for sep in _DIRECTORY_SEPARATORS)
            ):
                raise _Rejected("new name must be a plain file name")
            if not self.sandbox.contains(src.parent / new_name):
                raise PathViolationError(src.parent / new_name, self.sandbox.root)
            return RenameAction(src=src, new_name=new_name, reason=wire.reason)

        if isinstance(wire, _WireWrite):
            dest = self._destination(wire.dest)
            if dest == self.sandbox.root:
                raise _Rejected("destination is the root directory")
            return WriteAction(dest=dest, content=wire.content, reason=wire.reason)

        if isinstance(wire, _WireModify):
            src = self._known_source(wire.src)
            return ModifyAction(src=src, content=wire.content, reason=wire.reason)

        return MkdirAction(dest=self._destination(wire.dest), reason=wire.reason)

    def _known_source(self, raw: str) -> Path:
        src = self.sandbox.resolve(raw)
        if src not in self.known_paths:
            raise _Rejected(f"source is not a scanned file: {raw}")
        return src

    def _destination(self, raw: str) -> Path:
        dest = self.sandbox.resolve(raw)
        if len(str(dest)) < self.min_destination_length:
            raise _Rejected("destination path is too short")
        return dest


__all__ = ["SUPPORTED_KINDS", "ActionValidator"]
