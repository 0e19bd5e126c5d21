"""Executor for organization plans."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Iterable

from smart_organizer.cancellation import CancellationToken

from .models import (
    ActionResult,
    CopyAction,
    MkdirAction,
    ModifyAction,
    MoveAction,
    RenameAction,
    WriteAction,
)

LOGGER = logging.getLogger(__name__)


class ActionExecutor:
    """Apply actions sequentially, isolating each failure to its own result."""

    def __init__(self, cancel_token: CancellationToken | None = None) -> None:
        self.cancel_token = cancel_token

    def execute(self, actions: Iterable[Any]) -> list[ActionResult]:
        """Execute actions in order.

        Args:
            actions: Actions from a plan or validation outcome.

        Returns:
            list[ActionResult]: One result per input action, in input order.
        """

        results: list[ActionResult] = []
        for action in actions:
            if self.cancel_token is not None and self.cancel_token.cancelled:
                result = self._failure(action, "cancelled")
            else:
                result = self._execute_one(action)
            self._log_result(result)
            results.append(result)
        return results

    def _execute_one(self, action: Any) -> ActionResult:
        try:
            if isinstance(action, (MoveAction, CopyAction)):
                destination = self._transfer(action)
            elif isinstance(action, RenameAction):
                destination = self._rename(action)
            elif isinstance(action, WriteAction):
                action.dest.parent.mkdir(parents=True, exist_ok=True)
                action.dest.write_text(action.content, encoding="utf-8")
                destination = action.dest
            elif isinstance(action, ModifyAction):
                action.src.write_text(action.content, encoding="utf-8")
                destination = action.src
            elif isinstance(action, MkdirAction):
                action.dest.mkdir(parents=True, exist_ok=True)
                destination = action.dest
            else:
                return self._failure(action, "unsupported type")
        except (OSError, ValueError) as exc:
            return self._failure(action, str(exc))

        return ActionResult(kind=action.kind, action=action, success=True, destination=destination)

    def _transfer(self, action: MoveAction | CopyAction) -> Path:
        destination = action.dest / action.src.name if action.into_directory else action.dest
        if destination == action.src:
            return destination
        destination.parent.mkdir(parents=True, exist_ok=True)
        if destination.exists():
            raise FileExistsError(f"Destination already exists: {destination}")
        if isinstance(action, MoveAction):
            shutil.move(str(action.src), str(destination))
        else:
            shutil.copy2(action.src, destination)
        return destination

    def _rename(self, action: RenameAction) -> Path:
        destination = action.dest
        if destination.exists() and destination != action.src:
            raise FileExistsError(f"Destination already exists: {destination}")
        action.src.rename(destination)
        return destination

    def _failure(self, action: Any, error: str) -> ActionResult:
        kind = getattr(action, "kind", None)
        if not isinstance(kind, str):
            kind = type(action).__name__
        known = isinstance(
            action,
            (MoveAction, CopyAction, RenameAction, WriteAction, ModifyAction, MkdirAction),
        )
        return ActionResult(kind=kind, action=action if known else None, success=False, error=error)

    def _log_result(self, result: ActionResult) -> None:
        if result.success:
            LOGGER.info("%s -> %s", result.kind, result.destination)
        else:
            LOGGER.warning("%s failed: %s", result.kind, result.error)


__all__ = ["ActionExecutor"]
